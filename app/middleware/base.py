"""Base class for request pipeline stages.

Stages are plain ASGI middleware so they can rewrite the request body and
query string that the route handler finally sees. Each stage records itself
on the request context before doing any work.
"""

from __future__ import annotations

from typing import ClassVar

from starlette.types import ASGIApp, Receive, Scope, Send

from app.context import RequestContext


class PipelineStage:
    """ASGI middleware that takes part in the ordered request pipeline.

    Subclasses set `name` and override `process()`; the default forwards the
    request unchanged. Non-HTTP scopes (lifespan, websockets) bypass the
    pipeline entirely.

    Usage:
        ```python
        class TimingStage(PipelineStage):
            name = "timing"

            async def process(self, ctx, scope, receive, send):
                await self.app(scope, receive, send)
        ```
    """

    name: ClassVar[str] = "stage"

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        ctx = RequestContext.from_scope(scope)
        ctx.advance(self.name)
        await self.process(ctx, scope, receive, send)

    async def process(
        self, ctx: RequestContext, scope: Scope, receive: Receive, send: Send
    ) -> None:
        await self.app(scope, receive, send)
