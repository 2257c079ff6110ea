"""Cross-origin policy stage.

Wraps Starlette's CORSMiddleware so it takes part in the ordered pipeline.
Preflight requests are answered here and never reach a router. Any other
OPTIONS request is answered with 204 and the allowed methods.
"""

from __future__ import annotations

from collections.abc import Sequence

from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from app.context import RequestContext
from app.middleware.base import PipelineStage

DEFAULT_METHODS = ("GET", "HEAD", "PUT", "PATCH", "POST", "DELETE")


class CrossOriginMiddleware(PipelineStage):
    name = "cors"

    def __init__(
        self,
        app,
        allow_origins: Sequence[str] = ("*",),
        allow_methods: Sequence[str] = DEFAULT_METHODS,
        allow_headers: Sequence[str] = ("*",),
        allow_credentials: bool = False,
    ) -> None:
        super().__init__(app)
        self.allow_methods = ", ".join(allow_methods)
        self.cors = CORSMiddleware(
            self._forward,
            allow_origins=allow_origins,
            allow_methods=allow_methods,
            allow_headers=allow_headers,
            allow_credentials=allow_credentials,
        )

    async def process(
        self, ctx: RequestContext, scope: Scope, receive: Receive, send: Send
    ) -> None:
        await self.cors(scope, receive, send)

    async def _forward(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["method"] == "OPTIONS":
            response = Response(status_code=204, headers={"Allow": self.allow_methods})
            await response(scope, receive, send)
            return
        await self.app(scope, receive, send)
