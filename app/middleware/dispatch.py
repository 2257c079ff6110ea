"""Router dispatch stage.

Innermost stage: marks the request as dispatched and hands it to the
FastAPI router. Unmatched paths become a 404 error envelope through the
app's HTTPException handler.
"""

from starlette.types import Receive, Scope, Send

from app.context import RequestContext
from app.middleware.base import PipelineStage


class DispatchMiddleware(PipelineStage):
    name = "dispatch"

    async def process(
        self, ctx: RequestContext, scope: Scope, receive: Receive, send: Send
    ) -> None:
        ctx.dispatch()
        await self.app(scope, receive, send)
