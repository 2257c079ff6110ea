"""HTTP parameter pollution stage.

`?sort=name&sort=-averageCost` reaches the handler as `sort=-averageCost`:
repeated query keys collapse to their last value. The full list of values
stays available in `ctx.query_polluted`.
"""

from __future__ import annotations

from collections.abc import Iterable

from starlette.types import Receive, Scope, Send

from app.context import RequestContext
from app.middleware.base import PipelineStage
from lib.sanitize import collapse_repeated


class ParamPollutionMiddleware(PipelineStage):
    name = "param_pollution"

    def __init__(self, app, whitelist: Iterable[str] = ()) -> None:
        super().__init__(app)
        self.whitelist = frozenset(whitelist)

    async def process(
        self, ctx: RequestContext, scope: Scope, receive: Receive, send: Send
    ) -> None:
        collapsed, polluted = collapse_repeated(ctx.query, self.whitelist)
        if polluted:
            ctx.query = collapsed
            ctx.query_polluted.update(polluted)
            ctx.commit_query(scope)
        await self.app(scope, receive, send)
