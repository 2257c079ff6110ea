"""Cookie parser stage.

Parses the Cookie header into `ctx.cookies`. Values written by the
frontend with a `j:` prefix are decoded as JSON.
"""

from starlette.requests import cookie_parser
from starlette.types import Receive, Scope, Send

from app.context import RequestContext
from app.middleware.base import PipelineStage
from lib.sanitize import decode_json_cookie


class CookieParserMiddleware(PipelineStage):
    name = "cookie_parser"

    async def process(
        self, ctx: RequestContext, scope: Scope, receive: Receive, send: Send
    ) -> None:
        raw = ctx.headers.get("cookie")
        ctx.cookies = (
            {key: decode_json_cookie(value) for key, value in cookie_parser(raw).items()}
            if raw
            else {}
        )
        await self.app(scope, receive, send)
