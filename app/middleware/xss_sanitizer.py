"""XSS sanitizer stage.

Escapes HTML-significant characters in body and query string values so
markup submitted by a client is stored and echoed as text.
"""

from starlette.types import Receive, Scope, Send

from app.context import RequestContext
from app.middleware.base import PipelineStage
from lib.sanitize import escape_html, escape_query


class XssSanitizerMiddleware(PipelineStage):
    name = "xss_sanitizer"

    async def process(
        self, ctx: RequestContext, scope: Scope, receive: Receive, send: Send
    ) -> None:
        ctx.body = escape_html(ctx.body)

        escaped = escape_query(ctx.query)
        if escaped != ctx.query:
            ctx.query = escaped
            ctx.commit_query(scope)

        await self.app(scope, receive, send)
