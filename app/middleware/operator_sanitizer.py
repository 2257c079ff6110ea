"""Operator injection sanitizer stage.

Removes keys starting with "$" or containing "." from the body, multipart
form fields and the query string, so a payload like
`{"email": {"$gt": ""}}` never reaches a database filter.
"""

from __future__ import annotations

from starlette.types import Receive, Scope, Send

from app.context import RequestContext
from app.middleware.base import PipelineStage
from lib.sanitize import strip_operator_keys, strip_operator_query


class OperatorSanitizerMiddleware(PipelineStage):
    name = "operator_sanitizer"

    def __init__(self, app, replace_with: str | None = None) -> None:
        super().__init__(app)
        self.replace_with = replace_with

    async def process(
        self, ctx: RequestContext, scope: Scope, receive: Receive, send: Send
    ) -> None:
        ctx.body = strip_operator_keys(ctx.body, self.replace_with)
        ctx.form = strip_operator_keys(ctx.form, self.replace_with)

        sanitized = strip_operator_query(ctx.query, self.replace_with)
        if sanitized != ctx.query:
            ctx.query = sanitized
            ctx.commit_query(scope)

        await self.app(scope, receive, send)
