"""Body parser stage.

Reads the whole request body into the request context and parses JSON
bodies. Later stages sanitize `ctx.body` in place; the route handler then
receives the sanitized body re-encoded as JSON.
"""

from __future__ import annotations

import json

from starlette.requests import Request
from starlette.types import Message, Receive, Scope, Send

from app.context import RequestContext
from app.exceptions import MalformedBodyError, PayloadTooLargeError
from app.middleware.base import PipelineStage


def is_json_media_type(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


class BodyParserMiddleware(PipelineStage):
    """Parse JSON request bodies into `ctx.body`.

    - Empty bodies become `{}`.
    - Invalid JSON (or invalid UTF-8) raises `MalformedBodyError`.
    - In strict mode only objects and arrays are accepted at the top level.
    - JSON bodies over `limit` bytes raise `PayloadTooLargeError`.
    """

    name = "body_parser"

    def __init__(self, app, limit: int = 100 * 1024, strict: bool = True) -> None:
        super().__init__(app)
        self.limit = limit
        self.strict = strict

    async def process(
        self, ctx: RequestContext, scope: Scope, receive: Receive, send: Send
    ) -> None:
        is_json = is_json_media_type(ctx.headers.get("content-type", ""))

        if is_json:
            declared = ctx.headers.get("content-length")
            if declared and declared.isdigit() and int(declared) > self.limit:
                raise PayloadTooLargeError()

        chunks: list[bytes] = []
        size = 0
        async for chunk in Request(scope, receive).stream():
            size += len(chunk)
            if is_json and size > self.limit:
                raise PayloadTooLargeError()
            chunks.append(chunk)
        ctx.raw_body = b"".join(chunks)

        if is_json and ctx.raw_body.strip():
            ctx.body = self._parse(ctx.raw_body)
            ctx.body_is_json = True

        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": ctx.replay_body(), "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    def _parse(self, raw: bytes):
        try:
            parsed = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise MalformedBodyError(f"Malformed JSON in request body: {e}") from e

        if self.strict and not isinstance(parsed, (dict, list)):
            raise MalformedBodyError("Request body must be a JSON object or array")
        return parsed
