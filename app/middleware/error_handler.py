"""Error handling stage for the request pipeline.

This middleware wraps every other stage. It catches any exception raised by
a stage or route handler, translates it into an ApiError and writes the
JSON error envelope:

    {"success": false, "error": "Too many requests, please try again later."}

It also opens the request context for the pipeline and applies the response
headers stages registered on it (security headers, rate limit counters) to
every outgoing response.
"""

from __future__ import annotations

import logging

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.context import RequestContext
from app.exceptions import error_response, log_error, translate_exception

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware:
    """Catch failures from the pipeline and convert them to HTTP responses.

    This middleware catches:
    - ApiError hierarchy: status code and message of the error
        - MalformedBodyError → 400
        - AuthError → 401
        - NotFoundError → 404
        - TooManyRequestsError → 429
    - Database and validation errors: translated by `translate_exception`
    - Other exceptions: 500, message hidden in production

    Note:
        An exception raised after the response has started cannot be turned
        into an error response; it is logged and re-raised for the server.
    """

    name = "error_handler"

    def __init__(self, app: ASGIApp, production: bool = True) -> None:
        self.app = app
        self.production = production

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        ctx = RequestContext.from_scope(scope)
        response_started = False
        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started, status_code
            if message["type"] == "http.response.start":
                response_started = True
                status_code = message["status"]
                headers = MutableHeaders(scope=message)
                for name, value in ctx.response_headers.items():
                    headers.setdefault(name, value)
            elif message["type"] == "http.response.body":
                ctx.response_size += len(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)

        except Exception as exc:
            ctx.fail()
            if response_started:
                logger.exception(f"Error after response started: {ctx.method} {ctx.path}")
                raise

            ctx.stage = self.name
            ctx.trail.append(self.name)
            error = translate_exception(exc, production=self.production)
            log_error(error, exc, ctx.method, ctx.path)
            await error_response(error)(scope, receive, send_wrapper)

        finally:
            ctx.finish(status_code)
