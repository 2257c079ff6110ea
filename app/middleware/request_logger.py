"""Development request logging stage.

Emits one line per request once the response has finished, including
responses produced by the error handling stage:

    GET /api/v1/bootcamps?page=2 200 4.118 ms - 512

Only installed when NODE_ENV is "development".
"""

import time
from logging import Logger, getLogger

from starlette.types import Receive, Scope, Send

from app.context import RequestContext
from app.middleware.base import PipelineStage

# Use a separate logger so access lines can be routed independently
logger: Logger = getLogger("app.access")


class RequestLoggerMiddleware(PipelineStage):
    """Log method, path, status, latency and response size for every request.

    Note:
        The line is written from a finish callback, so error responses
        produced by outer stages are logged as well.
    """

    name = "request_logger"

    async def process(
        self, ctx: RequestContext, scope: Scope, receive: Receive, send: Send
    ) -> None:
        path: str = ctx.path
        if scope.get("query_string"):
            path += f"?{scope['query_string'].decode('latin-1')}"

        start_time: float = time.perf_counter()

        def log_request(status_code: int) -> None:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            size = ctx.response_size if ctx.response_size else "-"
            logger.info(f"{ctx.method} {path} {status_code} {elapsed_ms:.3f} ms - {size}")

        ctx.on_finish(log_request)
        await self.app(scope, receive, send)
