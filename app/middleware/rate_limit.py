"""Rate limiting stage.

Counts requests per client in fixed windows using the app's
RateLimitStore. The request that exceeds the limit raises
TooManyRequestsError and is never forwarded.
"""

from __future__ import annotations

import logging
import math

from starlette.types import Receive, Scope, Send

from app.context import RequestContext
from app.exceptions import TooManyRequestsError
from app.middleware.base import PipelineStage
from lib.rate_limit_store import RateLimitStore

logger = logging.getLogger(__name__)


class RateLimitMiddleware(PipelineStage):
    """Allow at most `max_requests` per client within each window.

    Registers X-RateLimit-Limit, X-RateLimit-Remaining and X-RateLimit-Reset
    on the response (allowed and rejected alike).

    Note:
        With `trust_proxy` the client is identified by the first address in
        X-Forwarded-For. Only enable it behind a proxy that sets the header.
    """

    name = "rate_limiter"

    def __init__(
        self,
        app,
        store: RateLimitStore,
        max_requests: int = 100,
        trust_proxy: bool = False,
    ) -> None:
        super().__init__(app)
        self.store = store
        self.max_requests = max_requests
        self.trust_proxy = trust_proxy

    def client_key(self, ctx: RequestContext) -> str:
        if self.trust_proxy:
            forwarded = ctx.headers.get("x-forwarded-for")
            if forwarded:
                return forwarded.split(",", 1)[0].strip()
        return ctx.client_ip

    async def process(
        self, ctx: RequestContext, scope: Scope, receive: Receive, send: Send
    ) -> None:
        key = self.client_key(ctx)
        window = self.store.hit(key)
        remaining = max(self.max_requests - window.count, 0)

        ctx.response_headers.update({
            "X-RateLimit-Limit": str(self.max_requests),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(math.ceil(window.reset_at)),
        })

        if window.count > self.max_requests:
            retry_after = max(math.ceil(window.reset_at - self.store.now()), 1)
            logger.warning(f"Rate limit exceeded for {key} ({window.count} requests)")
            raise TooManyRequestsError(retry_after=retry_after)

        await self.app(scope, receive, send)
