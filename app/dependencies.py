# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.context import RequestContext


def get_request_context(request: Request) -> RequestContext:
    """
    Get the context the request pipeline built for this request.

    Falls back to a fresh context when a handler runs without the pipeline
    (e.g. a router mounted on a bare app in tests).
    """
    return RequestContext.from_scope(request.scope)


# Type alias for dependency injection
ContextDep = Annotated[RequestContext, Depends(get_request_context)]
