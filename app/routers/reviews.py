# =============================================================================
# app/routers/reviews.py - Review Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path

from app.dependencies import ContextDep
from core.services import ResourceService

router = APIRouter()

TABLE = "reviews"


@router.get("")
def list_reviews(ctx: ContextDep):
    """List reviews, optionally filtered by ?bootcamp=<id>."""
    return ResourceService.list_resources(TABLE, ctx.query_params)


@router.get("/{resource_id}")
def get_review(resource_id: Annotated[str, Path(description="Review ID")]):
    return ResourceService.get_resource(TABLE, resource_id)
