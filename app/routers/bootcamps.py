# =============================================================================
# app/routers/bootcamps.py - Bootcamp Endpoints
# =============================================================================
# Public read access to bootcamps.
# Query parameters reach these handlers already sanitized by the pipeline.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path

from app.dependencies import ContextDep
from core.services import ResourceService

router = APIRouter()

TABLE = "bootcamps"


@router.get("")
def list_bootcamps(ctx: ContextDep):
    """
    List bootcamps.

    Supports select, sort, page and limit plus equality filters on any column.
    """
    return ResourceService.list_resources(TABLE, ctx.query_params)


@router.get("/{resource_id}")
def get_bootcamp(
    resource_id: Annotated[str, Path(description="Bootcamp ID")],
):
    """Get a single bootcamp."""
    return ResourceService.get_resource(TABLE, resource_id)
