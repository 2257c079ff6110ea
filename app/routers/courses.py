# =============================================================================
# app/routers/courses.py - Course Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path

from app.dependencies import ContextDep
from core.services import ResourceService

router = APIRouter()

TABLE = "courses"


@router.get("")
def list_courses(ctx: ContextDep):
    """List courses, optionally filtered by ?bootcamp=<id>."""
    return ResourceService.list_resources(TABLE, ctx.query_params)


@router.get("/{resource_id}")
def get_course(resource_id: Annotated[str, Path(description="Course ID")]):
    return ResourceService.get_resource(TABLE, resource_id)
