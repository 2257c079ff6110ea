# =============================================================================
# app/routers/users.py - User Administration Endpoints
# =============================================================================
# All endpoints require an authenticated admin.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.auth import authorize
from app.dependencies import ContextDep
from core.services import ResourceService
from core.services.resource_service import RESERVED_PARAMS

router = APIRouter(dependencies=[Depends(authorize("admin"))])

TABLE = "users"
PUBLIC_COLUMNS = "id,name,email,role,created_at"
_PUBLIC_COLUMN_SET = frozenset(PUBLIC_COLUMNS.split(","))


def _public_sort(raw: str) -> str:
    """Keep only sort entries on public columns."""
    entries = [entry.strip() for entry in raw.split(",")]
    return ",".join(entry for entry in entries if entry.lstrip("-") in _PUBLIC_COLUMN_SET)


@router.get("")
def list_users(ctx: ContextDep):
    """
    List users.

    Columns, filters and sort keys are limited to the public columns, so
    password hashes can neither be returned nor matched against.
    """
    query = {
        key: value
        for key, value in ctx.query_params.items()
        if key in RESERVED_PARAMS or key in _PUBLIC_COLUMN_SET
    }
    query["select"] = PUBLIC_COLUMNS
    if "sort" in query:
        query["sort"] = _public_sort(query["sort"])
    return ResourceService.list_resources(TABLE, query)


@router.get("/{resource_id}")
def get_user(resource_id: Annotated[str, Path(description="User ID")]):
    """Get a single user."""
    return ResourceService.get_resource(TABLE, resource_id, columns=PUBLIC_COLUMNS)
