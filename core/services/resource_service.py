# =============================================================================
# core/services/resource_service.py - Generic Resource Reads
# =============================================================================
# Read access shared by the bootcamp, course, review and user routers.
# Separates HTTP concerns from database access.
#
# List queries understand:
#   ?select=name,description   columns to return
#   ?sort=-averageCost,name    order (leading "-" = descending)
#   ?page=2&limit=10           pagination
#   ?<column>=<value>          equality filters
# =============================================================================

import logging
from typing import Any

from app.exceptions import NotFoundError, ValidationError
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

RESERVED_PARAMS = frozenset({"select", "sort", "page", "limit"})
DEFAULT_LIMIT = 25
MAX_LIMIT = 100


def _positive_int(name: str, raw: str | None, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be an integer")
    if value < 1:
        raise ValidationError(f"Query parameter '{name}' must be at least 1")
    return value


def _parse_sort(raw: str | None) -> list[tuple[str, bool]]:
    if not raw:
        return []
    order_by = []
    for column in raw.split(","):
        column = column.strip()
        if column:
            order_by.append((column.lstrip("-"), column.startswith("-")))
    return order_by


class ResourceService:
    """
    Service for reading resources by table.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def list_resources(table: str, query: dict[str, str]) -> dict[str, Any]:
        """
        List resources matching the query parameters.

        Args:
            table: Table backing the resource
            query: Sanitized query parameters (one value per key)

        Returns:
            Response dict with success, count, pagination and data

        Raises:
            ValidationError: If page or limit is not a positive integer
        """
        page = _positive_int("page", query.get("page"), 1)
        limit = min(_positive_int("limit", query.get("limit"), DEFAULT_LIMIT), MAX_LIMIT)
        columns = query.get("select") or "*"
        filters = [(key, value) for key, value in query.items() if key not in RESERVED_PARAMS]

        offset = (page - 1) * limit
        rows, total = SupabaseClient.fetch_rows(
            table,
            filters=filters,
            columns=columns,
            offset=offset,
            limit=limit,
            order_by=_parse_sort(query.get("sort")),
        )

        pagination: dict[str, Any] = {}
        if offset + limit < total:
            pagination["next"] = {"page": page + 1, "limit": limit}
        if offset > 0:
            pagination["prev"] = {"page": page - 1, "limit": limit}

        return {
            "success": True,
            "count": len(rows),
            "pagination": pagination,
            "data": rows,
        }

    @staticmethod
    def get_resource(table: str, resource_id: str, columns: str = "*") -> dict[str, Any]:
        """
        Get a single resource by ID.

        Raises:
            NotFoundError: If no row has this ID
        """
        row = SupabaseClient.fetch_row(table, resource_id, columns=columns)
        if row is None:
            logger.debug(f"{table} row not found: {resource_id}")
            raise NotFoundError(f"Resource not found with id of {resource_id}")
        return {"success": True, "data": row}
