# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides the database connection for the API.
# It implements the singleton pattern to reuse a single client connection
# and provides generic row access for the resource routers:
# - connect_db: establish the connection at startup (runs in the background)
# - fetch_rows: filtered, paginated reads from a table
# - fetch_row: single row by primary key
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   rows = SupabaseClient.fetch_rows("bootcamps", filters=[("housing", "true")])
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import urlparse

from postgrest.exceptions import APIError
from supabase import Client, create_client

from app.config import Settings, get_settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code for "no rows returned" on .single()
NO_ROWS = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        SupabaseClient.connect(settings)
        bootcamp = SupabaseClient.fetch_row("bootcamps", "5d713995b721c3bb38c1f5d0")
    """

    _instance: Client | None = None

    @classmethod
    def connect(cls, settings: Settings | None = None) -> Client:
        """
        Create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        settings = settings or get_settings()
        try:
            cls._instance = create_client(
                settings.SUPABASE_URL,
                settings.SUPABASE_SERVICE_KEY
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create Supabase client: {e}",
                code="CLIENT_INIT_FAILED",
                suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in config/config.env"
            ) from e

        logger.info(f"Database connected: {urlparse(settings.SUPABASE_URL).hostname}")
        return cls._instance

    @classmethod
    def get_client(cls) -> Client:
        """Get the singleton client, connecting on first use."""
        if cls._instance is None:
            return cls.connect()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Forget the current client (used by tests)."""
        cls._instance = None

    # -------------------------------------------------------------------------
    # Row Access
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_rows(
        cls,
        table: str,
        filters: list[tuple[str, str]] | None = None,
        columns: str = "*",
        offset: int = 0,
        limit: int = 25,
        order_by: list[tuple[str, bool]] | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Fetch a page of rows matching equality filters.

        Args:
            table: Table name
            filters: (column, value) pairs combined with AND
            columns: Comma-separated column list for the select
            offset: Index of the first row to return
            limit: Maximum number of rows to return
            order_by: (column, descending) pairs applied in order

        Returns:
            Tuple of (rows, total matching row count)

        Raises:
            APIError: Database rejected the query (translated by the error stage)
            SupabaseClientError: Any other failure
        """
        client = cls.get_client()

        try:
            query = client.table(table).select(columns, count="exact")
            for column, value in filters or []:
                query = query.eq(column, value)
            for column, descending in order_by or []:
                query = query.order(column, desc=descending)
            response = query.range(offset, offset + limit - 1).execute()

        except APIError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch {table}: {e}",
                code="FETCH_ROWS_FAILED",
                suggestion=f"Check that the {table} table exists and is accessible",
                details={"table": table, "filters": filters or []}
            ) from e

        rows = response.data or []
        total = response.count if response.count is not None else len(rows)
        logger.debug(f"Fetched {len(rows)} of {total} rows from {table}")
        return rows, total

    @classmethod
    def fetch_row(cls, table: str, row_id: str, columns: str = "*") -> dict[str, Any] | None:
        """
        Fetch a single row by ID.

        Returns:
            Row dict, or None if not found
        """
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .select(columns)
                .eq("id", row_id)
                .single()
                .execute()
            )
            return response.data

        except APIError as e:
            if e.code == NO_ROWS:
                return None
            raise


async def connect_db(settings: Settings | None = None) -> Client:
    """Connect without blocking the event loop."""
    return await asyncio.to_thread(SupabaseClient.connect, settings)
