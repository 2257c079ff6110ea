# =============================================================================
# tests/test_routers.py - Resource Router Tests
# =============================================================================
# This module contains tests for:
# - ResourceService list/get with mocked Supabase
# - The bootcamp, course and review routers through the full pipeline
# - Database error translation into the error envelope
#
# Tests use mocked Supabase responses to avoid database calls.
# =============================================================================

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from app.exceptions import NotFoundError, ValidationError
from core.services import ResourceService

SUPABASE = "core.services.resource_service.SupabaseClient"


def database_error(code: str, message: str = "database error") -> APIError:
    return APIError({"message": message, "code": code, "hint": None, "details": None})


# =============================================================================
# ResourceService Tests
# =============================================================================

class TestListResources:
    """Test query parameter handling in ResourceService.list_resources."""

    def test_defaults(self):
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_rows.return_value = ([{"id": "1"}], 1)

            result = ResourceService.list_resources("bootcamps", {})

        assert result == {"success": True, "count": 1, "pagination": {}, "data": [{"id": "1"}]}
        mock_client.fetch_rows.assert_called_once_with(
            "bootcamps",
            filters=[],
            columns="*",
            offset=0,
            limit=25,
            order_by=[],
        )

    def test_filters_select_and_sort(self):
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_rows.return_value = ([], 0)

            ResourceService.list_resources(
                "bootcamps",
                {"housing": "true", "select": "name,description", "sort": "-averageCost,name"},
            )

        kwargs = mock_client.fetch_rows.call_args.kwargs
        assert kwargs["filters"] == [("housing", "true")]
        assert kwargs["columns"] == "name,description"
        assert kwargs["order_by"] == [("averageCost", True), ("name", False)]

    def test_pagination_links(self):
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_rows.return_value = ([{"id": str(i)} for i in range(10)], 35)

            result = ResourceService.list_resources("courses", {"page": "2", "limit": "10"})

        assert mock_client.fetch_rows.call_args.kwargs["offset"] == 10
        assert result["pagination"] == {
            "next": {"page": 3, "limit": 10},
            "prev": {"page": 1, "limit": 10},
        }

    def test_limit_capped(self):
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_rows.return_value = ([], 0)

            ResourceService.list_resources("reviews", {"limit": "5000"})

        assert mock_client.fetch_rows.call_args.kwargs["limit"] == 100

    @pytest.mark.parametrize("query", [{"page": "abc"}, {"page": "0"}, {"limit": "-3"}])
    def test_invalid_pagination(self, query):
        with patch(SUPABASE):
            with pytest.raises(ValidationError):
                ResourceService.list_resources("bootcamps", query)


class TestGetResource:

    def test_found(self):
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_row.return_value = {"id": "abc", "name": "Devworks Bootcamp"}

            result = ResourceService.get_resource("bootcamps", "abc")

        assert result == {"success": True, "data": {"id": "abc", "name": "Devworks Bootcamp"}}
        mock_client.fetch_row.assert_called_once_with("bootcamps", "abc", columns="*")

    def test_not_found(self):
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_row.return_value = None

            with pytest.raises(NotFoundError) as exc_info:
                ResourceService.get_resource("bootcamps", "abc")

        assert exc_info.value.message == "Resource not found with id of abc"


# =============================================================================
# Router Tests
# =============================================================================

class TestResourceRouters:
    """Test the public resource routers through the pipeline."""

    @pytest.mark.parametrize("resource", ["bootcamps", "courses", "reviews"])
    def test_list(self, client, resource):
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_rows.return_value = ([{"id": "1"}], 1)

            response = client.get(f"/api/v1/{resource}")

        assert response.status_code == 200
        assert response.json()["data"] == [{"id": "1"}]
        assert mock_client.fetch_rows.call_args.args == (resource,)

    def test_get_by_id(self, client):
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_row.return_value = {"id": "5d713995b721c3bb38c1f5d0"}

            response = client.get("/api/v1/bootcamps/5d713995b721c3bb38c1f5d0")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"id": "5d713995b721c3bb38c1f5d0"}}

    def test_not_found(self, client):
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_row.return_value = None

            response = client.get("/api/v1/courses/missing")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Resource not found with id of missing"}

    def test_query_reaches_service_sanitized(self, client):
        """Operator keys are dropped and repeated keys collapsed before filtering."""
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_rows.return_value = ([], 0)

            client.get("/api/v1/bootcamps?housing=true&housing=false&$where=1")

        assert mock_client.fetch_rows.call_args.kwargs["filters"] == [("housing", "false")]

    def test_invalid_page(self, client):
        with patch(SUPABASE):
            response = client.get("/api/v1/bootcamps?page=zero")

        assert response.status_code == 400
        assert response.json()["error"] == "Query parameter 'page' must be an integer"


class TestDatabaseErrors:
    """Test database error translation into the envelope."""

    def test_malformed_id(self, client):
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_row.side_effect = database_error("22P02", "invalid input syntax for type uuid")

            response = client.get("/api/v1/bootcamps/not-a-uuid")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Resource not found"}

    def test_unknown_column_is_client_error(self, make_app):
        client = TestClient(make_app(NODE_ENV="production"))
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_rows.side_effect = database_error("42703", "column bootcamps.nope does not exist")

            response = client.get("/api/v1/bootcamps?nope=1")

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "column bootcamps.nope does not exist",
        }

    def test_unparseable_filter_is_client_error(self, make_app):
        client = TestClient(make_app(NODE_ENV="production"))
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_rows.side_effect = database_error("PGRST100", "failed to parse filter (gt.)")

            response = client.get("/api/v1/bootcamps?sort=-")

        assert response.status_code == 400
        assert response.json()["error"] == "failed to parse filter (gt.)"


class TestBootcampRateLimit:

    def test_101_rapid_requests(self, client):
        with patch(SUPABASE) as mock_client:
            mock_client.fetch_rows.return_value = ([], 0)

            statuses = [client.get("/api/v1/bootcamps").status_code for _ in range(101)]

        assert statuses[:100] == [200] * 100
        assert statuses[-1] == 429
        # The rejected request never reached the service
        assert mock_client.fetch_rows.call_count == 100
