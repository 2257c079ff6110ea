# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Builds isolated apps (own settings, rate limit store, static dir)
# - Provides a test router that echoes what reached the handler
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("JWT_SECRET", "test-secret-key-0123456789")
os.environ.setdefault("NODE_ENV", "development")

import pytest
from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from app.config import Settings
from app.dependencies import ContextDep
from app.exceptions import NotFoundError
from app.main import create_app
from app.routers import ROUTER_MOUNTS
from lib.rate_limit_store import RateLimitStore
from lib.supabase_client import SupabaseClient

TEST_SECRET = "test-secret-key-0123456789"


# =============================================================================
# Test Router
# =============================================================================

testing_router = APIRouter()


@testing_router.post("/echo")
async def echo(request: Request, ctx: ContextDep):
    """Return everything the pipeline handed to the handler."""
    raw = await request.body()
    return {
        "body": await request.json() if ctx.body_is_json else raw.decode("latin-1"),
        "query": [list(item) for item in request.query_params.multi_items()],
        "polluted": ctx.query_polluted,
        "cookies": ctx.cookies,
        "form": ctx.form,
        "files": {
            name: [upload.filename for upload in uploads]
            for name, uploads in ctx.files.items()
        },
        "trail": ctx.trail,
        "state": ctx.state.value,
    }


@testing_router.get("/echo")
async def echo_query(request: Request, ctx: ContextDep):
    return {
        "query": [list(item) for item in request.query_params.multi_items()],
        "polluted": ctx.query_polluted,
        "trail": ctx.trail,
    }


@testing_router.post("/form")
async def form_fields(
    where: str | None = Form(None, alias="$where"),
    title: str | None = Form(None),
    photo: UploadFile | None = File(None),
):
    """Declared form fields, as FastAPI parsed them from the body."""
    return {
        "where": where,
        "title": title,
        "photo": None if photo is None else {
            "filename": photo.filename,
            "content": (await photo.read()).decode("utf-8"),
        },
    }


@testing_router.get("/boom")
async def boom():
    raise RuntimeError("database exploded")


@testing_router.get("/missing")
async def missing():
    raise NotFoundError("Bootcamp not found with id of 42")


@testing_router.get("/framed")
async def framed():
    return JSONResponse({"ok": True}, headers={"X-Frame-Options": "DENY"})


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_supabase_client():
    """Never let a test reuse a client created by another."""
    SupabaseClient.reset()
    yield
    SupabaseClient.reset()


@pytest.fixture
def static_dir(tmp_path):
    """Empty public directory for the static files stage."""
    public = tmp_path / "public"
    public.mkdir()
    return public


@pytest.fixture
def make_settings(static_dir):
    """Build Settings with test defaults; keyword arguments override them."""
    def _make(**overrides) -> Settings:
        values = {
            "SUPABASE_URL": "https://test-project.supabase.co",
            "SUPABASE_SERVICE_KEY": "test-service-key",
            "JWT_SECRET": TEST_SECRET,
            "NODE_ENV": "development",
            "STATIC_DIR": str(static_dir),
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def make_app(make_settings):
    """Build an app with the API routers plus the test router."""
    def _make(rate_limit_store: RateLimitStore | None = None, **overrides):
        routers = dict(ROUTER_MOUNTS)
        routers["/api/v1/testing"] = testing_router
        return create_app(
            settings=make_settings(**overrides),
            routers=routers,
            rate_limit_store=rate_limit_store,
        )

    return _make


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    """TestClient without lifespan (no database connection attempt)."""
    return TestClient(app)
