# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the DevCamper API.
# It builds the FastAPI application: request pipeline, exception handlers,
# routers, and the lifespan that supervises background failures.
#
# Usage:
#   uvicorn app.main:app --reload
#   python -m app.server
# =============================================================================

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, configure_logging, get_settings
from app.exceptions import http_exception_handler
from app.pipeline import build_pipeline, install_pipeline
from app.routers import ROUTER_MOUNTS
from lib.rate_limit_store import RateLimitStore
from lib.supabase_client import connect_db
from lib.supervisor import ProcessSupervisor

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: Subscribe the supervisor to the loop, start the database connection
    - Shutdown: Cancel background tasks, restore the loop's exception handler
    """
    settings: Settings = app.state.settings
    supervisor: ProcessSupervisor = app.state.supervisor

    # Startup
    supervisor.install(asyncio.get_running_loop())
    logger.info(f"Server running in {settings.NODE_ENV} mode on port {settings.PORT}")

    # Connection failures are reported by the supervisor, not raised here
    supervisor.spawn(connect_db(settings), name="connect-db")

    yield

    # Shutdown
    logger.info("Shutting down DevCamper API")
    await supervisor.cancel_all()
    supervisor.uninstall()


def create_app(
    settings: Settings | None = None,
    routers: dict[str, APIRouter] | None = None,
    rate_limit_store: RateLimitStore | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration (defaults to the cached environment settings)
        routers: Prefix → router mounts (defaults to the five API resources)
        rate_limit_store: Shared rate limit counters (a fresh store by default)
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="DevCamper API",
        description="Backend API for the DevCamper bootcamp directory.",
        version="1.0.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Bootcamps", "description": "Bootcamp directory"},
            {"name": "Courses", "description": "Courses offered by bootcamps"},
            {"name": "Auth", "description": "Token verification"},
            {"name": "Users", "description": "User administration (admin only)"},
            {"name": "Reviews", "description": "Bootcamp reviews"},
        ],
    )

    store = rate_limit_store or RateLimitStore(settings.RATE_LIMIT_WINDOW_SECONDS)
    app.state.settings = settings
    app.state.rate_limit_store = store
    app.state.supervisor = ProcessSupervisor(exit_on_error=settings.EXIT_ON_UNHANDLED_ERROR)

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, http_exception_handler)

    # =========================================================================
    # Request Pipeline
    # =========================================================================

    pipeline = build_pipeline(settings, store)
    install_pipeline(app, pipeline)
    logger.debug(f"Request pipeline: {' -> '.join(pipeline.names)}")

    # =========================================================================
    # Routers
    # =========================================================================

    for prefix, router in (routers if routers is not None else ROUTER_MOUNTS).items():
        tag = prefix.rstrip("/").rsplit("/", 1)[-1].capitalize()
        app.include_router(router, prefix=prefix, tags=[tag])

    return app


# Create FastAPI application
app = create_app()
