# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App factory, exception handlers, router mounts, lifespan
# - server.py: uvicorn entry point
# - config.py: Environment variable loading and settings
# - pipeline.py: Ordered request pipeline
# - middleware/: One module per pipeline stage
# - routers/: API endpoint definitions organized by resource
#
# The app layer is thin - it handles HTTP concerns and delegates
# database reads to the core/ package.
# =============================================================================
