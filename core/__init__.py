# =============================================================================
# core/ - Service Package
# =============================================================================
# This package contains the service layer used by the routers:
# - services/: database reads behind the resource routers
#
# Code in this package should NOT import from FastAPI.
# This keeps the logic testable and reusable.
# =============================================================================
