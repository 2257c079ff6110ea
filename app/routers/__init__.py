# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by resource:
# - bootcamps.py: Bootcamp reads
# - courses.py: Course reads
# - auth.py: Token verification
# - users.py: User administration (admin only)
# - reviews.py: Review reads
#
# Each router is mounted in main.py under the prefix in ROUTER_MOUNTS.
# =============================================================================

from fastapi import APIRouter

from . import auth
from . import bootcamps
from . import courses
from . import reviews
from . import users

API_PREFIX = "/api/v1"

ROUTER_MOUNTS: dict[str, APIRouter] = {
    f"{API_PREFIX}/bootcamps": bootcamps.router,
    f"{API_PREFIX}/courses": courses.router,
    f"{API_PREFIX}/auth": auth.router,
    f"{API_PREFIX}/users": users.router,
    f"{API_PREFIX}/reviews": reviews.router,
}

__all__ = [
    "API_PREFIX",
    "ROUTER_MOUNTS",
    "auth",
    "bootcamps",
    "courses",
    "reviews",
    "users",
]
