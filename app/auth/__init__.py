# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides JWT-based authentication for the resource routers.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import authorize, decode_token, get_current_user
from app.auth.models import AuthUser, TokenPayload

__all__ = [
    "authorize",
    "decode_token",
    "get_current_user",
    "AuthUser",
    "TokenPayload",
]
