# =============================================================================
# app/routers/auth.py - Authentication Endpoints
# =============================================================================
# Token verification for clients.
# The token is accepted as a Bearer header or as the auth cookie.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth import AuthUser, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me")
async def get_me(user: AuthUser = Depends(get_current_user)):
    """
    Get the current authenticated user.

    Returns the user ID, email and role from the token.
    """
    logger.debug(f"Token verified for user {user.id}")
    return {
        "success": True,
        "data": {"id": user.id, "email": user.email, "role": user.role},
    }
