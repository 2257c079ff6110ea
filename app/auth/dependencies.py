# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# The access token is read from:
# - the Authorization header (Bearer <token>), or
# - the auth cookie parsed by the cookie parser stage
#
# Usage:
#   from app.auth import get_current_user, authorize, AuthUser
#
#   @router.get("/protected")
#   def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
#
#   @router.get("/admin", dependencies=[Depends(authorize("admin"))])
#   def admin_only(): ...
# =============================================================================

import logging
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from app.auth.models import AuthUser, TokenPayload
from app.dependencies import get_request_context
from app.exceptions import AuthError, ForbiddenError

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor; a missing header is not an error here
# because the token may come from the cookie instead
security_optional = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"


def _extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    """Bearer header first, then the auth cookie."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials

    settings = request.app.state.settings
    token = get_request_context(request).cookies.get(settings.JWT_COOKIE_NAME)
    if isinstance(token, str) and token and token != "none":
        return token
    return None


def decode_token(token: str, secret: str) -> AuthUser:
    """
    Verify a token and build the user it identifies.

    Raises:
        AuthError: Token is expired, malformed or has no user id
    """
    try:
        payload = TokenPayload(**jwt.decode(token, secret, algorithms=[ALGORITHM]))
    except ExpiredSignatureError:
        logger.debug("Rejected expired token")
        raise AuthError("Token has expired")
    except (JWTError, PydanticValidationError) as e:
        logger.debug(f"Rejected invalid token: {e}")
        raise AuthError()

    if not payload.user_id:
        logger.warning("Token missing user id claim")
        raise AuthError()

    return AuthUser(id=payload.user_id, email=payload.email, role=payload.role or "user")


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
) -> AuthUser:
    """
    Extract and validate the user from the access token.

    Returns:
        AuthUser: The authenticated user

    Raises:
        AuthError: 401 if no token is present or it is invalid
    """
    token = _extract_token(request, credentials)
    if token is None:
        raise AuthError()

    user = decode_token(token, request.app.state.settings.JWT_SECRET)
    logger.debug(f"Authenticated user: {user.id}")
    return user


def authorize(*roles: str) -> Callable[..., AuthUser]:
    """
    Build a dependency that only admits users with one of roles.

    Raises:
        ForbiddenError: 403 if the user's role is not listed
    """
    async def dependency(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if user.role not in roles:
            raise ForbiddenError(f"User role {user.role} is not authorized to access this route")
        return user

    return dependency
