# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated user extracted from the access token.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    email: Optional[str] = None
    role: str = "user"


class TokenPayload(BaseModel):
    """
    Decoded access token payload.

    Tokens carry the user id in `id` (issued by the auth service) or in the
    standard `sub` claim.
    """
    id: Optional[str] = None
    sub: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    exp: Optional[int] = None
    iat: Optional[int] = None

    @property
    def user_id(self) -> Optional[str]:
        return self.id or self.sub
