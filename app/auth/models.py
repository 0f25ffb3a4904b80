# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    """Roles carried in identity tokens."""
    USER = "user"
    ADMIN = "admin"


class AuthUser(BaseModel):
    """
    Authenticated identity extracted from a signed token.

    This is all the document layer knows about a user: who they are
    and whether they are an admin.
    """
    id: str
    role: Role = Role.USER

    model_config = ConfigDict(frozen=True)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class TokenPayload(BaseModel):
    """
    Decoded identity token payload.

    Standard JWT claims plus the user's role.
    """
    sub: str  # User ID
    role: Role = Role.USER
    exp: int  # Expiration timestamp
