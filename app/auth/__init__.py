# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides JWT-based identity for the document API.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, Role, TokenPayload
from app.auth.security import create_access_token, decode_access_token

__all__ = [
    "get_current_user",
    "AuthUser",
    "Role",
    "TokenPayload",
    "create_access_token",
    "decode_access_token",
]
