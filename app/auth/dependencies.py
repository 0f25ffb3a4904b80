# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# A missing or invalid token is an authentication failure (401). Whether the
# identity may touch a particular document is decided later, by the access
# policy in core/services/access.py (403).
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.models import AuthUser
from app.auth.security import decode_access_token
from app.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# auto_error=False so a missing header reaches us and becomes a 401 with
# the API's own error body
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthUser:
    """
    Extract and validate the caller's identity from the Bearer token.

    Raises:
        AuthenticationError: 401 if the token is missing, invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    user = decode_access_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id} ({user.role.value})")
    return user
