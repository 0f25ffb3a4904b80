# =============================================================================
# app/auth/security.py - Identity Token Signing
# =============================================================================
# Signs and verifies the identity tokens the API consumes. Issuing tokens
# to users (login, signup) happens elsewhere; this module only knows the
# token format: {sub, role, exp} signed with SECRET_KEY.
# =============================================================================

import logging
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from app.config import settings
from app.auth.models import AuthUser, Role, TokenPayload
from app.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def create_access_token(
    user_id: str,
    role: Role | str = Role.USER,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Sign an identity token for `user_id`.

    Tokens expire after ACCESS_TOKEN_EXPIRE_DAYS unless `expires_delta`
    is given.
    """
    if expires_delta is None:
        expires_delta = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)

    expire = datetime.now(timezone.utc) + expires_delta
    claims = {
        "sub": str(user_id),
        "role": Role(role).value,
        "exp": expire,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a token and return the identity it carries.

    Raises:
        AuthenticationError: If the token is expired, malformed or
            signed with another key
    """
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        payload = TokenPayload(**claims)
    except ExpiredSignatureError:
        logger.warning("Identity token has expired")
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        logger.warning(f"Identity token validation failed: {e}")
        raise AuthenticationError("Not authorized, token failed")
    except PydanticValidationError as e:
        logger.warning(f"Identity token has malformed claims: {e}")
        raise AuthenticationError("Not authorized, token failed")

    return AuthUser(id=payload.sub, role=payload.role)
