# =============================================================================
# core/services/access.py - Document Access Policy
# =============================================================================
# One capability check for every operation on a document record:
# the owner may act on it, and so may any admin. Admin access never
# changes who owns a record.
# =============================================================================

from app.auth.models import AuthUser, Role
from app.exceptions import AuthorizationError
from core.models.document import Document


def can_access(identity: AuthUser, document: Document) -> bool:
    """True iff `identity` owns `document` or is an admin."""
    return identity.id == document.owner_id or identity.role == Role.ADMIN


def require_access(identity: AuthUser, document: Document, action: str = "access") -> None:
    """
    Raise AuthorizationError unless `identity` may act on `document`.

    Args:
        identity: The authenticated caller
        document: The loaded record
        action: Verb used in the error message ("access", "delete", ...)
    """
    if not can_access(identity, document):
        raise AuthorizationError(action)


def resolve_owner_filter(identity: AuthUser, target_owner: str | None = None) -> str:
    """
    Pick whose documents a listing should return.

    Admins may name another owner; for everyone else the filter is
    ignored and forced to themselves.
    """
    if target_owner and identity.role == Role.ADMIN:
        return target_owner
    return identity.id
