# =============================================================================
# tests/test_access.py - Access Policy Tests
# =============================================================================
# The owner-or-admin rule, exercised over every combination of caller and
# record, plus the listing filter that only admins may redirect.
# =============================================================================

from datetime import datetime, timezone

import pytest

from app.auth import AuthUser, Role
from app.exceptions import AuthorizationError
from core.models.document import Document
from core.services.access import can_access, require_access, resolve_owner_filter


def _document(owner_id: str) -> Document:
    return Document(
        id="doc-1",
        owner_id=owner_id,
        title="Passport",
        created_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
    )


# =============================================================================
# can_access
# =============================================================================

class TestCanAccess:
    """can_access is true iff caller is owner or admin."""

    @pytest.mark.parametrize(
        "caller_id,role,owner_id,expected",
        [
            ("u1", Role.USER, "u1", True),
            ("u2", Role.USER, "u1", False),
            ("u1", Role.ADMIN, "u1", True),
            ("admin", Role.ADMIN, "u1", True),
        ],
    )
    def test_owner_or_admin(self, caller_id, role, owner_id, expected):
        identity = AuthUser(id=caller_id, role=role)
        assert can_access(identity, _document(owner_id)) is expected

    def test_admin_access_does_not_change_owner(self):
        document = _document("u1")
        can_access(AuthUser(id="admin", role=Role.ADMIN), document)
        assert document.owner_id == "u1"


class TestRequireAccess:
    """require_access raises 403 for strangers."""

    def test_stranger_is_rejected(self):
        with pytest.raises(AuthorizationError) as exc_info:
            require_access(AuthUser(id="u2"), _document("u1"), action="delete")

        assert exc_info.value.status_code == 403
        assert "delete" in exc_info.value.message

    def test_owner_passes(self):
        require_access(AuthUser(id="u1"), _document("u1"))


# =============================================================================
# resolve_owner_filter
# =============================================================================

class TestResolveOwnerFilter:
    """Admins may list another user's documents; others may not."""

    def test_user_defaults_to_self(self):
        assert resolve_owner_filter(AuthUser(id="u1")) == "u1"

    def test_user_filter_is_ignored(self):
        assert resolve_owner_filter(AuthUser(id="u1"), "u2") == "u1"

    def test_admin_may_target_other_owner(self):
        assert resolve_owner_filter(AuthUser(id="a", role=Role.ADMIN), "u2") == "u2"

    def test_admin_without_filter_sees_own(self):
        assert resolve_owner_filter(AuthUser(id="a", role=Role.ADMIN), None) == "a"
