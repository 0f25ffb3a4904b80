# =============================================================================
# tests/test_storage_service.py - Blob Storage Gateway Tests
# =============================================================================
# StorageService against a mocked Supabase client:
# - store returns both fields or raises, never half a result
# - access URLs are built locally and always https
# - remove is idempotent and reports hard failures
#
# Tests use mocked Supabase responses to avoid network calls.
# =============================================================================

from unittest.mock import MagicMock

import pytest

from app.config import settings
from app.exceptions import StorageRemoveError, UpstreamStorageError
from core.models.document import RemoveOutcome, ResourceClass
from core.services.storage_service import StorageService, StoreHints

PUBLIC_BASE = "http://test-project.supabase.co/storage/v1/object/public"


@pytest.fixture
def supabase():
    """Mocked Supabase client whose buckets are tracked by name."""
    client = MagicMock()
    buckets: dict[str, MagicMock] = {}

    def from_(name):
        if name not in buckets:
            bucket = MagicMock(name=f"bucket:{name}")
            bucket.get_public_url.side_effect = (
                lambda path, options=None, _name=name: f"{PUBLIC_BASE}/{_name}/{path}"
                + (f"?download={options['download']}" if options else "")
            )
            bucket.remove.return_value = [{"name": "removed"}]
            buckets[name] = bucket
        return buckets[name]

    client.storage.from_.side_effect = from_
    client.buckets = buckets
    return client


@pytest.fixture
def gateway(supabase):
    return StorageService(client_factory=lambda: supabase)


# =============================================================================
# store
# =============================================================================

class TestStore:
    """Tests for StorageService.store."""

    def test_store_returns_id_and_https_url(self, gateway, supabase):
        blob = gateway.store(
            b"%PDF",
            StoreHints(original_name="passport.pdf", mime_type="application/pdf"),
        )

        assert blob.storage_id.startswith("document-organizer/")
        assert blob.storage_id.endswith("-passport.pdf")
        assert blob.storage_url.startswith("https://")
        assert blob.storage_url.endswith(blob.storage_id)

        upload = supabase.buckets["raw"].upload
        upload.assert_called_once()
        assert upload.call_args.kwargs["path"] == blob.storage_id
        assert upload.call_args.kwargs["file_options"]["content-type"] == "application/pdf"

    def test_store_applies_custom_separator(self, gateway, supabase, monkeypatch):
        monkeypatch.setattr(settings, "STORAGE_NAMESPACE_SEPARATOR", ":")

        blob = gateway.store(b"%PDF", StoreHints(original_name="tax:2023.pdf"))

        namespace, _, key = blob.storage_id.partition(":")
        assert namespace == "document-organizer"
        assert key.endswith("-tax_2023.pdf")
        assert ":" not in key

    def test_store_uses_bucket_of_resource_class(self, gateway, supabase):
        gateway.store(
            b"\x89PNG",
            StoreHints(original_name="scan.png", mime_type="image/png", resource_class=ResourceClass.IMAGE),
        )

        assert "images" in supabase.buckets
        supabase.buckets["images"].upload.assert_called_once()

    def test_store_defaults_content_type(self, gateway, supabase):
        gateway.store(b"data", StoreHints(original_name="notes.txt"))

        options = supabase.buckets["raw"].upload.call_args.kwargs["file_options"]
        assert options["content-type"] == "application/octet-stream"

    def test_store_failure_raises_without_result(self, gateway, supabase):
        supabase.storage.from_("raw").upload.side_effect = RuntimeError("connection reset")

        with pytest.raises(UpstreamStorageError) as exc_info:
            gateway.store(b"%PDF", StoreHints(original_name="passport.pdf"))

        assert "connection reset" not in exc_info.value.message
        assert exc_info.value.details == {}

    def test_url_failure_after_upload_is_a_store_failure(self, gateway, supabase):
        supabase.storage.from_("raw").get_public_url.side_effect = RuntimeError("bad config")

        with pytest.raises(UpstreamStorageError):
            gateway.store(b"%PDF", StoreHints(original_name="passport.pdf"))


# =============================================================================
# build_access_url
# =============================================================================

class TestBuildAccessUrl:
    """Tests for StorageService.build_access_url."""

    def test_upgrades_to_https(self, gateway):
        url = gateway.build_access_url("document-organizer/a.pdf", ResourceClass.RAW)
        assert url == "https://test-project.supabase.co/storage/v1/object/public/raw/document-organizer/a.pdf"

    def test_force_download_name(self, gateway, supabase):
        url = gateway.build_access_url(
            "document-organizer/a.pdf", ResourceClass.RAW, force_download_name="passport.pdf"
        )

        assert url.endswith("?download=passport.pdf")
        supabase.buckets["raw"].get_public_url.assert_called_with(
            "document-organizer/a.pdf", {"download": "passport.pdf"}
        )

    def test_deterministic_and_local(self, gateway, supabase):
        first = gateway.build_access_url("document-organizer/v.mp4", ResourceClass.VIDEO)
        second = gateway.build_access_url("document-organizer/v.mp4", ResourceClass.VIDEO)

        assert first == second
        assert "/videos/" in first
        supabase.buckets["videos"].upload.assert_not_called()
        supabase.buckets["videos"].download.assert_not_called()


# =============================================================================
# remove
# =============================================================================

class TestRemove:
    """Tests for StorageService.remove."""

    def test_remove_existing(self, gateway, supabase):
        outcome = gateway.remove("document-organizer/a.png", ResourceClass.IMAGE)

        assert outcome == RemoveOutcome.REMOVED
        supabase.buckets["images"].remove.assert_called_once_with(["document-organizer/a.png"])

    def test_remove_twice_is_accepted(self, gateway, supabase):
        bucket = supabase.storage.from_("raw")
        bucket.remove.side_effect = [[{"name": "a.pdf"}], []]

        first = gateway.remove("document-organizer/a.pdf", ResourceClass.RAW)
        second = gateway.remove("document-organizer/a.pdf", ResourceClass.RAW)

        assert first == RemoveOutcome.REMOVED
        assert second == RemoveOutcome.NOT_FOUND

    def test_remove_transport_error_raises(self, gateway, supabase):
        supabase.storage.from_("raw").remove.side_effect = ConnectionError("timeout")

        with pytest.raises(StorageRemoveError):
            gateway.remove("document-organizer/a.pdf", ResourceClass.RAW)
