# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - In-memory metadata store and recording blob store standing in for Supabase
# - A TestClient wired to those fakes through dependency overrides
# =============================================================================

import os
from datetime import datetime, timedelta, timezone
from uuid import uuid4

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-tokens")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import httpx
import pytest
from fastapi.testclient import TestClient

from app.auth import AuthUser, Role, create_access_token
from app.dependencies import get_document_service
from app.exceptions import StorageRemoveError, UpstreamStorageError
from app.main import app
from core.models.document import RemoveOutcome, ResourceClass, StoredBlob
from core.services.delivery_service import ContentDeliveryProxy
from core.services.document_service import DocumentService
from core.services.storage_service import StoreHints
from lib.utils import build_object_key, normalize_storage_id


# =============================================================================
# Fakes
# =============================================================================

class InMemoryDocumentStore:
    """Metadata store with the same interface as SupabaseClient."""

    def __init__(self):
        self.rows: dict[str, dict] = {}
        self._clock = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

    def _next_timestamp(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def insert_document(self, row: dict) -> dict:
        stored = dict(row, id=uuid4().hex, created_at=self._next_timestamp())
        self.rows[stored["id"]] = stored
        return dict(stored)

    def seed(self, **fields) -> dict:
        """Insert a row directly, bypassing validation (e.g. legacy records)."""
        row = {"id": uuid4().hex, "created_at": self._next_timestamp(), **fields}
        self.rows[row["id"]] = row
        return dict(row)

    def fetch_document(self, document_id: str) -> dict | None:
        row = self.rows.get(document_id)
        return dict(row) if row else None

    def fetch_documents_by_owner(self, owner_id: str) -> list[dict]:
        rows = [dict(r) for r in self.rows.values() if r["owner_id"] == owner_id]
        return sorted(rows, key=lambda r: r["created_at"], reverse=True)

    def search_documents(self, query: str) -> list[dict]:
        needle = query.lower()
        rows = [
            dict(r) for r in self.rows.values()
            if needle in (r.get("original_name") or "").lower()
            or needle in (r.get("description") or "").lower()
        ]
        return sorted(rows, key=lambda r: r["created_at"], reverse=True)

    def delete_document(self, document_id: str) -> bool:
        return self.rows.pop(document_id, None) is not None


class FakeBlobStore:
    """
    Blob gateway with the same interface as StorageService.

    Keeps objects per resource class and records every call.
    """

    BASE_URL = "https://blobs.test"

    def __init__(self):
        self.objects: dict[tuple[ResourceClass, str], bytes] = {}
        self.store_calls: list[StoreHints] = []
        self.remove_calls: list[tuple[str, ResourceClass]] = []
        self.fail_store = False
        self.fail_remove = False

    def store(self, content: bytes, hints: StoreHints) -> StoredBlob:
        self.store_calls.append(hints)
        if self.fail_store:
            raise UpstreamStorageError()
        storage_id = normalize_storage_id(build_object_key(hints.original_name))
        self.objects[(hints.resource_class, storage_id)] = content
        return StoredBlob(
            storage_id=storage_id,
            storage_url=self.build_access_url(storage_id, hints.resource_class),
        )

    def build_access_url(self, storage_id, resource_class, force_download_name=None) -> str:
        url = f"{self.BASE_URL}/{ResourceClass(resource_class).value}/{storage_id}"
        if force_download_name:
            url += f"?download={force_download_name}"
        return url

    def remove(self, storage_id: str, resource_class: ResourceClass) -> RemoveOutcome:
        self.remove_calls.append((storage_id, resource_class))
        if self.fail_remove:
            raise StorageRemoveError(storage_id)
        if self.objects.pop((resource_class, storage_id), None) is None:
            return RemoveOutcome.NOT_FOUND
        return RemoveOutcome.REMOVED

    def content_for(self, url: str) -> bytes | None:
        """Resolve a URL built by this fake back to stored bytes."""
        path = url.split("?", 1)[0][len(self.BASE_URL) + 1:]
        resource_class, _, storage_id = path.partition("/")
        return self.objects.get((ResourceClass(resource_class), storage_id))


def blob_transport(blobs: FakeBlobStore) -> httpx.MockTransport:
    """httpx transport that serves FakeBlobStore objects by URL."""

    def handler(request: httpx.Request) -> httpx.Response:
        content = blobs.content_for(str(request.url))
        if content is None:
            return httpx.Response(404, text="Not Found")
        return httpx.Response(
            200,
            content=content,
            headers={"content-type": "application/x-upstream"},
        )

    return httpx.MockTransport(handler)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def store():
    """Empty in-memory metadata store."""
    return InMemoryDocumentStore()


@pytest.fixture
def blobs():
    """Empty fake blob store."""
    return FakeBlobStore()


@pytest.fixture
def service(store, blobs):
    """DocumentService wired to the fakes; downloads read from `blobs`."""
    return DocumentService(
        store=store,
        storage=blobs,
        proxy=ContentDeliveryProxy(transport=blob_transport(blobs)),
    )


@pytest.fixture
def owner():
    return AuthUser(id="user-owner", role=Role.USER)


@pytest.fixture
def other_user():
    return AuthUser(id="user-other", role=Role.USER)


@pytest.fixture
def admin():
    return AuthUser(id="user-admin", role=Role.ADMIN)


@pytest.fixture
def auth_headers():
    """Build an Authorization header for an identity."""

    def _headers(identity: AuthUser) -> dict[str, str]:
        token = create_access_token(identity.id, identity.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def client(service):
    """TestClient whose document routes use the fake-backed service."""
    app.dependency_overrides[get_document_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_pdf():
    """A small PDF upload: (content, filename, mime type)."""
    return b"%PDF-1.4 passport scan", "passport.pdf", "application/pdf"
