# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends(), and replaced in
# tests through app.dependency_overrides.
# =============================================================================

from typing import Annotated

from fastapi import Depends

from core.services.delivery_service import ContentDeliveryProxy
from core.services.document_service import DocumentService
from core.services.storage_service import StorageService
from lib.supabase_client import SupabaseClient


def get_document_service() -> DocumentService:
    """
    Build the document service for one request.

    The metadata store is the SupabaseClient class itself; the gateway and
    proxy are cheap, stateless wrappers.
    """
    return DocumentService(
        store=SupabaseClient,
        storage=StorageService(),
        proxy=ContentDeliveryProxy(),
    )


# Type alias for dependency injection
DocumentServiceDep = Annotated[DocumentService, Depends(get_document_service)]
