# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .access import can_access, require_access, resolve_owner_filter
from .delivery_service import ContentDeliveryProxy, DeliveryStream
from .document_service import DocumentService
from .storage_service import StorageService, StoreHints

__all__ = [
    "can_access",
    "require_access",
    "resolve_owner_filter",
    "ContentDeliveryProxy",
    "DeliveryStream",
    "DocumentService",
    "StorageService",
    "StoreHints",
]
