# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - document.py: Document records, categories, resource classes
#
# These models define the "contract" between API and clients.
# =============================================================================

from .document import (
    DeleteResponse,
    Document,
    DocumentCategory,
    FileMeta,
    NewDocument,
    RemoveOutcome,
    ResourceClass,
    StoredBlob,
)

__all__ = [
    "DeleteResponse",
    "Document",
    "DocumentCategory",
    "FileMeta",
    "NewDocument",
    "RemoveOutcome",
    "ResourceClass",
    "StoredBlob",
]
