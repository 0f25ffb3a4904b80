# =============================================================================
# core/models/document.py - Document Schemas
# =============================================================================
# These models define the contract for document records:
# - DocumentCategory / ResourceClass: fixed enumerations
# - FileMeta: descriptive metadata of an uploaded file
# - StoredBlob: result of a successful blob write
# - NewDocument: a record about to be inserted (all blob fields required)
# - Document: a persisted record as returned to clients
#
# The bytes of a document live in the blob store; these records only point
# at them. Records are never updated in place, only created and deleted.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DocumentCategory(str, Enum):
    """Fixed set of document categories. New uploads default to OTHER."""
    BUSINESS = "business"
    HEALTH = "health"
    EDUCATION = "education"
    IDENTIFICATION = "identification"
    FINANCE = "finance"
    OTHER = "other"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class ResourceClass(str, Enum):
    """
    Storage class of a blob.

    Decided once from the MIME type at upload and stored on the record.
    Every later storage call for the record uses the stored value.
    """
    IMAGE = "image"
    VIDEO = "video"
    RAW = "raw"


class RemoveOutcome(str, Enum):
    """Accepted outcomes of a blob removal. Both mean the object is gone."""
    REMOVED = "removed"
    NOT_FOUND = "not_found"


class FileMeta(BaseModel):
    """Metadata of an uploaded file, as reported by the client."""
    original_name: str = Field(..., min_length=1)
    mime_type: str | None = None
    size: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)


class StoredBlob(BaseModel):
    """
    Result of a successful blob write.

    Both fields are always present; a failed write raises instead of
    returning a partial result.
    """
    storage_id: str = Field(..., min_length=1)
    storage_url: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)


class NewDocument(BaseModel):
    """
    A document record ready to be inserted.

    Every blob-referencing field is required, so a half-written upload
    record cannot be constructed, let alone persisted.
    """
    owner_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    category: DocumentCategory = DocumentCategory.OTHER
    description: str = ""
    storage_id: str = Field(..., min_length=1)
    storage_url: str = Field(..., min_length=1)
    resource_class: ResourceClass
    original_name: str = Field(..., min_length=1)
    mime_type: str | None = None
    size: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    @field_validator("storage_url")
    @classmethod
    def _require_https(cls, value: str) -> str:
        if not value.startswith("https://"):
            raise ValueError("storage_url must use https")
        return value

    def to_row(self) -> dict:
        """Serialize for insertion into the documents table."""
        return self.model_dump(mode="json")


class Document(BaseModel):
    """
    A persisted document record.

    Records created before blob storage was adopted carry a
    local_reference and no storage_id. They stay unavailable for download.

    Example:
        {
            "id": "6f1c...",
            "owner_id": "u-1",
            "title": "Passport",
            "category": "identification",
            "storage_id": "document-organizer/1718000000000-42-passport.pdf",
            "storage_url": "https://xyz.supabase.co/storage/v1/object/public/raw/...",
            "resource_class": "raw",
            "original_name": "passport.pdf",
            "mime_type": "application/pdf",
            "size": 20480,
            "created_at": "2024-06-10T12:00:00Z"
        }
    """
    id: str
    owner_id: str
    title: str
    category: DocumentCategory = DocumentCategory.OTHER
    description: str | None = None
    storage_id: str | None = None
    storage_url: str | None = None
    resource_class: ResourceClass | None = None
    original_name: str | None = None
    mime_type: str | None = None
    size: int | None = None
    local_reference: str | None = Field(default=None, exclude=True)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("id", "owner_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value):
        return str(value) if value is not None else value

    @property
    def is_available(self) -> bool:
        """Whether the record points at content in the blob store."""
        return bool(self.storage_id)


class DeleteResponse(BaseModel):
    """Acknowledgement returned by DELETE /documents/{id}."""
    message: str = "Document deleted"
