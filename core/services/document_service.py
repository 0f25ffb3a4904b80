# =============================================================================
# core/services/document_service.py - Document Lifecycle
# =============================================================================
# Composes the access policy, blob storage gateway, metadata store and
# content delivery proxy into the document operations:
# list / get / upload / download / delete / search.
#
# Upload and delete each touch two systems with no transaction spanning
# them, so the order of the two steps is fixed:
#
#   upload: write the blob, THEN insert the record. A failure in between
#           leaves at worst an orphaned blob, never a record that points
#           at nothing.
#   delete: try to remove the blob, THEN always delete the record. A
#           failed blob removal leaves at worst an orphaned blob; the
#           document still disappears for the user.
#
# Orphaned blobs are cleaned up out of band.
# =============================================================================

import asyncio
import logging
from typing import Any

from app.config import settings
from app.auth.models import AuthUser
from app.exceptions import (
    DocumentNotFoundError,
    DocumentUnavailableError,
    FileTooLargeError,
    InvalidCategoryError,
    InvalidFileTypeError,
    ValidationError,
)
from core.models.document import (
    DeleteResponse,
    Document,
    DocumentCategory,
    FileMeta,
    NewDocument,
)
from core.services.access import require_access, resolve_owner_filter
from core.services.delivery_service import ContentDeliveryProxy, DeliveryStream
from core.services.storage_service import StorageService, StoreHints
from lib.supabase_client import SupabaseClient
from lib.utils import classify_resource, file_extension, normalize_storage_id

logger = logging.getLogger(__name__)


def _parse_category(category: str | DocumentCategory | None) -> DocumentCategory:
    """Blank means OTHER; anything unknown is a validation error."""
    if isinstance(category, DocumentCategory):
        return category
    value = (category or "").strip().lower()
    if not value:
        return DocumentCategory.OTHER
    try:
        return DocumentCategory(value)
    except ValueError:
        raise InvalidCategoryError(value, DocumentCategory.values())


class DocumentService:
    """
    Orchestrates every document operation.

    Collaborators are injected so each can be swapped independently:
    - store: metadata store (defaults to the SupabaseClient class)
    - storage: blob storage gateway
    - proxy: content delivery proxy used for downloads
    """

    def __init__(
        self,
        store: Any = SupabaseClient,
        storage: StorageService | None = None,
        proxy: ContentDeliveryProxy | None = None,
    ):
        self.store = store
        self.storage = storage or StorageService()
        self.proxy = proxy or ContentDeliveryProxy()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def _load(self, document_id: str) -> Document:
        row = self.store.fetch_document(document_id)
        if not row:
            raise DocumentNotFoundError(document_id)
        return Document.model_validate(row)

    def list_documents(
        self,
        identity: AuthUser,
        target_owner: str | None = None,
    ) -> list[Document]:
        """
        List documents, newest first.

        Admins may pass `target_owner` to see another user's documents;
        for other users it is ignored.
        """
        owner_id = resolve_owner_filter(identity, target_owner)
        rows = self.store.fetch_documents_by_owner(owner_id)
        documents = [Document.model_validate(row) for row in rows]
        documents.sort(key=lambda doc: doc.created_at, reverse=True)
        return documents

    def get_document(self, identity: AuthUser, document_id: str) -> Document:
        """Fetch one document the caller owns (or any, for admins)."""
        document = self._load(document_id)
        require_access(identity, document)
        return document

    def search_documents(self, query: str | None) -> list[Document]:
        """
        Case-insensitive substring search over original_name and description.

        Matches records of every owner, not just the caller's. A blank
        query matches nothing.
        """
        query = (query or "").strip()
        if not query:
            return []

        rows = self.store.search_documents(query)
        documents = [Document.model_validate(row) for row in rows]
        documents.sort(key=lambda doc: doc.created_at, reverse=True)
        return documents

    # -------------------------------------------------------------------------
    # Upload
    # -------------------------------------------------------------------------

    def _validate_file(self, content: bytes | None, file_meta: FileMeta | None) -> None:
        if not content or file_meta is None:
            raise ValidationError("No file uploaded", field="file")

        allowed = settings.allowed_extensions_list
        if file_extension(file_meta.original_name) not in allowed:
            raise InvalidFileTypeError(file_meta.original_name, allowed)

        if len(content) > settings.max_upload_size_bytes:
            raise FileTooLargeError(len(content) / (1024 * 1024), settings.MAX_UPLOAD_SIZE_MB)

    def upload_document(
        self,
        identity: AuthUser,
        title: str | None,
        content: bytes | None,
        file_meta: FileMeta | None,
        category: str | DocumentCategory | None = None,
        description: str | None = None,
    ) -> Document:
        """
        Store a file and create its document record.

        Everything that can be validated is validated before the blob
        write, so a rejected upload never leaves a blob behind.

        Raises:
            ValidationError: Missing title or file, bad category, file type
                or size (400/413)
            UpstreamStorageError: The blob write failed; no record created
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title is required", field="title")

        self._validate_file(content, file_meta)
        parsed_category = _parse_category(category)

        # Decided once, here, and stored; never re-derived later
        resource_class = classify_resource(file_meta.mime_type)

        # Step 1: blob write. Raises UpstreamStorageError on failure.
        blob = self.storage.store(
            content,
            StoreHints(
                original_name=file_meta.original_name,
                mime_type=file_meta.mime_type,
                resource_class=resource_class,
            ),
        )

        new_document = NewDocument(
            owner_id=identity.id,
            title=title,
            category=parsed_category,
            description=(description or "").strip(),
            storage_id=normalize_storage_id(blob.storage_id),
            storage_url=blob.storage_url,
            resource_class=resource_class,
            original_name=file_meta.original_name,
            mime_type=file_meta.mime_type,
            size=file_meta.size or len(content),
        )

        # Step 2: metadata write
        try:
            row = self.store.insert_document(new_document.to_row())
        except Exception:
            logger.error(f"Record insert failed; orphaned blob left at {new_document.storage_id}")
            raise

        document = Document.model_validate(row)
        logger.info(f"User {identity.id} uploaded document {document.id} ({document.original_name})")
        return document

    # -------------------------------------------------------------------------
    # Download
    # -------------------------------------------------------------------------

    def _resolve_download(self, identity: AuthUser, document_id: str) -> tuple[Document, str]:
        document = self._load(document_id)
        require_access(identity, document)

        if not document.is_available:
            raise DocumentUnavailableError(document_id)

        if document.storage_url:
            return document, document.storage_url

        if document.resource_class is None:
            logger.error(f"Document {document_id} has a storage_id but no url or resource class")
            raise DocumentUnavailableError(document_id)

        return document, self.storage.build_access_url(document.storage_id, document.resource_class)

    async def download_document(self, identity: AuthUser, document_id: str) -> DeliveryStream:
        """
        Open the document's content for streaming to the caller.

        Raises:
            DocumentNotFoundError: No such record (404)
            AuthorizationError: Caller is neither owner nor admin (403)
            DocumentUnavailableError: Legacy record without stored content (404)
            UpstreamDeliveryError: The blob fetch failed (502)
        """
        # Record lookup uses the synchronous store client
        document, url = await asyncio.to_thread(self._resolve_download, identity, document_id)
        return await self.proxy.fetch(url, document.original_name, document.mime_type)

    def download_redirect_url(self, identity: AuthUser, document_id: str) -> str:
        """
        URL that serves the document as an attachment directly from storage.

        Used when DOWNLOAD_MODE is "redirect". Same checks as
        download_document.
        """
        document, url = self._resolve_download(identity, document_id)
        if document.resource_class is None:
            return url
        return self.storage.build_access_url(
            document.storage_id,
            document.resource_class,
            force_download_name=document.original_name,
        )

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    def delete_document(self, identity: AuthUser, document_id: str) -> DeleteResponse:
        """
        Delete a document's blob (best effort) and its record (always).

        Raises:
            DocumentNotFoundError: No such record (404)
            AuthorizationError: Caller is neither owner nor admin (403)
        """
        document = self._load(document_id)
        require_access(identity, document, action="delete")

        if document.storage_id and document.resource_class is not None:
            try:
                outcome = self.storage.remove(document.storage_id, document.resource_class)
                logger.debug(f"Blob removal for {document.storage_id}: {outcome.value}")
            except Exception as e:
                logger.warning(f"Blob removal failed for {document.storage_id}, continuing: {e}")
        elif document.storage_id:
            logger.warning(f"Document {document_id} has no resource class; blob {document.storage_id} left in place")

        self.store.delete_document(document.id)
        logger.info(f"User {identity.id} deleted document {document.id}")
        return DeleteResponse()
