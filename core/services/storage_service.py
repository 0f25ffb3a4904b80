# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Blob storage gateway: store bytes, build access URLs, remove objects.
#
# Each resource class lives in its own bucket, so every call takes the
# resource class the object was stored with. Callers persist that class
# instead of guessing it again from a MIME type later.
# =============================================================================

import logging

from pydantic import BaseModel

from app.config import settings
from app.exceptions import StorageRemoveError, UpstreamStorageError
from core.models.document import RemoveOutcome, ResourceClass, StoredBlob
from lib.supabase_client import SupabaseClient
from lib.utils import build_object_key, normalize_storage_id, upgrade_to_https

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class StoreHints(BaseModel):
    """What the gateway needs to know about a blob before writing it."""
    original_name: str
    mime_type: str | None = None
    resource_class: ResourceClass = ResourceClass.RAW


class StorageService:
    """
    Gateway to the external blob store (Supabase Storage).

    Stateless apart from the shared Supabase client; safe to construct
    per request.
    """

    def __init__(self, client_factory=None):
        self._client_factory = client_factory or SupabaseClient.get_client

    def _bucket(self, resource_class: ResourceClass):
        bucket_names = {
            ResourceClass.IMAGE: settings.STORAGE_IMAGE_BUCKET,
            ResourceClass.VIDEO: settings.STORAGE_VIDEO_BUCKET,
            ResourceClass.RAW: settings.STORAGE_RAW_BUCKET,
        }
        return self._client_factory().storage.from_(bucket_names[ResourceClass(resource_class)])

    def store(self, content: bytes, hints: StoreHints) -> StoredBlob:
        """
        Upload bytes to the blob store.

        Args:
            content: File bytes
            hints: Original filename, MIME type and resource class

        Returns:
            StoredBlob with both storage_id and storage_url set

        Raises:
            UpstreamStorageError: If the upload fails. Nothing is returned
                on failure, so callers never see half a result.
        """
        storage_id = normalize_storage_id(build_object_key(hints.original_name))

        try:
            self._bucket(hints.resource_class).upload(
                path=storage_id,
                file=content,
                file_options={
                    "content-type": hints.mime_type or DEFAULT_CONTENT_TYPE,
                    "upsert": "false",
                },
            )
            storage_url = self.build_access_url(storage_id, hints.resource_class)

        except Exception as e:
            logger.error(f"Storage upload failed for {storage_id}: {e}")
            raise UpstreamStorageError()

        logger.info(f"Uploaded file to storage: {storage_id} ({len(content)} bytes)")
        return StoredBlob(storage_id=storage_id, storage_url=storage_url)

    def build_access_url(
        self,
        storage_id: str,
        resource_class: ResourceClass,
        force_download_name: str | None = None,
    ) -> str:
        """
        Build the URL of a stored object.

        The URL is assembled locally, without a network round trip, and
        always uses https.

        Args:
            storage_id: Canonical storage handle
            resource_class: Class the object was stored with
            force_download_name: If set, ask the store to serve the object
                as an attachment with this filename
        """
        options = {"download": force_download_name} if force_download_name else None
        bucket = self._bucket(resource_class)
        if options:
            url = bucket.get_public_url(storage_id, options)
        else:
            url = bucket.get_public_url(storage_id)
        return upgrade_to_https(url)

    def remove(self, storage_id: str, resource_class: ResourceClass) -> RemoveOutcome:
        """
        Remove an object from the blob store.

        Removing an object that is already gone returns NOT_FOUND; callers
        treat that the same as REMOVED.

        Raises:
            StorageRemoveError: If the store could not be reached or
                refused the request
        """
        try:
            removed = self._bucket(resource_class).remove([storage_id])
        except Exception as e:
            logger.error(f"Failed to delete file {storage_id} from storage: {e}")
            raise StorageRemoveError(storage_id)

        if not removed:
            logger.warning(f"File already absent from storage: {storage_id}")
            return RemoveOutcome.NOT_FOUND

        logger.info(f"Deleted file from storage: {storage_id}")
        return RemoveOutcome.REMOVED
