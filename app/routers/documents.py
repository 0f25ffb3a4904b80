# =============================================================================
# app/routers/documents.py - Document Endpoints
# =============================================================================
# HTTP surface of the document lifecycle. Handlers translate requests into
# DocumentService calls and nothing more; ownership, ordering and failure
# handling all live in the service.
#
# The Supabase client is synchronous, so handlers are plain `def` and run in
# the threadpool. Only download is async, for the streamed response.
#
#   GET    /documents[?user=<id>]      list (user filter is admin-only)
#   POST   /documents                  upload (multipart)
#   GET    /documents/search?query=    search
#   GET    /documents/{id}             fetch one record
#   GET    /documents/{id}/download    attachment download
#   DELETE /documents/{id}             delete
# =============================================================================

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile, status
from fastapi.responses import RedirectResponse, StreamingResponse

from app.auth import AuthUser, get_current_user
from app.config import settings
from app.dependencies import DocumentServiceDep
from core.models.document import DeleteResponse, Document, FileMeta

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=list[Document])
def list_documents(
    service: DocumentServiceDep,
    user: AuthUser = Depends(get_current_user),
    owner: Annotated[
        str | None,
        Query(alias="user", description="Owner to list (admins only; ignored otherwise)"),
    ] = None,
):
    """
    List documents, newest first.

    Regular users always get their own documents. Admins may pass
    `?user=<id>` to list someone else's.
    """
    return service.list_documents(user, target_owner=owner)


@router.post("", response_model=Document, status_code=status.HTTP_201_CREATED)
def upload_document(
    service: DocumentServiceDep,
    user: AuthUser = Depends(get_current_user),
    file: Annotated[UploadFile | None, File(description="Document to upload")] = None,
    title: Annotated[str | None, Form()] = None,
    category: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
):
    """
    Upload a document.

    The file goes to blob storage first; the record is created only once
    the file is safely stored. Returns the created record.
    """
    content = None
    file_meta = None

    # Browsers send an empty part with no filename when nothing was chosen
    if file is not None and file.filename:
        content = file.file.read()
        file_meta = FileMeta(
            original_name=file.filename,
            mime_type=file.content_type,
            size=len(content),
        )

    return service.upload_document(
        user,
        title=title,
        content=content,
        file_meta=file_meta,
        category=category,
        description=description,
    )


@router.get("/search", response_model=list[Document])
def search_documents(
    service: DocumentServiceDep,
    user: AuthUser = Depends(get_current_user),
    query: Annotated[str, Query(description="Text to find in filenames and descriptions")] = "",
):
    """
    Search documents by original filename or description.

    Note: results are not limited to the caller's own documents.
    """
    return service.search_documents(query)


@router.get("/{document_id}", response_model=Document)
def get_document(
    document_id: Annotated[str, Path(description="Document ID")],
    service: DocumentServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """Get a single document record. Owner or admin only."""
    return service.get_document(user, document_id)


@router.get("/{document_id}/download")
async def download_document(
    document_id: Annotated[str, Path(description="Document ID")],
    service: DocumentServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Download a document as an attachment.

    By default the content is streamed through the API with a forced
    filename, so the storage URL is never exposed. With DOWNLOAD_MODE=redirect
    the client is redirected to storage instead.
    """
    if settings.DOWNLOAD_MODE == "redirect":
        url = await asyncio.to_thread(service.download_redirect_url, user, document_id)
        return RedirectResponse(url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    stream = await service.download_document(user, document_id)
    return StreamingResponse(
        stream.iter_bytes(),
        media_type=stream.media_type,
        headers=stream.headers,
    )


@router.delete("/{document_id}", response_model=DeleteResponse)
def delete_document(
    document_id: Annotated[str, Path(description="Document ID")],
    service: DocumentServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Delete a document. Owner or admin only.

    Storage cleanup is best effort; the record is always removed.
    """
    return service.delete_document(user, document_id)
