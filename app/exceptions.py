# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
#
# Every caller-visible failure is one of the classes below. Messages are
# written for the caller; upstream URLs and raw backend errors are logged
# where they occur and never placed in a response body.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class DocumentOrganizerException(Exception):
    """
    Base exception for the Document Organizer API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "DOCUMENT_ORGANIZER_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        self.headers = headers

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Validation Exceptions (400)
# =============================================================================

class ValidationError(DocumentOrganizerException):
    """Raised when request input is missing or malformed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            suggestion=suggestion,
            details={"field": field} if field else None,
        )


class InvalidCategoryError(ValidationError):
    """Raised when the category is not one of the known values."""

    def __init__(self, category: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid category: {category}",
            field="category",
            suggestion=f"Use one of: {', '.join(allowed)}",
        )


class InvalidFileTypeError(ValidationError):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, filename: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid file type: {filename}",
            field="file",
            suggestion=f"Only these file types are supported: {', '.join(allowed)}",
        )


class FileTooLargeError(ValidationError):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            field="file",
            suggestion=f"Upload a file smaller than {max_mb}MB",
        )
        self.status_code = 413


# =============================================================================
# Identity Exceptions (401 / 403)
# =============================================================================

class AuthenticationError(DocumentOrganizerException):
    """Raised when no identity, or an invalid one, accompanies the request."""

    def __init__(self, message: str = "Not authorized, token missing"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_REQUIRED",
            status_code=401,
            suggestion="Log in again and send the token as 'Authorization: Bearer <token>'",
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(DocumentOrganizerException):
    """Raised when an identity is neither the record owner nor an admin."""

    def __init__(self, action: str = "access"):
        super().__init__(
            message=f"Not authorized to {action} this file",
            code="NOT_AUTHORIZED",
            status_code=403,
        )


# =============================================================================
# Not Found Exceptions (404)
# =============================================================================

class NotFoundError(DocumentOrganizerException):
    """Raised when a record or its content does not exist."""

    def __init__(self, message: str, code: str = "NOT_FOUND", details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code=code,
            status_code=404,
            details=details,
        )


class DocumentNotFoundError(NotFoundError):
    """Raised when a document ID doesn't exist."""

    def __init__(self, document_id: str):
        super().__init__(
            message="Document not found",
            code="DOCUMENT_NOT_FOUND",
            details={"document_id": document_id},
        )


class DocumentUnavailableError(NotFoundError):
    """Raised for records that predate blob storage and have no content."""

    def __init__(self, document_id: str):
        super().__init__(
            message="File not available",
            code="FILE_NOT_AVAILABLE",
            details={"document_id": document_id},
        )


# =============================================================================
# Upstream Storage Exceptions (502)
# =============================================================================

class UpstreamStorageError(DocumentOrganizerException):
    """Raised when the blob write fails during upload. No record is created."""

    def __init__(self):
        super().__init__(
            message="Failed to upload file to storage",
            code="STORAGE_UPLOAD_ERROR",
            status_code=502,
            suggestion="Try again later or contact support if the issue persists",
        )


class UpstreamDeliveryError(DocumentOrganizerException):
    """Raised when the blob fetch fails during download. The record is untouched."""

    def __init__(self):
        super().__init__(
            message="Failed to retrieve file from storage",
            code="STORAGE_DELIVERY_ERROR",
            status_code=502,
            suggestion="Try the download again in a moment",
        )


class StorageRemoveError(DocumentOrganizerException):
    """Raised by the blob gateway when removal fails at the transport level."""

    def __init__(self, storage_id: str):
        super().__init__(
            message="Failed to remove file from storage",
            code="STORAGE_REMOVE_ERROR",
            status_code=502,
            details={"storage_id": storage_id},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def document_organizer_exception_handler(
    request: Request,
    exc: DocumentOrganizerException
) -> JSONResponse:
    """
    Convert DocumentOrganizerException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request validation errors raised by FastAPI.

    Malformed input is a 400 like every other validation failure.
    """
    errors = exc.errors() if hasattr(exc, "errors") else str(exc)
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": [
                {"loc": list(err.get("loc", [])), "msg": err.get("msg")}
                for err in errors
            ] if isinstance(errors, list) else errors,
        }
    )
