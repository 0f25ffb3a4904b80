# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Document Organizer API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    DocumentOrganizerException,
    document_organizer_exception_handler,
    validation_exception_handler,
)
from app.routers import documents, health

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs startup configuration. Clients are created lazily, so there is
    nothing to tear down.
    """
    logger.info(f"Starting Document Organizer API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Download mode: {settings.DOWNLOAD_MODE}")

    yield

    logger.info("Shutting down Document Organizer API")


# Create FastAPI application
app = FastAPI(
    title="Document Organizer API",
    description="""
## Personal Document Storage

Upload documents, list and search them, download them as attachments,
and delete them. File contents live in blob storage; the API keeps one
metadata record per document.

### Guarantees

- A record is created only after its file is stored.
- Deleting a document always removes its record, even if storage cleanup fails.
- Downloads are streamed through the API with a forced filename.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Documents",
            "description": "Upload, list, search, download and delete documents",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    expose_headers=["Content-Disposition"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(DocumentOrganizerException)
async def handle_document_organizer_exception(request: Request, exc: DocumentOrganizerException):
    """Handle custom Document Organizer exceptions."""
    return await document_organizer_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    """Malformed requests are reported as 400."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(
    health.router,
    prefix="/api",
    tags=["Health"]
)

app.include_router(
    documents.router,
    prefix="/api/documents",
    tags=["Documents"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """Root endpoint - returns API status."""
    return {
        "status": "ok",
        "message": "Document Organizer API",
        "docs": "/docs",
        "health": "/api/health",
    }
