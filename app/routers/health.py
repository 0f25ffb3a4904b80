# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Liveness and readiness probes for load balancers.
#
# Readiness covers both systems a document operation touches: the documents
# table and every bucket a resource class maps to. A missing bucket means
# uploads of that class would fail, so it counts as not ready.
# =============================================================================

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.config import settings
from core.models.document import ResourceClass
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter()

VERSION = "1.0.0"


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str
    download_mode: str


class ReadinessResponse(BaseModel):
    """Per-dependency results; `buckets` is keyed by resource class."""
    status: str
    documents_table: str
    buckets: dict[str, str] = Field(default_factory=dict)
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _bucket_names() -> dict[ResourceClass, str]:
    return {
        ResourceClass.IMAGE: settings.STORAGE_IMAGE_BUCKET,
        ResourceClass.VIDEO: settings.STORAGE_VIDEO_BUCKET,
        ResourceClass.RAW: settings.STORAGE_RAW_BUCKET,
    }


def _probe_documents_table() -> str:
    try:
        client = SupabaseClient.get_client()
        client.table(settings.DOCUMENTS_TABLE).select("id").limit(1).execute()
        return "ok"
    except Exception as e:
        logger.warning(f"Readiness: table {settings.DOCUMENTS_TABLE} unreachable: {e}")
        return "unavailable"


def _probe_bucket(name: str) -> str:
    try:
        SupabaseClient.get_client().storage.get_bucket(name)
        return "ok"
    except Exception as e:
        logger.warning(f"Readiness: bucket {name} unreachable: {e}")
        return "unavailable"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Process is up and configured."""
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=VERSION,
        download_mode=settings.DOWNLOAD_MODE,
    )


@router.get("/health/live")
async def liveness_check():
    return {"status": "alive", "timestamp": _now()}


@router.get("/health/ready", response_model=ReadinessResponse)
def readiness_check():
    """
    Check the documents table and each storage bucket.

    Always answers 200; `status` is "ready" only when every probe passed.
    Failure reasons are logged, not returned.
    """
    documents_table = _probe_documents_table()
    buckets = {
        resource_class.value: _probe_bucket(name)
        for resource_class, name in _bucket_names().items()
    }

    ready = documents_table == "ok" and all(result == "ok" for result in buckets.values())

    return ReadinessResponse(
        status="ready" if ready else "degraded",
        documents_table=documents_table,
        buckets=buckets,
        timestamp=_now(),
    )
