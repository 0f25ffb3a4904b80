# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - documents.py: Document upload, listing, search, download and delete
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import documents
from . import health

__all__ = [
    "documents",
    "health",
]
