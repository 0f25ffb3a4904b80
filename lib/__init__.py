# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper; the document metadata store
# - utils.py: Storage handle normalization, resource classification,
#   download filename helpers
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import (
    classify_resource,
    content_disposition,
    normalize_storage_id,
    sanitize_filename,
)

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "classify_resource",
    "content_disposition",
    "normalize_storage_id",
    "sanitize_filename",
]
