# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Pure helpers used across the application:
# - Storage handle normalization and resource classification
# - Object key generation for new uploads
# - Filename sanitizing for Content-Disposition headers
#
# Nothing here performs I/O.
# =============================================================================

import random
import re
import time
from urllib.parse import quote

from app.config import settings
from core.models.document import ResourceClass


# =============================================================================
# Storage Handles
# =============================================================================

def normalize_storage_id(
    raw_id: str,
    namespace: str | None = None,
    separator: str | None = None,
) -> str:
    """
    Map a raw storage handle to its canonical namespaced form.

    A handle that already contains the separator is returned unchanged;
    otherwise the namespace is prepended. Applying this twice gives the
    same result as applying it once.

    Example:
        normalize_storage_id("17180-42-passport.pdf")
        # "document-organizer/17180-42-passport.pdf"
        normalize_storage_id("document-organizer/17180-42-passport.pdf")
        # unchanged
    """
    namespace = namespace if namespace is not None else settings.STORAGE_NAMESPACE
    separator = separator if separator is not None else settings.STORAGE_NAMESPACE_SEPARATOR

    if separator in raw_id:
        return raw_id
    return f"{namespace}{separator}{raw_id}"


def classify_resource(mime_type: str | None) -> ResourceClass:
    """
    Map a MIME type to the storage resource class.

    image/* -> IMAGE, video/* -> VIDEO, anything else (or nothing) -> RAW.
    """
    if not mime_type:
        return ResourceClass.RAW

    mime_type = mime_type.strip().lower()
    if mime_type.startswith("image/"):
        return ResourceClass.IMAGE
    if mime_type.startswith("video/"):
        return ResourceClass.VIDEO
    return ResourceClass.RAW


def file_extension(filename: str) -> str:
    """Return the lowercase extension with its dot, or "" if there is none."""
    if "." not in filename:
        return ""
    return "." + filename.rsplit(".", 1)[-1].lower()


def build_object_key(original_name: str, separator: str | None = None) -> str:
    """
    Generate a unique object key for an uploaded file.

    Format: <epoch-ms>-<random>-<stem>.<ext>, with whitespace runs in the
    stem collapsed to underscores. The namespace separator never appears
    in the key, so normalize_storage_id always prepends the namespace.
    """
    separator = separator if separator is not None else settings.STORAGE_NAMESPACE_SEPARATOR

    ext = file_extension(original_name)
    stem = original_name[: -len(ext)] if ext else original_name
    stem = re.sub(r"\s+", "_", stem.strip()) or "file"
    name = f"{stem}{ext}".replace("/", "_").replace("\\", "_").replace(separator, "_")

    timestamp = int(time.time() * 1000)
    suffix = random.randint(0, 10**9)
    return f"{timestamp}-{suffix}-{name}"


def upgrade_to_https(url: str) -> str:
    """Rewrite a plaintext http:// URL to https://."""
    if url.lower().startswith("http://"):
        return "https://" + url[len("http://"):]
    return url


# =============================================================================
# Download Headers
# =============================================================================

# Control characters (including CR/LF) would allow header injection
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def sanitize_filename(filename: str | None, default: str = "download") -> str:
    """
    Strip characters that are unsafe in a download filename.

    Removes control characters and path separators. Returns `default`
    if nothing printable remains.
    """
    if not filename:
        return default

    cleaned = _CONTROL_CHARS.sub("", filename)
    cleaned = cleaned.replace("/", "_").replace("\\", "_").strip()
    return cleaned or default


def content_disposition(filename: str | None) -> str:
    """
    Build an `attachment` Content-Disposition header value.

    Carries an ASCII fallback in `filename` and the exact UTF-8 name in
    `filename*` (RFC 6266 / RFC 5987).

    Example:
        content_disposition("résumé.pdf")
        # attachment; filename="rsum.pdf"; filename*=UTF-8''r%C3%A9sum%C3%A9.pdf
    """
    name = sanitize_filename(filename)
    ascii_name = name.encode("ascii", "ignore").decode("ascii")
    ascii_name = re.sub(r'["\\;]', "_", ascii_name) or "download"
    encoded = quote(name, safe="")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{encoded}"
