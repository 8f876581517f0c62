"""
Stored reference normalization.

Records written over the years hold file references in many shapes: bare
filenames, legacy ``/uploads/`` paths, FTP proxy paths, public bucket URLs and
signed URLs. Everything is collapsed to the canonical filename before it
touches a backend.
"""
import re
from urllib.parse import unquote, urlsplit

from app.logging_config import setup_logging

logger = setup_logging()

PROXY_PATH_PREFIX = "/api/images/"
LOCAL_PATH_PREFIX = "/uploads/"

EXTERNAL_MEDIA_HOSTS = ("youtube.com", "youtu.be", "vimeo.com")

_SCHEME_HOST_RE = re.compile(r"^https?://[^/]+")
_PROXY_PREFIX_RE = re.compile(r"^/api/images/")
_LOCAL_PREFIX_RE = re.compile(r"^/uploads/")
_BARE_LOCAL_PREFIX_RE = re.compile(r"^uploads/")
_GCS_PREFIX_RE = re.compile(r"^(?:https?://)?storage\.googleapis\.com/[^/]+/")


def _host_of(reference: str) -> str | None:
    parts = urlsplit(reference)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return (parts.hostname or "").lower()


def is_external_media(reference: str) -> bool:
    """Return True for video-sharing embed links that no backend owns."""
    if not isinstance(reference, str):
        return False
    try:
        host = _host_of(reference.strip())
    except ValueError:
        return False
    if not host:
        return False
    return any(host == domain or host.endswith(f".{domain}") for domain in EXTERNAL_MEDIA_HOSTS)


def normalize_reference(reference: str) -> str:
    """
    Collapse any stored reference into its canonical filename.

    Never raises: input that cannot be parsed is returned unchanged.

    Examples:
        >>> normalize_reference("/api/images/1700000000000-abc1234.webp")
        '1700000000000-abc1234.webp'
        >>> normalize_reference("https://storage.googleapis.com/bucket/x.mp4?X-Goog-Algorithm=GOOG4")
        'x.mp4'
    """
    if not isinstance(reference, str):
        return reference

    try:
        return _normalize(reference)
    except Exception as e:
        logger.debug(f"Could not normalize reference {reference!r}: {str(e)}")
        return reference


def _normalize(reference: str) -> str:
    if is_external_media(reference):
        return reference

    value = reference.strip()

    # 1. Absolute URL: keep the last non-empty path segment
    if _host_of(value) is not None:
        segments = [segment for segment in urlsplit(value).path.split("/") if segment]
        value = unquote(segments[-1]) if segments else ""

    # 2. Scheme + host left over
    value = _SCHEME_HOST_RE.sub("", value)

    # 3. Proxy prefix, then legacy local prefixes
    value = _PROXY_PREFIX_RE.sub("", value)
    value = _LOCAL_PREFIX_RE.sub("", value)
    value = _BARE_LOCAL_PREFIX_RE.sub("", value)

    # 4. Public bucket prefix
    value = _GCS_PREFIX_RE.sub("", value)

    # 5. Query parameters
    value = value.split("?", 1)[0]

    # 6. Keep the last segment
    if "/" in value:
        segments = [segment for segment in value.split("/") if segment]
        value = segments[-1] if segments else ""

    value = value.strip()
    if not value:
        return reference
    return value


def contains_traversal(file_name: str) -> bool:
    return ".." in file_name


def proxy_path(file_name: str) -> str:
    return f"{PROXY_PATH_PREFIX}{file_name}"


def local_path(file_name: str) -> str:
    return f"{LOCAL_PATH_PREFIX}{file_name}"
