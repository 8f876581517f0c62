"""
Media proxy service.

Resolves a stored reference to file bytes from the active backend and works
out content type and byte ranges for the ``/api/images`` endpoint. Files are
buffered whole before responding; the upload size cap bounds the memory used.
"""
import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from app.storage.exceptions import InvalidReferenceError
from app.storage.facade import StorageService
from app.storage.paths import contains_traversal, normalize_reference

CONTENT_TYPES = {
    ".webp": "image/webp",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
}
VIDEO_EXTENSIONS = {".mp4", ".webm"}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


class RangeNotSatisfiableError(Exception):
    """Raised when a Range header cannot be served for the file size."""

    def __init__(self, size: int):
        self.size = size
        super().__init__(f"Requested range not satisfiable for {size} bytes")


@dataclass
class MediaFile:
    file_name: str
    content: bytes
    content_type: str
    is_video: bool

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class ByteRange:
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1


def _extension(file_name: str) -> str:
    return PurePosixPath(file_name).suffix.lower()


def content_type_for(file_name: str) -> str:
    return CONTENT_TYPES.get(_extension(file_name), DEFAULT_CONTENT_TYPE)


def is_video(file_name: str) -> bool:
    return _extension(file_name) in VIDEO_EXTENSIONS


def parse_range_header(header: str, size: int) -> ByteRange:
    """
    Parse a single ``bytes=start-end`` range.

    ``end`` defaults to the last byte and is clamped to it; ``bytes=-N``
    selects the last N bytes.

    Args:
        header: Raw Range header value
        size: Full file size in bytes

    Returns:
        Inclusive byte range

    Raises:
        RangeNotSatisfiableError: If the header is malformed or starts past the end
    """
    match = _RANGE_RE.match(header.strip())
    if not match or size == 0:
        raise RangeNotSatisfiableError(size)

    start_text, end_text = match.groups()

    if not start_text:
        # Suffix range: last N bytes
        if not end_text or int(end_text) == 0:
            raise RangeNotSatisfiableError(size)
        start = max(size - int(end_text), 0)
        return ByteRange(start=start, end=size - 1)

    start = int(start_text)
    end = int(end_text) if end_text else size - 1
    end = min(end, size - 1)

    if start >= size or start > end:
        raise RangeNotSatisfiableError(size)

    return ByteRange(start=start, end=end)


def resolve_file_name(reference: str) -> str:
    """
    Normalize a requested reference and reject traversal attempts.

    Raises:
        InvalidReferenceError: If the reference or its normalized name contains ``..``
    """
    file_name = normalize_reference(reference)
    if not file_name or contains_traversal(reference) or contains_traversal(file_name):
        raise InvalidReferenceError(reference)
    return file_name


async def fetch_media(storage: StorageService, reference: str) -> MediaFile:
    """
    Load a media file for proxying.

    Args:
        storage: Storage facade
        reference: Requested filename or legacy reference

    Returns:
        MediaFile with full content and content type

    Raises:
        InvalidReferenceError: If the reference is a traversal attempt
        StorageNotConfiguredError: If no backend is configured
        FileNotFoundError: If the file doesn't exist
        StorageError: If the backend read fails
    """
    file_name = resolve_file_name(reference)
    content = await storage.download(file_name)
    return MediaFile(
        file_name=file_name,
        content=content,
        content_type=content_type_for(file_name),
        is_video=is_video(file_name),
    )
