"""
Upload ingestion service.

Generates collision-resistant canonical filenames and hands file content to
the storage facade. Only the returned filename should be persisted by the
CMS; the URL is for immediate display.
"""
import time
from dataclasses import dataclass

from app.logging_config import setup_logging
from app.storage.exceptions import FileSizeExceededError
from app.storage.facade import StorageService
from app.utils.ids import generate_short_id

logger = setup_logging()

IMAGE_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
}
# The admin image cropper exports WebP
DEFAULT_EXTENSION = ".webp"


@dataclass
class UploadResult:
    url: str
    file_name: str


def extension_for(content_type: str | None) -> str:
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if mime.startswith("video/"):
        return ".webm" if "webm" in mime else ".mp4"
    return IMAGE_EXTENSIONS.get(mime, DEFAULT_EXTENSION)


def generate_file_name(original_name: str | None, content_type: str | None) -> str:
    """
    Generate a canonical filename: ``{ms-timestamp}-{suffix}{ext}``.

    Args:
        original_name: Client-side filename (only used for logging)
        content_type: MIME type declared by the client

    Returns:
        New filename, e.g. ``1718000000000-k3j9x2a.webp``
    """
    timestamp = int(time.time() * 1000)
    return f"{timestamp}-{generate_short_id()}{extension_for(content_type)}"


async def ingest_upload(
    storage: StorageService,
    data: bytes,
    original_name: str | None,
    content_type: str | None,
    max_size_bytes: int,
) -> UploadResult:
    """
    Store one uploaded file under a freshly generated name.

    Args:
        storage: Storage facade
        data: File content
        original_name: Client-side filename
        content_type: Declared MIME type
        max_size_bytes: Upload size limit

    Returns:
        UploadResult with access URL and canonical filename

    Raises:
        FileSizeExceededError: If the file is larger than the limit
        StorageNotConfiguredError: If no backend is configured
        StorageError: If the backend write fails
    """
    if len(data) > max_size_bytes:
        raise FileSizeExceededError(len(data), max_size_bytes)

    file_name = generate_file_name(original_name, content_type)
    await storage.upload(data, file_name, content_type)
    url = await storage.url_for(file_name)

    logger.info(
        f"Stored upload: original_name={original_name}, file_name={file_name}, "
        f"size={len(data)}, backend={storage.active_kind.value}"
    )
    return UploadResult(url=url, file_name=file_name)
