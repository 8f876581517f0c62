"""
Upload API endpoints.

Accepts multipart uploads, stores them under generated canonical filenames,
and deletes stored files. The CMS persists the returned ``fileName``.
"""
import asyncio

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.config import settings
from app.dependencies.storage import get_storage
from app.logging_config import setup_logging
from app.schemas.common import ErrorResponse
from app.schemas.uploads import DeleteResponse, UploadedFile, UploadedFiles
from app.services.media import resolve_file_name
from app.services.uploads import UploadResult, ingest_upload
from app.storage.exceptions import (
    FileSizeExceededError,
    InvalidReferenceError,
    StorageError,
    StorageNotConfiguredError,
)
from app.storage.facade import StorageService

router = APIRouter(prefix="/upload", tags=["upload"])

logger = setup_logging()


def _error(status_code: int, error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "success": False,
            "error": error,
            "message": message,
        },
    )


def _max_size_bytes() -> int:
    return settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024


async def _store(storage: StorageService, file: UploadFile) -> UploadResult:
    data = await file.read()
    return await ingest_upload(
        storage,
        data,
        original_name=file.filename,
        content_type=file.content_type,
        max_size_bytes=_max_size_bytes(),
    )


def _upload_error(e: Exception, action: str) -> HTTPException:
    if isinstance(e, FileSizeExceededError):
        return _error(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "Payload Too Large", str(e))
    if isinstance(e, StorageNotConfiguredError):
        logger.error(f"Upload rejected, no storage backend: {str(e)}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", str(e))
    logger.error(f"Error uploading {action}: {str(e)}", exc_info=True)
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        f"Failed to upload {action}: {str(e)}",
    )


@router.post(
    "",
    response_model=UploadedFile,
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_file(
    file: UploadFile | None = File(None),
    storage: StorageService = Depends(get_storage),
):
    """
    Upload a single image or video.

    **Request (multipart/form-data):**
    - file: The file (max 50MB by default)

    **Returns:**
    - url: Access URL for immediate display
    - fileName: Canonical filename to persist
    """
    if file is None:
        raise _error(status.HTTP_400_BAD_REQUEST, "Bad Request", "No file provided")

    try:
        result = await _store(storage, file)
    except StorageError as e:
        raise _upload_error(e, "file")

    return UploadedFile(url=result.url, file_name=result.file_name)


@router.post("/multiple", response_model=UploadedFiles, status_code=status.HTTP_200_OK)
async def upload_files(
    files: list[UploadFile] | None = File(None),
    storage: StorageService = Depends(get_storage),
):
    """
    Upload several files at once (max 20 by default).

    Files are stored concurrently; if any upload fails the request fails.
    """
    if not files:
        raise _error(status.HTTP_400_BAD_REQUEST, "Bad Request", "No files provided")

    if len(files) > settings.MAX_FILES_PER_UPLOAD:
        raise _error(
            status.HTTP_400_BAD_REQUEST,
            "Bad Request",
            f"Too many files: at most {settings.MAX_FILES_PER_UPLOAD} per request",
        )

    try:
        results = await asyncio.gather(*(_store(storage, file) for file in files))
    except StorageError as e:
        raise _upload_error(e, "files")

    return UploadedFiles(
        files=[UploadedFile(url=result.url, file_name=result.file_name) for result in results]
    )


@router.delete("/{file_name}", response_model=DeleteResponse, status_code=status.HTTP_200_OK)
async def delete_file(
    file_name: str,
    storage: StorageService = Depends(get_storage),
):
    """
    Delete a stored file. Deleting a missing file succeeds.
    """
    try:
        await storage.delete(resolve_file_name(file_name))
    except InvalidReferenceError as e:
        raise _error(status.HTTP_400_BAD_REQUEST, "Bad Request", str(e))
    except StorageNotConfiguredError as e:
        raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", str(e))
    except StorageError as e:
        logger.error(f"Error deleting file {file_name}: {str(e)}", exc_info=True)
        raise _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            f"Failed to delete file: {str(e)}",
        )

    return DeleteResponse(success=True)
