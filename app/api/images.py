"""
Media proxy endpoint.

Serves files from the active backend so FTP-hosted and private-bucket media
load without CORS issues. Videos support HTTP range requests for seeking.
"""
from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.responses import Response

from app.dependencies.storage import get_storage
from app.logging_config import setup_logging
from app.schemas.common import ErrorResponse
from app.services.media import RangeNotSatisfiableError, fetch_media, parse_range_header
from app.storage.exceptions import InvalidReferenceError, StorageError, StorageNotConfiguredError
from app.storage.facade import StorageService

router = APIRouter(prefix="/images", tags=["images"])

logger = setup_logging()

# Public portfolio media: permissive CORS, long-lived caching
PROXY_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, HEAD",
    "Access-Control-Allow-Headers": "Range",
    "Cache-Control": "public, max-age=31536000",
}


@router.api_route(
    "/{reference:path}",
    methods=["GET", "HEAD"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        416: {"description": "Requested range not satisfiable"},
    },
)
async def proxy_media(
    reference: str,
    range_header: str | None = Header(None, alias="range"),
    storage: StorageService = Depends(get_storage),
):
    """
    Stream a stored file through the backend.

    **Headers:**
    - Range: ``bytes=start-end`` (videos only; ``end`` optional)

    **Returns:**
    - 200 with the full file, or 206 with the requested byte range
    """
    try:
        media = await fetch_media(storage, reference)
    except InvalidReferenceError as e:
        logger.warning(f"Rejected media reference {reference!r}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "error": "Bad Request",
                "message": str(e),
            },
        )
    except StorageNotConfiguredError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "success": False,
                "error": "Internal Server Error",
                "message": str(e),
            },
        )
    except StorageError as e:
        logger.warning(f"Error proxying file {reference!r}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "success": False,
                "error": "Not Found",
                "message": f"File not found: {str(e)}",
            },
        )

    headers = dict(PROXY_HEADERS)
    if media.is_video:
        headers["Accept-Ranges"] = "bytes"

    if media.is_video and range_header:
        try:
            byte_range = parse_range_header(range_header, media.size)
        except RangeNotSatisfiableError:
            headers["Content-Range"] = f"bytes */{media.size}"
            return Response(
                status_code=status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE,
                headers=headers,
            )

        headers["Content-Range"] = f"bytes {byte_range.start}-{byte_range.end}/{media.size}"
        return Response(
            content=media.content[byte_range.start:byte_range.end + 1],
            status_code=status.HTTP_206_PARTIAL_CONTENT,
            media_type=media.content_type,
            headers=headers,
        )

    return Response(
        content=media.content,
        status_code=status.HTTP_200_OK,
        media_type=media.content_type,
        headers=headers,
    )
