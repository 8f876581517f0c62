from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.api.router import router as api_router
from app.config import settings
from app.dependencies.storage import create_storage
from app.logging_config import setup_logging
from app.storage.paths import LOCAL_PATH_PREFIX

# Setup application logging
logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Backend selection happens once; the facade is shared by every request
    storage = create_storage()
    app.state.storage = storage

    summary = storage.describe()
    backend = summary.pop("backend")
    if backend in ("gcs", "ftp"):
        details = ", ".join(f"{key}={value}" for key, value in summary.items())
        logger.info(f"Storage backend: {backend} ({details})")
    elif backend == "local":
        logger.warning(
            f"No cloud storage configured, storing uploads in {summary['uploads_dir']}. "
            "Set GCS_BUCKET_NAME and GCS_PROJECT_ID, or FTP_HOST, FTP_USER and FTP_PASSWORD."
        )
    else:
        logger.warning("Storage not configured. File uploads will fail.")

    yield


app = FastAPI(title="Portfolio Media API", lifespan=lifespan)

# prefix參數設定URL路徑前綴，所有透過api_router定義的endpoint都會加上這個前綴
app.include_router(api_router, prefix="/api")

# Legacy and local-only media is served straight from the uploads directory
if settings.LOCAL_STORAGE_ENABLED and settings.UPLOADS_DIR:
    app.mount(
        LOCAL_PATH_PREFIX.rstrip("/"),
        StaticFiles(directory=settings.UPLOADS_DIR, check_dir=False),
        name="uploads",
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Unwrap the 'detail' field from HTTPException responses."""
    content = exc.detail

    if isinstance(content, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": "Error",
            "message": content,
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    # Log detailed error for debugging (includes stack trace)
    logger.error(
        f"Unhandled exception: {exc.__class__.__name__}: {str(exc)}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    # Return safe, static message to client (no internal details exposed)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
        },
    )
