"""
Storage-specific exceptions.

These exceptions provide detailed error handling for storage operations.
"""


class StorageError(Exception):
    """Base exception for storage operations."""

    pass


class FileSizeExceededError(StorageError):
    """Raised when uploaded file exceeds maximum size limit."""

    def __init__(self, file_size: int, max_size: int):
        self.file_size = file_size
        self.max_size = max_size
        super().__init__(
            f"File size ({file_size} bytes) exceeds maximum allowed size ({max_size} bytes)"
        )


class FileNotFoundError(StorageError):
    """Raised when requested file is not found in storage."""

    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__(f"File not found: {file_name}")


class ConnectionFailedError(StorageError):
    """Raised when a backend connection or authentication attempt fails."""

    def __init__(self, backend: str, reason: str):
        self.backend = backend
        self.reason = reason
        super().__init__(f"{backend.upper()} connection failed: {reason}")


class StorageNotConfiguredError(StorageError):
    """Raised when no storage backend is configured."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "Storage not configured. Set GCS_BUCKET_NAME and GCS_PROJECT_ID, "
            "or FTP_HOST, FTP_USER and FTP_PASSWORD, or enable local storage."
        )


class InvalidReferenceError(StorageError):
    """Raised when a file reference escapes the storage root."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Invalid file reference: {reference}")
