"""
Storage abstraction layer for media files.

This package provides a uniform interface over local disk, FTP and Google
Cloud Storage, plus normalization of historical file references.
"""

from app.storage.base import StorageBackend
from app.storage.exceptions import (
    ConnectionFailedError,
    FileNotFoundError,
    FileSizeExceededError,
    InvalidReferenceError,
    StorageError,
    StorageNotConfiguredError,
)
from app.storage.facade import StorageService, build_backends
from app.storage.local import LocalStorageBackend
from app.storage.paths import is_external_media, normalize_reference

__all__ = [
    "StorageBackend",
    "StorageService",
    "LocalStorageBackend",
    "build_backends",
    "normalize_reference",
    "is_external_media",
    "ConnectionFailedError",
    "FileNotFoundError",
    "FileSizeExceededError",
    "InvalidReferenceError",
    "StorageError",
    "StorageNotConfiguredError",
]
