"""
Local filesystem storage implementation.

This module provides a local filesystem implementation of the storage backend
with async file operations. Files live flat under the uploads directory and
are served back as ``/uploads/<name>``.
"""
import os
from pathlib import Path

import aiofiles

from app.config import BackendKind, LocalConfig
from app.storage.base import StorageBackend
from app.storage.exceptions import FileNotFoundError, InvalidReferenceError, StorageError


class LocalStorageBackend(StorageBackend):
    """
    Local filesystem storage with async operations.

    The uploads directory is created when the backend is constructed, which
    happens once at process start.
    """

    kind = BackendKind.LOCAL

    def __init__(self, config: LocalConfig):
        """
        Initialize local storage backend.

        Args:
            config: Local storage configuration (uploads directory)
        """
        self.base_path = Path(config.uploads_dir)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._root = self.base_path.resolve()

    async def upload(
        self,
        data: bytes,
        file_name: str,
        content_type: str | None = None,
    ) -> str:
        """
        Write file to disk (async).

        Args:
            data: Complete file content
            file_name: Canonical filename
            content_type: Ignored by the local backend

        Returns:
            The stored filename

        Raises:
            StorageError: If save operation fails
        """
        file_path = self._get_file_path(file_name)

        # Ensure directory exists
        self._ensure_directory_exists(file_path)

        try:
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(data)
        except OSError as e:
            # Clean up partial file on error
            if os.path.exists(file_path):
                try:
                    os.remove(file_path)
                except OSError:
                    pass
            raise StorageError(f"Failed to save file: {str(e)}") from e

        return file_name

    async def download(self, file_name: str) -> bytes:
        """
        Read a file from disk.

        Raises:
            FileNotFoundError: If file doesn't exist
            StorageError: If the read fails
        """
        file_path = self._get_file_path(file_name)

        if not file_path.is_file():
            raise FileNotFoundError(file_name)

        try:
            async with aiofiles.open(file_path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageError(f"Failed to read file: {str(e)}") from e

    async def delete(self, file_name: str) -> None:
        """
        Delete a file from disk. Missing files are treated as already deleted.

        Raises:
            StorageError: If delete operation fails
        """
        file_path = self._get_file_path(file_name)

        try:
            file_path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete file: {str(e)}") from e

    async def exists(self, file_name: str) -> bool:
        file_path = self._get_file_path(file_name)
        return file_path.is_file()

    def _get_file_path(self, file_name: str) -> Path:
        """
        Resolve a filename inside the uploads directory.

        Args:
            file_name: Canonical filename

        Returns:
            Absolute file path

        Raises:
            InvalidReferenceError: If the resolved path escapes the uploads directory
        """
        file_path = (self._root / file_name).resolve()
        if file_path == self._root or not file_path.is_relative_to(self._root):
            raise InvalidReferenceError(file_name)
        return file_path

    def _ensure_directory_exists(self, file_path: Path) -> None:
        """
        Ensure the parent directory exists.

        Args:
            file_path: File path that needs parent directory
        """
        directory = file_path.parent
        directory.mkdir(parents=True, exist_ok=True)
