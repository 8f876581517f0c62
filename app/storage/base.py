"""
Abstract base class for storage backends.

This module defines the interface that all storage backends must implement,
so the facade can swap local disk, FTP and Google Cloud Storage freely.
"""
from abc import ABC, abstractmethod

from app.config import BackendKind


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    All storage implementations (local filesystem, FTP, GCS) must implement
    these methods. Filenames passed in are canonical filenames; reference
    normalization happens in the facade.
    """

    kind: BackendKind

    @abstractmethod
    async def upload(
        self,
        data: bytes,
        file_name: str,
        content_type: str | None = None,
    ) -> str:
        """
        Write file content under the given name.

        A later upload with the same name replaces the earlier content.
        Missing intermediate directories or prefixes are created.

        Args:
            data: Complete file content
            file_name: Canonical filename
            content_type: MIME type of the file, if known

        Returns:
            The stored filename

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def download(self, file_name: str) -> bytes:
        """
        Read the full content of a file.

        Args:
            file_name: Canonical filename

        Returns:
            File content

        Raises:
            FileNotFoundError: If the file doesn't exist
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def delete(self, file_name: str) -> None:
        """
        Delete a file from storage.

        Deleting a file that does not exist succeeds silently.

        Args:
            file_name: Canonical filename

        Raises:
            StorageError: If the delete operation fails
        """
        pass

    @abstractmethod
    async def exists(self, file_name: str) -> bool:
        """
        Check if a file exists in storage.

        Args:
            file_name: Canonical filename

        Returns:
            True if file exists, False otherwise
        """
        pass
