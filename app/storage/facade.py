"""
Storage facade.

Chooses the active backend (GCS > FTP > Local, first configured wins) and
decides how each file is exposed to clients: direct public URL, signed URL,
proxy URL or local static path.
"""
from typing import Iterable

from app.config import BackendKind, StorageConfig
from app.logging_config import setup_logging
from app.storage.base import StorageBackend
from app.storage.exceptions import FileNotFoundError, StorageNotConfiguredError
from app.storage.paths import is_external_media, local_path, normalize_reference, proxy_path

logger = setup_logging()

BACKEND_PRIORITY = (BackendKind.GCS, BackendKind.FTP, BackendKind.LOCAL)


def build_backends(config: StorageConfig) -> dict[BackendKind, StorageBackend]:
    """
    Construct a driver for every configured bundle.

    Remote SDK modules are imported only when their backend is configured.
    """
    backends: dict[BackendKind, StorageBackend] = {}

    if config.gcs is not None:
        from app.storage.gcs import GCSStorageBackend
        backends[BackendKind.GCS] = GCSStorageBackend(config.gcs)

    if config.ftp is not None:
        from app.storage.ftp import FTPStorageBackend
        backends[BackendKind.FTP] = FTPStorageBackend(config.ftp)

    if config.local is not None:
        from app.storage.local import LocalStorageBackend
        backends[BackendKind.LOCAL] = LocalStorageBackend(config.local)

    return backends


class StorageService:
    """
    Uniform entry point for uploads, reads and access URLs.

    Every public method accepts a stored reference in any historical form and
    normalizes it before use.
    """

    def __init__(
        self,
        config: StorageConfig,
        backends: dict[BackendKind, StorageBackend] | None = None,
    ):
        """
        Args:
            config: Immutable storage configuration
            backends: Prebuilt drivers keyed by kind (default: built from config)
        """
        self.config = config
        self.backends = backends if backends is not None else build_backends(config)

    def is_configured(self, kind: BackendKind) -> bool:
        return kind in self.backends

    @property
    def active_kind(self) -> BackendKind | None:
        for kind in BACKEND_PRIORITY:
            if kind in self.backends:
                return kind
        return None

    def active_backend(self) -> StorageBackend:
        """
        Return the driver that receives reads and writes.

        Raises:
            StorageNotConfiguredError: If no backend is configured
        """
        kind = self.active_kind
        if kind is None:
            raise StorageNotConfiguredError()
        return self.backends[kind]

    def backend(self, kind: BackendKind) -> StorageBackend:
        """
        Return a specific configured driver (used for migrations).

        Raises:
            StorageNotConfiguredError: If that backend is not configured
        """
        if kind not in self.backends:
            raise StorageNotConfiguredError(f"{kind.value.upper()} storage is not configured")
        return self.backends[kind]

    async def url_for(self, reference: str) -> str:
        """
        Build an access URL for a stored reference.

        Args:
            reference: Canonical filename or any legacy stored reference

        Returns:
            Public URL, signed URL, proxy path or local static path
        """
        file_name = normalize_reference(reference)
        if is_external_media(file_name):
            return file_name

        gcs = self.backends.get(BackendKind.GCS)
        if gcs is not None and gcs.config.public_access:
            return gcs.public_url(file_name)

        kind = self.active_kind

        if kind == BackendKind.GCS:
            try:
                signed = await gcs.signed_url(file_name)
            except FileNotFoundError:
                logger.warning(f"Cannot sign URL for missing object {file_name}, using proxy URL")
                return proxy_path(file_name)
            if signed is None:
                return proxy_path(file_name)
            return signed

        if kind == BackendKind.FTP:
            return proxy_path(file_name)

        return local_path(file_name)

    async def upload(self, data: bytes, file_name: str, content_type: str | None = None) -> str:
        backend = self.active_backend()
        return await backend.upload(data, normalize_reference(file_name), content_type)

    async def download(self, reference: str) -> bytes:
        backend = self.active_backend()
        return await backend.download(normalize_reference(reference))

    async def delete(self, reference: str) -> None:
        backend = self.active_backend()
        await backend.delete(normalize_reference(reference))

    async def exists(self, reference: str) -> bool:
        backend = self.active_backend()
        return await backend.exists(normalize_reference(reference))

    async def delete_many(self, references: Iterable[str]) -> list[str]:
        """
        Delete several files, continuing past individual failures.

        Args:
            references: Stored references to delete

        Returns:
            Filenames whose deletion failed
        """
        failed = []
        for reference in references:
            file_name = normalize_reference(reference)
            try:
                await self.delete(file_name)
            except Exception as e:
                logger.error(f"Failed to delete file {file_name}: {str(e)}")
                failed.append(file_name)
        return failed

    def describe(self) -> dict:
        """Summarize the active backend for logs and health checks (no secrets)."""
        kind = self.active_kind
        if kind == BackendKind.GCS:
            return {
                "backend": kind.value,
                "bucket": self.config.gcs.bucket_name,
                "project": self.config.gcs.project_id,
                "public_access": self.config.gcs.public_access,
            }
        if kind == BackendKind.FTP:
            return {
                "backend": kind.value,
                "host": self.config.ftp.host,
                "base_path": self.config.ftp.base_path,
                "base_url": self.config.ftp.base_url,
            }
        if kind == BackendKind.LOCAL:
            return {"backend": kind.value, "uploads_dir": self.config.local.uploads_dir}
        return {"backend": None}
