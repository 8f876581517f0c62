"""
FTP storage implementation.

ftplib connections cannot run overlapping transfers, and requests run
concurrently, so every operation opens its own connection and closes it
before returning. The blocking ftplib calls run in a worker thread.
"""
import asyncio
import ftplib
import io
import posixpath
import re
from typing import Callable, TypeVar

from app.config import BackendKind, FTPConfig
from app.logging_config import setup_logging
from app.storage.base import StorageBackend
from app.storage.exceptions import ConnectionFailedError, FileNotFoundError, StorageError

logger = setup_logging()

T = TypeVar("T")


def _is_missing(error: Exception) -> bool:
    """FTP reply 550: requested action not taken (file unavailable)."""
    return isinstance(error, ftplib.error_perm) and str(error).startswith("550")


def _default_connection_factory(config: FTPConfig) -> ftplib.FTP:
    if config.secure:
        return ftplib.FTP_TLS()
    return ftplib.FTP()


class FTPStorageBackend(StorageBackend):
    """
    FTP storage with one connection per operation.

    Paths are rooted at ``config.base_path``; filenames are joined onto it.
    """

    kind = BackendKind.FTP

    def __init__(
        self,
        config: FTPConfig,
        connection_factory: Callable[[FTPConfig], ftplib.FTP] | None = None,
    ):
        """
        Initialize FTP storage backend.

        Args:
            config: FTP connection settings
            connection_factory: Builds an unconnected ftplib client
                (default: FTP or FTP_TLS depending on ``config.secure``)
        """
        self.config = config
        self._connection_factory = connection_factory or _default_connection_factory

    async def upload(
        self,
        data: bytes,
        file_name: str,
        content_type: str | None = None,
    ) -> str:
        remote_path = self._full_path(file_name)

        def _upload(ftp: ftplib.FTP) -> str:
            self._ensure_dirs(ftp, posixpath.dirname(remote_path))
            ftp.storbinary(f"STOR {remote_path}", io.BytesIO(data))
            return file_name

        try:
            return await self._run(_upload)
        except ftplib.all_errors as e:
            raise StorageError(f"FTP upload failed: {str(e)}") from e

    async def download(self, file_name: str) -> bytes:
        remote_path = self._full_path(file_name)

        def _download(ftp: ftplib.FTP) -> bytes:
            buffer = io.BytesIO()
            ftp.retrbinary(f"RETR {remote_path}", buffer.write)
            return buffer.getvalue()

        try:
            return await self._run(_download)
        except ftplib.all_errors as e:
            if _is_missing(e):
                raise FileNotFoundError(file_name) from e
            raise StorageError(f"FTP download failed: {str(e)}") from e

    async def delete(self, file_name: str) -> None:
        remote_path = self._full_path(file_name)

        def _delete(ftp: ftplib.FTP) -> None:
            try:
                ftp.delete(remote_path)
            except ftplib.error_perm as e:
                # Already gone
                if not _is_missing(e):
                    raise

        try:
            await self._run(_delete)
        except ftplib.all_errors as e:
            raise StorageError(f"FTP delete failed: {str(e)}") from e

    async def exists(self, file_name: str) -> bool:
        remote_path = self._full_path(file_name)

        def _exists(ftp: ftplib.FTP) -> bool:
            try:
                # SIZE is refused in ASCII mode by many servers
                ftp.voidcmd("TYPE I")
                ftp.size(remote_path)
            except ftplib.error_perm as e:
                if _is_missing(e):
                    return False
                raise
            return True

        try:
            return await self._run(_exists)
        except ftplib.all_errors as e:
            raise StorageError(f"FTP existence check failed: {str(e)}") from e

    async def _run(self, operation: Callable[[ftplib.FTP], T]) -> T:
        return await asyncio.to_thread(self._with_connection, operation)

    def _with_connection(self, operation: Callable[[ftplib.FTP], T]) -> T:
        ftp = self._connect()
        try:
            return operation(ftp)
        finally:
            self._close(ftp)

    def _connect(self) -> ftplib.FTP:
        """
        Open, authenticate and prepare a new connection.

        Raises:
            ConnectionFailedError: If connecting or logging in fails
        """
        ftp = self._connection_factory(self.config)
        try:
            ftp.connect(self.config.host, self.config.port, timeout=self.config.timeout_seconds)
            ftp.login(self.config.user, self.config.password)
            ftp.set_pasv(True)
            if self.config.secure and isinstance(ftp, ftplib.FTP_TLS):
                ftp.prot_p()
        except ftplib.all_errors as e:
            self._close(ftp)
            raise ConnectionFailedError("ftp", str(e)) from e

        if self._base_dir != "/":
            try:
                self._ensure_dirs(ftp, self._base_dir)
            except ftplib.all_errors as e:
                logger.warning(f"Could not ensure FTP directory {self._base_dir}: {str(e)}")

        return ftp

    @staticmethod
    def _close(ftp: ftplib.FTP) -> None:
        try:
            ftp.quit()
        except Exception:
            try:
                ftp.close()
            except Exception:
                pass

    @staticmethod
    def _ensure_dirs(ftp: ftplib.FTP, path: str) -> None:
        """Create each component of ``path``; existing directories are fine."""
        current = ""
        for part in [p for p in path.split("/") if p]:
            current = f"{current}/{part}"
            try:
                ftp.mkd(current)
            except ftplib.error_perm:
                # 550/521: directory already exists
                continue

    @property
    def _base_dir(self) -> str:
        base = re.sub(r"/+", "/", "/" + self.config.base_path.strip())
        return base.rstrip("/") or "/"

    def _full_path(self, file_name: str) -> str:
        return re.sub(r"/+", "/", f"{self._base_dir}/{file_name}")
