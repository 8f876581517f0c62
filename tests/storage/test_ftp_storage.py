"""
Unit tests for FTPStorageBackend against an in-memory FTP server.
"""
import pytest

from app.config import FTPConfig
from app.storage.exceptions import ConnectionFailedError, FileNotFoundError, StorageError
from app.storage.ftp import FTPStorageBackend
from tests.fakes import FakeFTPServer


@pytest.mark.asyncio
async def test_upload_download_roundtrip(ftp_backend, ftp_server):
    stored = await ftp_backend.upload(b"\x89PNG data", "1700000000000-abc1234.png", "image/png")

    assert stored == "1700000000000-abc1234.png"
    assert ftp_server.files["/media/1700000000000-abc1234.png"] == b"\x89PNG data"
    assert await ftp_backend.download("1700000000000-abc1234.png") == b"\x89PNG data"


@pytest.mark.asyncio
async def test_base_path_created(ftp_backend, ftp_server):
    await ftp_backend.upload(b"x", "a.webp")

    assert "/media" in ftp_server.dirs


@pytest.mark.asyncio
async def test_nested_base_path_is_normalized(ftp_server):
    config = FTPConfig(host="ftp.example.com", user="u", password="p", base_path="portfolio//media/")
    backend = FTPStorageBackend(config, connection_factory=ftp_server.factory)

    await backend.upload(b"x", "a.webp")

    assert {"/portfolio", "/portfolio/media"} <= ftp_server.dirs
    assert "/portfolio/media/a.webp" in ftp_server.files


@pytest.mark.asyncio
async def test_root_base_path(ftp_server):
    config = FTPConfig(host="ftp.example.com", user="u", password="p")
    backend = FTPStorageBackend(config, connection_factory=ftp_server.factory)

    await backend.upload(b"x", "a.webp")

    assert "/a.webp" in ftp_server.files


@pytest.mark.asyncio
async def test_every_operation_uses_its_own_connection(ftp_backend, ftp_server):
    await ftp_backend.upload(b"x", "a.webp")
    await ftp_backend.exists("a.webp")
    await ftp_backend.download("a.webp")
    await ftp_backend.delete("a.webp")

    assert len(ftp_server.connections) == 4
    assert ftp_server.open_connections == []


@pytest.mark.asyncio
async def test_download_missing_file(ftp_backend, ftp_server):
    with pytest.raises(FileNotFoundError):
        await ftp_backend.download("missing.webp")

    assert ftp_server.open_connections == []


@pytest.mark.asyncio
async def test_download_transfer_error(ftp_backend, ftp_server):
    ftp_server.files["/media/broken.mp4"] = b"data"
    ftp_server.broken_paths.add("/media/broken.mp4")

    with pytest.raises(StorageError) as exc_info:
        await ftp_backend.download("broken.mp4")

    assert not isinstance(exc_info.value, FileNotFoundError)
    assert "FTP download failed" in str(exc_info.value)


@pytest.mark.asyncio
async def test_delete_is_idempotent(ftp_backend, ftp_server):
    await ftp_backend.upload(b"x", "a.webp")

    await ftp_backend.delete("a.webp")
    await ftp_backend.delete("a.webp")

    assert "/media/a.webp" not in ftp_server.files


@pytest.mark.asyncio
async def test_exists(ftp_backend):
    assert await ftp_backend.exists("a.webp") is False

    await ftp_backend.upload(b"x", "a.webp")

    assert await ftp_backend.exists("a.webp") is True


@pytest.mark.asyncio
async def test_login_failure_closes_connection(ftp_config):
    server = FakeFTPServer(fail_login=True)
    backend = FTPStorageBackend(ftp_config, connection_factory=server.factory)

    with pytest.raises(ConnectionFailedError) as exc_info:
        await backend.upload(b"x", "a.webp")

    assert "FTP connection failed" in str(exc_info.value)
    assert "530" in exc_info.value.reason
    assert server.open_connections == []
    assert server.files == {}
