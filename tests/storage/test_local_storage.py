"""
Unit tests for LocalStorageBackend.
"""
import pytest

from app.config import LocalConfig
from app.storage.exceptions import FileNotFoundError, InvalidReferenceError
from app.storage.local import LocalStorageBackend


@pytest.mark.asyncio
async def test_upload_download_delete_roundtrip(tmp_path):
    """Upload 12 bytes, read them back, delete, then confirm they're gone."""
    storage = LocalStorageBackend(LocalConfig(uploads_dir=str(tmp_path)))

    stored = await storage.upload(b"hello world!", "t.txt", "text/plain")
    assert stored == "t.txt"
    assert (tmp_path / "t.txt").read_bytes() == b"hello world!"

    assert await storage.download("t.txt") == b"hello world!"
    assert await storage.exists("t.txt") is True

    await storage.delete("t.txt")
    assert await storage.exists("t.txt") is False
    with pytest.raises(FileNotFoundError):
        await storage.download("t.txt")


def test_uploads_directory_created_on_init(tmp_path):
    uploads_dir = tmp_path / "nested" / "uploads"
    LocalStorageBackend(LocalConfig(uploads_dir=str(uploads_dir)))

    assert uploads_dir.is_dir()


@pytest.mark.asyncio
async def test_upload_overwrites_existing_file(local_backend):
    await local_backend.upload(b"first", "a.webp")
    await local_backend.upload(b"second", "a.webp")

    assert await local_backend.download("a.webp") == b"second"


@pytest.mark.asyncio
async def test_delete_missing_file_is_noop(local_backend):
    await local_backend.delete("never-existed.webp")
    await local_backend.delete("never-existed.webp")


@pytest.mark.asyncio
async def test_download_missing_file(local_backend):
    with pytest.raises(FileNotFoundError) as exc_info:
        await local_backend.download("missing.png")

    assert exc_info.value.file_name == "missing.png"


@pytest.mark.asyncio
async def test_directory_is_not_a_file(local_backend):
    (local_backend.base_path / "subdir").mkdir()

    assert await local_backend.exists("subdir") is False
    with pytest.raises(FileNotFoundError):
        await local_backend.download("subdir")


@pytest.mark.asyncio
@pytest.mark.parametrize("file_name", ["../secret.txt", "../../etc/passwd", ".", ""])
async def test_paths_outside_uploads_dir_rejected(tmp_path, file_name):
    uploads_dir = tmp_path / "uploads"
    (tmp_path / "secret.txt").write_bytes(b"top secret")
    storage = LocalStorageBackend(LocalConfig(uploads_dir=str(uploads_dir)))

    with pytest.raises(InvalidReferenceError):
        await storage.download(file_name)
    with pytest.raises(InvalidReferenceError):
        await storage.upload(b"x", file_name)
    with pytest.raises(InvalidReferenceError):
        await storage.delete(file_name)

    assert (tmp_path / "secret.txt").read_bytes() == b"top secret"
