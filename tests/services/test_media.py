import pytest

from app.services.media import (
    ByteRange,
    RangeNotSatisfiableError,
    content_type_for,
    fetch_media,
    is_video,
    parse_range_header,
    resolve_file_name,
)
from app.storage.exceptions import FileNotFoundError, InvalidReferenceError


@pytest.mark.parametrize(
    "header, size, expected",
    [
        ("bytes=10-19", 100, ByteRange(10, 19)),
        ("bytes=0-", 100, ByteRange(0, 99)),
        ("bytes=90-", 100, ByteRange(90, 99)),
        ("bytes=50-500", 100, ByteRange(50, 99)),
        ("bytes=-10", 100, ByteRange(90, 99)),
        ("bytes=-500", 100, ByteRange(0, 99)),
        ("bytes=0-0", 1, ByteRange(0, 0)),
    ],
)
def test_parse_range_header(header, size, expected):
    assert parse_range_header(header, size) == expected


@pytest.mark.parametrize(
    "header, size",
    [
        ("bytes=100-", 100),
        ("bytes=150-200", 100),
        ("bytes=20-10", 100),
        ("bytes=-0", 100),
        ("bytes=-", 100),
        ("items=0-10", 100),
        ("bytes=0-10,20-30", 100),
        ("bytes=0-", 0),
    ],
)
def test_unsatisfiable_ranges(header, size):
    with pytest.raises(RangeNotSatisfiableError) as exc_info:
        parse_range_header(header, size)

    assert exc_info.value.size == size


def test_byte_range_length():
    assert ByteRange(10, 19).length == 10


@pytest.mark.parametrize(
    "file_name, content_type",
    [
        ("a.webp", "image/webp"),
        ("a.JPG", "image/jpeg"),
        ("a.jpeg", "image/jpeg"),
        ("a.png", "image/png"),
        ("a.gif", "image/gif"),
        ("a.mp4", "video/mp4"),
        ("a.webm", "video/webm"),
        ("a.pdf", "application/octet-stream"),
        ("noext", "application/octet-stream"),
    ],
)
def test_content_type_for(file_name, content_type):
    assert content_type_for(file_name) == content_type


def test_is_video():
    assert is_video("clip.mp4") is True
    assert is_video("clip.WEBM") is True
    assert is_video("photo.webp") is False


def test_resolve_file_name():
    assert resolve_file_name("/api/images/a.webp") == "a.webp"

    with pytest.raises(InvalidReferenceError):
        resolve_file_name("..")
    with pytest.raises(InvalidReferenceError):
        resolve_file_name("a..b.webp")


@pytest.mark.asyncio
async def test_fetch_media(local_storage):
    await local_storage.upload(b"v" * 100, "clip.mp4", "video/mp4")

    media = await fetch_media(local_storage, "/uploads/clip.mp4")

    assert media.file_name == "clip.mp4"
    assert media.size == 100
    assert media.content_type == "video/mp4"
    assert media.is_video is True


@pytest.mark.asyncio
async def test_fetch_missing_media(local_storage):
    with pytest.raises(FileNotFoundError):
        await fetch_media(local_storage, "missing.webp")


def test_resolve_rejects_traversal_before_normalization():
    with pytest.raises(InvalidReferenceError):
        resolve_file_name("../passwd")
    with pytest.raises(InvalidReferenceError):
        resolve_file_name("/api/images/../../etc/passwd")
