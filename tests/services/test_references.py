import pytest

from app.config import BackendKind
from app.services.references import (
    canonicalize_project_media,
    collect_content_files,
    collect_project_files,
    delete_project_media,
    extract_file_name,
    resolve_project_media,
)

PROJECT = {
    "id": 7,
    "title": "Harbour House",
    "thumbnail": "https://storage.googleapis.com/portfolio-media/thumb.webp?X-Goog-Signature=abc",
    "images": [
        "/api/images/g1.webp",
        "/uploads/g2.jpg",
        "g1.webp",
        "https://images.unsplash.com/photo-123",
    ],
    "blocks": [
        {"type": "text", "content": "Some words"},
        {"type": "image", "content": "/api/images/block.webp"},
        {"type": "video", "content": "https://vimeo.com/76979871"},
        {"type": "video", "content": "clip.mp4"},
    ],
}

CONTENT = {
    "hero": {"image": "/uploads/hero.webp", "video": "https://youtu.be/abc"},
    "branding": {"logo": "logo.png", "favicon": None},
    "atelier": {
        "leftColumn": [{"type": "image", "content": "left.webp"}],
        "rightColumn": [
            {"type": "text", "content": "About us"},
            {"type": "video", "content": "/api/images/right.mp4"},
        ],
    },
}


@pytest.mark.parametrize(
    "reference, expected",
    [
        ("a.webp", "a.webp"),
        ("/api/images/a.webp", "a.webp"),
        ("https://cms.example.com/uploads/a.webp", "a.webp"),
        ("https://storage.googleapis.com/bucket/a.webp", "a.webp"),
        ("https://images.unsplash.com/photo-123", None),
        ("https://www.youtube.com/watch?v=1", None),
        ("", None),
        (None, None),
        (12, None),
    ],
)
def test_extract_file_name(reference, expected):
    assert extract_file_name(reference) == expected


def test_collect_project_files():
    assert collect_project_files(PROJECT) == ["thumb.webp", "g1.webp", "g2.jpg", "block.webp", "clip.mp4"]


def test_collect_project_files_tolerates_missing_fields():
    assert collect_project_files({"title": "Empty"}) == []
    assert collect_project_files({"images": "not-a-list", "blocks": None}) == []


def test_collect_content_files():
    assert collect_content_files(CONTENT) == ["hero.webp", "logo.png", "left.webp", "right.mp4"]


def test_canonicalize_project_media():
    result = canonicalize_project_media(PROJECT)

    assert result["thumbnail"] == "thumb.webp"
    assert result["images"][:3] == ["g1.webp", "g2.jpg", "g1.webp"]
    assert result["title"] == "Harbour House"
    assert PROJECT["thumbnail"].startswith("https://")


def test_canonicalize_project_without_media():
    result = canonicalize_project_media({"title": "Draft", "thumbnail": ""})

    assert result["thumbnail"] is None
    assert result["images"] == []


@pytest.mark.asyncio
async def test_resolve_project_media(ftp_storage):
    project = canonicalize_project_media(PROJECT)

    result = await resolve_project_media(ftp_storage, project)

    assert result["thumbnail"] == "/api/images/thumb.webp"
    assert result["images"][:2] == ["/api/images/g1.webp", "/api/images/g2.jpg"]


@pytest.mark.asyncio
async def test_delete_project_media(local_storage, local_backend):
    for name in collect_project_files(PROJECT):
        await local_storage.upload(b"x", name)

    failed = await delete_project_media(local_storage, PROJECT)

    assert failed == []
    assert list(local_backend.base_path.iterdir()) == []
    assert local_storage.active_kind == BackendKind.LOCAL
