"""
Media reference helpers for CMS records.

Projects and site content hold file references in several fields. These
helpers canonicalize them at write time, resolve them to access URLs at read
time, and collect them for cleanup or migration. Records are plain mappings;
the CMS owns their schema.
"""
from collections.abc import Mapping
from typing import Any

from app.storage.facade import StorageService
from app.storage.paths import is_external_media, normalize_reference

MEDIA_BLOCK_TYPES = {"image", "video"}
OWNED_URL_MARKERS = ("storage.googleapis.com", "/api/images/", "/uploads/")


def extract_file_name(reference: Any) -> str | None:
    """
    Return the canonical filename for a reference this system owns.

    Returns None for empty values, embed links (YouTube, Vimeo) and foreign
    http(s) URLs such as stock photo links.
    """
    if not reference or not isinstance(reference, str):
        return None
    if is_external_media(reference):
        return None
    if reference.startswith("http") and not any(marker in reference for marker in OWNED_URL_MARKERS):
        return None

    file_name = normalize_reference(reference).strip()
    return file_name or None


def _collect(references: list[Any]) -> list[str]:
    files: list[str] = []
    for reference in references:
        file_name = extract_file_name(reference)
        if file_name and file_name not in files:
            files.append(file_name)
    return files


def _block_references(blocks: Any) -> list[Any]:
    if not isinstance(blocks, list):
        return []
    return [
        block.get("content")
        for block in blocks
        if isinstance(block, Mapping) and block.get("type") in MEDIA_BLOCK_TYPES
    ]


def collect_project_files(project: Mapping) -> list[str]:
    """Filenames referenced by a project: thumbnail, gallery and media blocks."""
    references: list[Any] = [project.get("thumbnail")]
    images = project.get("images")
    if isinstance(images, list):
        references.extend(images)
    references.extend(_block_references(project.get("blocks")))
    return _collect(references)


def collect_content_files(content: Mapping) -> list[str]:
    """Filenames referenced by site content: hero, branding and atelier blocks."""
    references: list[Any] = []

    hero = content.get("hero")
    if isinstance(hero, Mapping):
        references.extend([hero.get("image"), hero.get("video")])

    branding = content.get("branding")
    if isinstance(branding, Mapping):
        references.extend([branding.get("logo"), branding.get("favicon")])

    atelier = content.get("atelier")
    if isinstance(atelier, Mapping):
        references.extend(_block_references(atelier.get("leftColumn")))
        references.extend(_block_references(atelier.get("rightColumn")))

    return _collect(references)


def canonicalize_project_media(project: Mapping) -> dict:
    """
    Replace thumbnail and gallery references with canonical filenames.

    Called before a project is persisted so records never store access URLs.
    """
    result = dict(project)

    thumbnail = project.get("thumbnail")
    result["thumbnail"] = normalize_reference(thumbnail) if thumbnail else None

    images = project.get("images") or []
    result["images"] = [normalize_reference(image) for image in images if image]

    return result


async def resolve_project_media(storage: StorageService, project: Mapping) -> dict:
    """Replace thumbnail and gallery filenames with access URLs for display."""
    result = dict(project)

    thumbnail = project.get("thumbnail")
    result["thumbnail"] = await storage.url_for(thumbnail) if thumbnail else None

    images = project.get("images") or []
    result["images"] = [await storage.url_for(image) for image in images if image]

    return result


async def delete_project_media(storage: StorageService, project: Mapping) -> list[str]:
    """
    Delete every file a project references.

    Failures are logged per file and returned; the caller still deletes the
    project record.
    """
    return await storage.delete_many(collect_project_files(project))
