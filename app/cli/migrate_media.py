"""
Copy every media file referenced by CMS records from one backend to another.

Usage:
    python -m app.cli.migrate_media --source ftp --target gcs --records export.json

``export.json`` is a JSON export of the CMS data:
    {"projects": [{...}, ...], "content": {...}}

Records are not modified: they hold canonical filenames, which resolve
against whichever backend is active.
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

from app.config import BackendKind, StorageConfig, settings
from app.logging_config import setup_logging
from app.services.migration import MigrationReport, migrate_files
from app.services.references import collect_content_files, collect_project_files
from app.storage.exceptions import StorageNotConfiguredError
from app.storage.facade import StorageService

logger = setup_logging()


def collect_record_files(records: dict) -> list[str]:
    """Unique filenames referenced by exported projects and site content."""
    files: list[str] = []

    for project in records.get("projects") or []:
        project_files = collect_project_files(project)
        if project_files:
            logger.info(f"Project {project.get('title') or project.get('id')!r}: {len(project_files)} file(s)")
        files.extend(project_files)

    content = records.get("content")
    if isinstance(content, str):
        content = json.loads(content)
    if content:
        content_files = collect_content_files(content)
        logger.info(f"Site content: {len(content_files)} file(s)")
        files.extend(content_files)

    return list(dict.fromkeys(files))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="migrate_media",
        description="Copy media referenced by CMS records between storage backends.",
    )
    choices = [kind.value for kind in BackendKind]
    parser.add_argument("--source", required=True, choices=choices, help="Backend to read from")
    parser.add_argument("--target", required=True, choices=choices, help="Backend to write to")
    parser.add_argument("--records", required=True, type=Path, help="JSON export of projects and content")
    parser.add_argument("--overwrite", action="store_true", help="Copy files already present on the target")
    return parser


async def run(
    source_kind: BackendKind,
    target_kind: BackendKind,
    records: dict,
    storage: StorageService,
    overwrite: bool = False,
) -> MigrationReport:
    source = storage.backend(source_kind)
    target = storage.backend(target_kind)

    file_names = collect_record_files(records)
    logger.info(f"Found {len(file_names)} unique file(s) to migrate")

    return await migrate_files(source, target, file_names, overwrite=overwrite)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.source == args.target:
        logger.error("Source and target backends must differ")
        return 2

    records = json.loads(args.records.read_text(encoding="utf-8"))
    storage = StorageService(StorageConfig.from_settings(settings))

    try:
        report = asyncio.run(
            run(BackendKind(args.source), BackendKind(args.target), records, storage, args.overwrite)
        )
    except StorageNotConfiguredError as e:
        logger.error(str(e))
        return 1

    for failure in report.failures:
        logger.error(f"  - {failure.file_name}: {failure.error}")

    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
