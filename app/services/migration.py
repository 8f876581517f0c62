"""
Media migration between storage backends.

Copies files from one backend to another under the same canonical filename.
Records keep their filenames, so access URLs resolve against the new backend
as soon as it becomes the active one.
"""
from dataclasses import dataclass, field
from typing import Iterable

from app.logging_config import setup_logging
from app.services.media import content_type_for
from app.storage.base import StorageBackend

logger = setup_logging()


@dataclass
class MigrationFailure:
    file_name: str
    error: str


@dataclass
class MigrationReport:
    total: int = 0
    success: int = 0
    failed: int = 0
    skipped: int = 0
    failures: list[MigrationFailure] = field(default_factory=list)


async def migrate_files(
    source: StorageBackend,
    target: StorageBackend,
    file_names: Iterable[str],
    overwrite: bool = False,
) -> MigrationReport:
    """
    Copy files from ``source`` to ``target``.

    A failure on one file is recorded and the remaining files still migrate.

    Args:
        source: Backend to read from
        target: Backend to write to
        file_names: Canonical filenames to copy
        overwrite: Copy files that already exist on the target

    Returns:
        MigrationReport with per-file failures
    """
    unique_names = list(dict.fromkeys(file_names))
    report = MigrationReport(total=len(unique_names))

    for index, file_name in enumerate(unique_names, start=1):
        logger.info(f"[{index}/{report.total}] Migrating {file_name}")
        try:
            if not overwrite and await target.exists(file_name):
                report.skipped += 1
                logger.info(f"Skipped {file_name}: already on {target.kind.value}")
                continue

            data = await source.download(file_name)
            await target.upload(data, file_name, content_type_for(file_name))
            report.success += 1
        except Exception as e:
            report.failed += 1
            report.failures.append(MigrationFailure(file_name=file_name, error=str(e)))
            logger.error(f"Failed to migrate {file_name}: {str(e)}")

    logger.info(
        f"Migration finished: total={report.total}, success={report.success}, "
        f"failed={report.failed}, skipped={report.skipped}"
    )
    return report
