"""Disk usage totals for the data about to be archived."""

import asyncio
import os
from pathlib import Path

import structlog

from ..models.migration import SizeReport
from ..utils import format_size
from .status import StatusReporter

logger = structlog.get_logger()


def disk_usage(paths: list[str | Path], skipped: list[str] | None = None) -> int:
    """Total allocated bytes under ``paths``, like ``du -c``.

    Symlinks are not followed and hard-linked files are counted once.
    Paths that are missing or unreadable are appended to ``skipped``.
    """
    seen: set[tuple[int, int]] = set()
    total = 0

    def add(stat_result: os.stat_result) -> None:
        nonlocal total
        key = (stat_result.st_dev, stat_result.st_ino)
        if key in seen:
            return
        seen.add(key)
        blocks = getattr(stat_result, "st_blocks", None)
        total += blocks * 512 if blocks is not None else stat_result.st_size

    for path in paths:
        try:
            root_stat = os.lstat(path)
        except OSError:
            if skipped is not None:
                skipped.append(str(path))
            continue
        add(root_stat)
        if not os.path.isdir(path) or os.path.islink(path):
            continue
        for dirpath, dirnames, filenames in os.walk(path, onerror=lambda _: None):
            for name in dirnames + filenames:
                try:
                    add(os.lstat(os.path.join(dirpath, name)))
                except OSError:
                    continue
    return total


class SizeReporter:
    """Reports what a migration is about to move. Informational only."""

    def __init__(self, reporter: StatusReporter | None = None):
        self.reporter = reporter or StatusReporter()

    async def report(self, volume_paths: list[str], source_dir: Path) -> SizeReport:
        skipped: list[str] = []
        volumes_bytes = await asyncio.to_thread(disk_usage, volume_paths, skipped)
        source_bytes = await asyncio.to_thread(disk_usage, [source_dir], skipped)

        if skipped:
            logger.info("Skipped inaccessible paths while sizing", paths=skipped)

        report = SizeReport(
            volumes_bytes=volumes_bytes,
            source_bytes=source_bytes,
            volumes_human=format_size(volumes_bytes),
            source_human=format_size(source_bytes),
            skipped_paths=skipped,
        )
        self.reporter.success(
            f"Total size of volumes to migrate: {report.volumes_human}",
            volumes=len(volume_paths),
        )
        self.reporter.success(f"Size of the source directory: {report.source_human}")
        return report
