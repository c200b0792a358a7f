"""Removal of the local archive after a successful migration."""

from pathlib import Path

import structlog

from ..models.enums import ConfirmationKey
from .confirmation import ConfirmationProvider
from .exceptions import CleanupFailed
from .status import StatusReporter

logger = structlog.get_logger()


class ArchiveCleanup:
    """Deletes the local archive when the operator confirms."""

    def __init__(self, confirmer: ConfirmationProvider, reporter: StatusReporter | None = None):
        self.confirmer = confirmer
        self.reporter = reporter or StatusReporter()

    async def run(self, archive_path: Path) -> bool:
        """Ask, then remove the archive.

        Returns:
            True if the archive was removed

        Raises:
            CleanupFailed: If removal was confirmed but failed
        """
        remove = await self.confirmer.confirm(
            ConfirmationKey.REMOVE_ARCHIVE, "Do you want to remove the local backup file?"
        )
        if not remove:
            self.reporter.info("Local backup file not removed", archive=str(archive_path))
            return False

        try:
            archive_path.unlink(missing_ok=True)
        except OSError as e:
            raise CleanupFailed(f"Failed to remove local backup file {archive_path}: {e}") from e

        self.reporter.success("Local backup file removed", archive=str(archive_path))
        return True
