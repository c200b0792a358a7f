"""Archive creation for the migration bundle.

The bundle is a single gzip tar with absolute member names (``tar -P``), so
extracting it with ``-C /`` on the destination puts every file back at its
original path.
"""

from pathlib import Path

import structlog

from ..models.enums import ConfirmationKey
from ..models.migration import ArchiveResult
from ..utils import format_size
from .config_loader import HostConfig
from .confirmation import ConfirmationProvider
from .exceptions import ArchiveCreationFailed, ServiceStopFailed
from .service import ServiceController
from .status import StatusReporter
from .subprocess_manager import SubprocessManager

logger = structlog.get_logger()


class ArchiveBuilder:
    """Builds the migration archive unless one already exists."""

    def __init__(
        self,
        config: HostConfig,
        confirmer: ConfirmationProvider,
        runner: SubprocessManager | None = None,
        service: ServiceController | None = None,
        reporter: StatusReporter | None = None,
        fresh: bool = False,
    ):
        self.config = config
        self.confirmer = confirmer
        self.fresh = fresh
        self.runner = runner or SubprocessManager()
        self.service = service or ServiceController(config.service_name, self.runner)
        self.reporter = reporter or StatusReporter()
        self.logger = logger.bind(component="archive_builder")

    def build_tar_command(self, archive_path: Path, volume_paths: list[str]) -> list[str]:
        """Build the tar invocation for the archive."""
        exclude_flags = [f"--exclude={pattern}" for pattern in self.config.exclude_patterns]
        return [
            "tar",
            *exclude_flags,
            "-Pczf",
            str(archive_path),
            "-C",
            "/",
            str(self.config.backup_source_dir),
            str(self.config.authorized_keys_path),
            *volume_paths,
        ]

    async def ensure_archive(self, volume_paths: list[str]) -> ArchiveResult:
        """Create the archive, or reuse an existing file of the same name.

        An existing archive is reused as-is unless ``fresh`` is set; its
        contents are not compared with the current volume set.

        Raises:
            ServiceStopFailed: Operator asked to stop the service and it failed
            ArchiveCreationFailed: tar exited non-zero
        """
        archive_path = self.config.archive_path

        if self.fresh and archive_path.exists():
            self.reporter.warning("Removing existing backup file", archive=str(archive_path))
            try:
                archive_path.unlink()
            except OSError as e:
                raise ArchiveCreationFailed(f"Could not remove existing backup file: {e}") from e

        if archive_path.exists():
            self.reporter.warning(
                "Backup file already exists, skipping creation", archive=str(archive_path)
            )
            return ArchiveResult(
                path=archive_path, created=False, size_bytes=archive_path.stat().st_size
            )

        self.reporter.warning("Backup file does not exist, creating", archive=str(archive_path))
        service_stopped = await self._maybe_stop_service()

        tar_cmd = self.build_tar_command(archive_path, volume_paths)
        self.logger.info(
            "Creating migration archive",
            archive=str(archive_path),
            source_dir=str(self.config.backup_source_dir),
            volumes=len(volume_paths),
            exclusions=list(self.config.exclude_patterns),
        )

        try:
            result = await self.runner.run_command(tar_cmd)
        except OSError as e:
            raise ArchiveCreationFailed(f"Backup file creation failed: {e}") from e

        if not result.success:
            # A partial file would short-circuit the next run's existence check
            try:
                archive_path.unlink(missing_ok=True)
            except OSError as e:
                self.logger.error(
                    "Failed to remove partial archive", archive=str(archive_path), error=str(e)
                )
            raise ArchiveCreationFailed(f"Backup file creation failed: {result.error_output}")

        size_bytes = archive_path.stat().st_size if archive_path.exists() else 0
        self.reporter.success(
            f"Backup file created ({format_size(size_bytes)})", archive=str(archive_path)
        )
        return ArchiveResult(
            path=archive_path,
            created=True,
            service_stopped=service_stopped,
            size_bytes=size_bytes,
        )

    async def _maybe_stop_service(self) -> bool:
        service_name = self.config.service_name
        self.reporter.warning(
            f"It's recommended to stop {service_name} before creating the backup"
        )
        stop = await self.confirmer.confirm(
            ConfirmationKey.STOP_SERVICE, f"Do you want to stop {service_name}?"
        )
        if not stop:
            self.reporter.warning(f"{service_name} not stopped, continuing with the backup")
            return False

        success, error = await self.service.stop()
        if not success:
            raise ServiceStopFailed(f"{service_name} stop failed: {error}")
        self.reporter.success(f"{service_name} stopped")
        return True
