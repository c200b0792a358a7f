"""Migration orchestrator: the ordered procedure from preflight to cleanup."""

import structlog

from ..models.migration import MigrationReport
from .archive import ArchiveBuilder
from .cleanup import ArchiveCleanup
from .config_loader import HostConfig
from .confirmation import ConfirmationProvider
from .preflight import PreflightChecker
from .provisioner import RemoteProvisioner
from .sizing import SizeReporter
from .status import StatusReporter
from .volumes import VolumeDiscoverer, unique_paths

logger = structlog.get_logger()


class MigrationManager:
    """Runs one migration of the local host onto the destination.

    Steps run strictly in order and the first failure aborts the run by
    propagating its ``MigrationError``. Nothing is rolled back.
    """

    def __init__(
        self,
        config: HostConfig,
        confirmer: ConfirmationProvider,
        reporter: StatusReporter | None = None,
        preflight: PreflightChecker | None = None,
        discoverer: VolumeDiscoverer | None = None,
        sizer: SizeReporter | None = None,
        archiver: ArchiveBuilder | None = None,
        provisioner: RemoteProvisioner | None = None,
        cleanup: ArchiveCleanup | None = None,
        fresh_archive: bool = False,
    ):
        self.config = config
        self.reporter = reporter or StatusReporter()
        self.preflight = preflight or PreflightChecker(config, reporter=self.reporter)
        self.discoverer = discoverer or VolumeDiscoverer(config)
        self.sizer = sizer or SizeReporter(self.reporter)
        self.archiver = archiver or ArchiveBuilder(
            config, confirmer, reporter=self.reporter, fresh=fresh_archive
        )
        self.provisioner = provisioner or RemoteProvisioner(config, reporter=self.reporter)
        self.cleanup = cleanup or ArchiveCleanup(confirmer, self.reporter)
        self.logger = logger.bind(component="migration_manager", destination=config.destination)

    async def run(self) -> MigrationReport:
        report = MigrationReport(destination=self.config.destination)
        self.logger.info("Migration started")

        await self.preflight.run()

        report.volumes = await self.discoverer.discover()
        report.volume_paths = unique_paths(report.volumes)

        report.sizes = await self.sizer.report(report.volume_paths, self.config.backup_source_dir)

        report.archive = await self.archiver.ensure_archive(report.volume_paths)

        await self.provisioner.provision(report.archive.path)
        report.provisioned = True

        report.archive_removed = await self.cleanup.run(report.archive.path)

        self.logger.info(
            "Migration finished",
            volumes=len(report.volume_paths),
            archive_created=report.archive.created,
            archive_removed=report.archive_removed,
        )
        return report
