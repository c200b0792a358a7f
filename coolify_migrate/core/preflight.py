"""Preflight checks run before any destructive or network-heavy action."""

import asyncio

import structlog

from ..utils import build_ssh_command
from .config_loader import HostConfig
from .exceptions import MissingKeyFile, MissingSourceDirectory, UnreachableDestination
from .settings import SSH_PROBE_GRACE
from .status import StatusReporter
from .subprocess_manager import SubprocessManager

logger = structlog.get_logger()


class PreflightChecker:
    """Validates local inputs and destination reachability, in that order."""

    def __init__(
        self,
        config: HostConfig,
        runner: SubprocessManager | None = None,
        reporter: StatusReporter | None = None,
    ):
        self.config = config
        self.runner = runner or SubprocessManager()
        self.reporter = reporter or StatusReporter()
        self.logger = logger.bind(component="preflight")

    async def run(self) -> None:
        """Run all checks, stopping at the first failure.

        Raises:
            MissingSourceDirectory: source directory is absent
            MissingKeyFile: SSH key file is absent
            UnreachableDestination: SSH probe failed
        """
        self.check_source_directory()
        self.check_key_file()
        await self.check_destination()

    def check_source_directory(self) -> None:
        source_dir = self.config.backup_source_dir
        if not source_dir.is_dir():
            raise MissingSourceDirectory(f"Source directory {source_dir} does not exist")
        self.reporter.success("Source directory exists", path=str(source_dir))

    def check_key_file(self) -> None:
        key_path = self.config.ssh_key_path
        if not key_path.is_file():
            raise MissingKeyFile(f"SSH key file {key_path} does not exist")
        self.reporter.success("SSH key file exists", path=str(key_path))

    async def check_destination(self) -> None:
        host = self.config.destination_host
        probe_cmd = build_ssh_command(self.config, connect_timeout=self.config.connect_timeout)
        probe_cmd.append("exit")

        try:
            result = await self.runner.run_command(
                probe_cmd, timeout=self.config.connect_timeout + SSH_PROBE_GRACE
            )
        except asyncio.TimeoutError as e:
            raise UnreachableDestination(f"SSH connection to {host} timed out") from e
        except OSError as e:
            raise UnreachableDestination(f"SSH connection to {host} failed: {e}") from e

        if not result.success:
            self.logger.error("SSH probe failed", host=host, error=result.error_output)
            raise UnreachableDestination(
                f"SSH connection to {host} failed: {result.error_output}"
            )
        self.reporter.success("SSH connection successful", host=host)
