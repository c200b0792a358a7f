"""Remote provisioning of the destination host over a single SSH session."""

from abc import ABC, abstractmethod
from pathlib import Path

import structlog

from ..constants import EXIT_SSH_FAILURE
from ..utils import build_ssh_command
from .config_loader import HostConfig
from .exceptions import RemoteProvisioningFailed
from .remote_script import build_remote_steps, error_for_exit_code, render_script
from .status import StatusReporter
from .subprocess_manager import SubprocessManager, SubprocessResult

logger = structlog.get_logger()


class RemoteExecutor(ABC):
    """Runs a script on the destination with a local file as its input."""

    @abstractmethod
    async def execute(self, script: str, stdin_path: Path) -> SubprocessResult:
        """Execute ``script`` remotely, streaming ``stdin_path`` to it."""


class SSHRemoteExecutor(RemoteExecutor):
    """Executes the script through the ``ssh`` client.

    Remote output is passed straight through to the terminal and the
    session has no timeout.
    """

    def __init__(self, config: HostConfig, runner: SubprocessManager | None = None):
        self.config = config
        self.runner = runner or SubprocessManager()

    async def execute(self, script: str, stdin_path: Path) -> SubprocessResult:
        ssh_cmd = build_ssh_command(self.config) + [script]
        return await self.runner.run_command(
            ssh_cmd, timeout=None, capture_output=False, stdin_path=stdin_path
        )


class RemoteProvisioner:
    """Streams the archive to the destination and runs the provisioning steps.

    Partial failures are not rolled back: a destination whose service was
    stopped or whose files were overwritten stays that way.
    """

    def __init__(
        self,
        config: HostConfig,
        executor: RemoteExecutor | None = None,
        reporter: StatusReporter | None = None,
    ):
        self.config = config
        self.executor = executor or SSHRemoteExecutor(config)
        self.reporter = reporter or StatusReporter()
        self.steps = build_remote_steps(config)
        self.logger = logger.bind(component="remote_provisioner", host=config.destination_host)

    @property
    def script(self) -> str:
        return render_script(self.steps)

    async def provision(self, archive_path: Path) -> None:
        """Run the remote steps against the destination.

        Raises:
            RemoteProvisioningFailed: The session exited non-zero. When the exit
                code identifies a step, the step-specific error is chained as
                the cause.
        """
        self.logger.info(
            "Starting remote provisioning",
            archive=str(archive_path),
            steps=[step.name for step in self.steps],
        )

        try:
            result = await self.executor.execute(self.script, archive_path)
        except OSError as e:
            raise RemoteProvisioningFailed(f"Remote session could not be started: {e}") from e

        if result.success:
            self.reporter.success("Remote commands executed successfully")
            return

        returncode = result.returncode
        failed = error_for_exit_code(self.steps, returncode)
        if failed is not None:
            step_name, error_cls = failed
            message = f"Remote step '{step_name}' failed (exit code {returncode})"
            self.logger.error("Remote step failed", step=step_name, returncode=returncode)
            raise RemoteProvisioningFailed(
                message, returncode=returncode, step=step_name
            ) from error_cls(message)

        if returncode == EXIT_SSH_FAILURE:
            message = f"SSH session to {self.config.destination_host} failed"
        else:
            message = f"Remote commands execution failed (exit code {returncode})"
        self.logger.error("Remote session failed", returncode=returncode)
        raise RemoteProvisioningFailed(message, returncode=returncode)
