"""Tests for remote provisioning."""

from pathlib import Path

import pytest

from coolify_migrate.core.exceptions import (
    RemoteExtractionFailed,
    RemoteInstallFailed,
    RemoteProvisioningFailed,
    RemoteServiceStopFailed,
)
from coolify_migrate.core.provisioner import RemoteExecutor, RemoteProvisioner, SSHRemoteExecutor

from .conftest import make_result


class FakeExecutor(RemoteExecutor):
    """Records executions and returns a canned exit code."""

    def __init__(self, returncode: int = 0):
        self.returncode = returncode
        self.calls: list[tuple[str, Path]] = []

    async def execute(self, script: str, stdin_path: Path):
        self.calls.append((script, stdin_path))
        return make_result(self.returncode)


class TestRemoteProvisioner:
    """Test suite for RemoteProvisioner."""

    @pytest.mark.asyncio
    async def test_success(self, config, reporter, output):
        executor = FakeExecutor()
        provisioner = RemoteProvisioner(config, executor=executor, reporter=reporter)

        await provisioner.provision(config.archive_path)

        assert executor.calls == [(provisioner.script, config.archive_path)]
        assert "✅ Remote commands executed successfully" in output.getvalue()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("returncode", "step", "cause"),
        [
            (10, "stop_service", RemoteServiceStopFailed),
            (11, "extract_archive", RemoteExtractionFailed),
            (12, "install_platform", RemoteInstallFailed),
        ],
    )
    async def test_step_failure_is_identified(self, config, reporter, returncode, step, cause):
        provisioner = RemoteProvisioner(
            config, executor=FakeExecutor(returncode), reporter=reporter
        )

        with pytest.raises(RemoteProvisioningFailed) as exc_info:
            await provisioner.provision(config.archive_path)

        assert exc_info.value.step == step
        assert exc_info.value.returncode == returncode
        assert isinstance(exc_info.value.__cause__, cause)

    @pytest.mark.asyncio
    async def test_ssh_failure(self, config, reporter):
        provisioner = RemoteProvisioner(config, executor=FakeExecutor(255), reporter=reporter)

        with pytest.raises(RemoteProvisioningFailed, match="SSH session to server.example.com"):
            await provisioner.provision(config.archive_path)

    @pytest.mark.asyncio
    async def test_unknown_exit_code(self, config, reporter):
        provisioner = RemoteProvisioner(config, executor=FakeExecutor(3), reporter=reporter)

        with pytest.raises(RemoteProvisioningFailed, match="exit code 3") as exc_info:
            await provisioner.provision(config.archive_path)

        assert exc_info.value.step is None


class TestSSHRemoteExecutor:
    """Test the ssh-backed executor."""

    @pytest.mark.asyncio
    async def test_streams_archive_into_single_session(self, config, runner):
        executor = SSHRemoteExecutor(config, runner=runner)

        await executor.execute("echo hi", config.archive_path)

        cmd = runner.run_command.call_args.args[0]
        kwargs = runner.run_command.call_args.kwargs
        assert cmd[0] == "ssh"
        assert "StrictHostKeyChecking=no" in cmd
        assert not any(opt.startswith("ConnectTimeout") for opt in cmd)
        assert cmd[-2:] == ["root@server.example.com", "echo hi"]
        assert kwargs["stdin_path"] == config.archive_path
        assert kwargs["timeout"] is None
        assert kwargs["capture_output"] is False
