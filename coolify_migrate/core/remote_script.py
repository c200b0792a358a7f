"""Destination-side provisioning script, modelled as ordered steps.

The script runs in a single SSH session whose standard input is the
migration archive. Steps run in order and a failed fatal step exits the
remote shell with its own exit code, which the provisioner maps back to
the failing step.
"""

import shlex

from ..constants import (
    EXIT_REMOTE_EXTRACTION,
    EXIT_REMOTE_INSTALL,
    EXIT_REMOTE_SERVICE_STOP,
    REMOTE_AUTHORIZED_KEYS,
    REMOTE_AUTHORIZED_KEYS_BACKUP,
    REMOTE_AUTHORIZED_KEYS_TEMP,
)
from ..models.enums import StepStatus
from ..models.migration import RemoteStep
from .config_loader import HostConfig
from .exceptions import (
    RemoteExtractionFailed,
    RemoteInstallFailed,
    RemoteOperationalError,
    RemoteServiceStopFailed,
)

STEP_ERRORS: dict[str, type[RemoteOperationalError]] = {
    "stop_service": RemoteServiceStopFailed,
    "extract_archive": RemoteExtractionFailed,
    "install_platform": RemoteInstallFailed,
}


def merge_authorized_keys_command() -> str:
    """Union of the pre-extraction backup and the extracted keys, sorted and deduplicated."""
    return (
        f"cat {REMOTE_AUTHORIZED_KEYS_BACKUP} {REMOTE_AUTHORIZED_KEYS} 2>/dev/null"
        f" | sort | uniq > {REMOTE_AUTHORIZED_KEYS_TEMP}"
        f" && mv {REMOTE_AUTHORIZED_KEYS_TEMP} {REMOTE_AUTHORIZED_KEYS}"
        f" && chmod 600 {REMOTE_AUTHORIZED_KEYS}"
    )


def build_remote_steps(config: HostConfig) -> list[RemoteStep]:
    """Ordered provisioning steps for the destination host."""
    service = shlex.quote(config.service_name)
    return [
        RemoteStep(
            name="stop_service",
            guard=f"systemctl is-active --quiet {service}",
            command=f"systemctl stop {service}",
            exit_code=EXIT_REMOTE_SERVICE_STOP,
            success_message=f"{config.service_name} stopped",
            failure_message=f"{config.service_name} stop failed",
            skip_message=f"{config.service_name} is not a service, skipping stop command",
        ),
        RemoteStep(
            name="backup_authorized_keys",
            command=f"cp {REMOTE_AUTHORIZED_KEYS} {REMOTE_AUTHORIZED_KEYS_BACKUP}",
            fatal=False,
            start_message="Saving existing authorized keys...",
            failure_message="Could not save existing authorized keys, continuing",
        ),
        RemoteStep(
            name="extract_archive",
            command="tar -Pxzf - -C /",
            exit_code=EXIT_REMOTE_EXTRACTION,
            start_message="Extracting backup file...",
            success_message="Backup file extracted",
            failure_message="Backup file extraction failed",
        ),
        RemoteStep(
            name="merge_authorized_keys",
            command=merge_authorized_keys_command(),
            fatal=False,
            start_message="Merging authorized keys...",
            success_message="Authorized keys merged",
            failure_message="Authorized keys merge failed, continuing",
        ),
        RemoteStep(
            name="install_platform",
            command=f"curl -fsSL {shlex.quote(config.install_script_url)} | bash",
            exit_code=EXIT_REMOTE_INSTALL,
            start_message="Installing platform...",
            success_message="Platform installed",
            failure_message="Platform installation failed",
        ),
    ]


def _echo(status: StepStatus, message: str | None) -> str | None:
    if not message:
        return None
    return f"echo {shlex.quote(f'{status.glyph} {message}')}"


def render_step(step: RemoteStep) -> str:
    """Render one step as POSIX shell."""
    lines = []
    if start := _echo(StepStatus.WARNING, step.start_message):
        lines.append(start)

    failure = _echo(StepStatus.FATAL if step.fatal else StepStatus.WARNING, step.failure_message)
    on_failure = [failure] if failure else []
    if step.fatal:
        on_failure.append(f"exit {step.exit_code if step.exit_code is not None else 1}")
    else:
        on_failure.append(":")

    body = [f"if ! {{ {step.command}; }}; then"]
    body.extend(f"  {line}" for line in on_failure)
    body.append("fi")
    if success := _echo(StepStatus.SUCCESS, step.success_message):
        if step.fatal:
            body.append(success)
        else:
            body[-1:] = ["else", f"  {success}", "fi"]

    if step.guard:
        lines.append(f"if {step.guard}; then")
        lines.extend(f"  {line}" for line in body)
        lines.append("else")
        lines.append(f"  {_echo(StepStatus.INFO, step.skip_message) or ':'}")
        lines.append("fi")
    else:
        lines.extend(body)

    return "\n".join(lines)


def render_script(steps: list[RemoteStep]) -> str:
    """Render the full remote script."""
    return "\n".join(render_step(step) for step in steps) + "\n"


def error_for_exit_code(
    steps: list[RemoteStep], returncode: int
) -> tuple[str, type[RemoteOperationalError]] | None:
    """Map a remote exit code back to the fatal step that produced it."""
    for step in steps:
        if step.fatal and step.exit_code == returncode:
            return step.name, STEP_ERRORS.get(step.name, RemoteOperationalError)
    return None
