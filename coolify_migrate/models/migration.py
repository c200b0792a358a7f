"""Migration-related data models."""

from pathlib import Path

from pydantic import BaseModel, Field


class VolumeMount(BaseModel):
    """Named volume mounted by a running container."""

    container: str = Field(description="Container the volume was discovered on")
    name: str = Field(description="Runtime volume name")
    host_path: str = Field(description="Absolute path of the volume under the volume root")


class SizeReport(BaseModel):
    """Disk usage totals shown to the operator before archiving."""

    volumes_bytes: int = Field(ge=0)
    source_bytes: int = Field(ge=0)
    volumes_human: str
    source_human: str
    skipped_paths: list[str] = Field(default_factory=list)


class ArchiveResult(BaseModel):
    """Outcome of the archive step."""

    path: Path
    created: bool = Field(description="False when an existing archive was reused")
    service_stopped: bool = False
    size_bytes: int = 0


class RemoteStep(BaseModel):
    """One step of the destination-side provisioning script.

    A step with a ``guard`` only runs its command when the guard succeeds;
    otherwise ``skip_message`` is printed. Fatal steps exit the remote shell
    with ``exit_code`` when their command fails.
    """

    name: str
    command: str
    fatal: bool = True
    exit_code: int | None = None
    guard: str | None = None
    start_message: str | None = None
    success_message: str | None = None
    failure_message: str | None = None
    skip_message: str | None = None


class MigrationReport(BaseModel):
    """Summary of a completed migration run."""

    destination: str
    volumes: list[VolumeMount] = Field(default_factory=list)
    volume_paths: list[str] = Field(default_factory=list)
    sizes: SizeReport | None = None
    archive: ArchiveResult | None = None
    provisioned: bool = False
    archive_removed: bool = False
