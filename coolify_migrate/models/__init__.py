"""Data models for host migration."""

from .enums import ConfirmationKey, StepStatus
from .migration import ArchiveResult, MigrationReport, RemoteStep, SizeReport, VolumeMount

__all__ = [
    "ArchiveResult",
    "ConfirmationKey",
    "MigrationReport",
    "RemoteStep",
    "SizeReport",
    "StepStatus",
    "VolumeMount",
]
