"""Enum definitions for migration status and prompts."""

from enum import Enum


class StepStatus(Enum):
    """Operator-facing status of a check or step."""

    SUCCESS = "success"
    FATAL = "fatal"
    WARNING = "warning"
    INFO = "info"

    @property
    def glyph(self) -> str:
        return _GLYPHS[self]


_GLYPHS = {
    StepStatus.SUCCESS: "✅",
    StepStatus.FATAL: "❌",
    StepStatus.WARNING: "🚸",
    StepStatus.INFO: "ℹ️",
}


class ConfirmationKey(Enum):
    """Questions asked during a migration run."""

    STOP_SERVICE = "stop_service"
    REMOVE_ARCHIVE = "remove_archive"
