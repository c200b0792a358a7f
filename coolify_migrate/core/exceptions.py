"""Core exceptions for host migration operations."""


class MigrationError(Exception):
    """Base exception for migration operations."""


class ConfigurationError(MigrationError):
    """Configuration validation or loading failed."""


class PreconditionError(MigrationError):
    """A check failed before anything was modified."""


class MissingSourceDirectory(PreconditionError):
    """Application data directory does not exist."""


class MissingKeyFile(PreconditionError):
    """SSH private key file does not exist."""


class UnreachableDestination(PreconditionError):
    """SSH probe to the destination host failed."""


class RuntimeUnavailable(PreconditionError):
    """Container runtime could not be queried."""


class LocalOperationalError(MigrationError):
    """A local step failed; local side effects are not reverted."""


class ServiceStopFailed(LocalOperationalError):
    """Stopping the local orchestration service failed."""


class ArchiveCreationFailed(LocalOperationalError):
    """Archive tool exited non-zero."""


class CleanupFailed(LocalOperationalError):
    """Local archive could not be removed."""


class RemoteOperationalError(MigrationError):
    """A destination step failed; the destination may be partially modified."""


class RemoteServiceStopFailed(RemoteOperationalError):
    """Stopping the destination orchestration service failed."""


class RemoteExtractionFailed(RemoteOperationalError):
    """Extracting the streamed archive on the destination failed."""


class RemoteInstallFailed(RemoteOperationalError):
    """Platform install script failed on the destination."""


class RemoteProvisioningFailed(RemoteOperationalError):
    """Remote session exited non-zero."""

    def __init__(self, message: str, returncode: int | None = None, step: str | None = None):
        super().__init__(message)
        self.returncode = returncode
        self.step = step
