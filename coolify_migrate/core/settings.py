"""Timeout settings configuration for migration operations.

Provides centralized timeout configuration using Pydantic BaseSettings
with environment variable support for operational tuning.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MigrationTimeoutSettings(BaseSettings):
    """Timeouts for bounded local operations.

    Archive creation and the remote provisioning session are deliberately
    unbounded and have no setting here.
    """

    docker_client_timeout: int = Field(
        30, alias="DOCKER_CLIENT_TIMEOUT", description="Docker SDK client timeout in seconds"
    )

    probe_grace: int = Field(
        10,
        alias="SSH_PROBE_GRACE",
        description="Seconds added to the SSH connect timeout before the probe is killed",
    )

    service_timeout: int = Field(
        120, alias="SERVICE_TIMEOUT", description="systemctl stop timeout in seconds"
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
timeout_settings = MigrationTimeoutSettings()

# Timeout constants for easy import
DOCKER_CLIENT_TIMEOUT: int = timeout_settings.docker_client_timeout
SSH_PROBE_GRACE: int = timeout_settings.probe_grace
SERVICE_TIMEOUT: int = timeout_settings.service_timeout
