"""Configuration management for host migration."""

import os
import re
from pathlib import Path
from typing import Any

import structlog
import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import (
    CONFIG_ENV_VAR,
    DEFAULT_ARCHIVE_NAME,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_DESTINATION_USER,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_INSTALL_SCRIPT_URL,
    DEFAULT_SERVICE_NAME,
    DEFAULT_SOURCE_DIR,
    DEFAULT_VOLUME_ROOT,
    SSH_DEFAULT_PORT,
    USER_CONFIG_PATH,
)
from .exceptions import ConfigurationError

logger = structlog.get_logger()

_HOSTNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.:\[\]-]+$")
_USERNAME_PATTERN = re.compile(r"^[a-z_][a-z0-9_-]{0,31}$")


def _default_authorized_keys() -> Path:
    return Path.home() / ".ssh" / "authorized_keys"


class HostConfig(BaseModel):
    """Immutable configuration for one migration run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ssh_key_path: Path
    destination_host: str
    destination_user: str = DEFAULT_DESTINATION_USER
    ssh_port: int = Field(default=SSH_DEFAULT_PORT, ge=1, le=65535)
    connect_timeout: int = Field(default=DEFAULT_CONNECT_TIMEOUT, ge=1)
    backup_source_dir: Path = Path(DEFAULT_SOURCE_DIR)
    backup_file_name: str = DEFAULT_ARCHIVE_NAME
    authorized_keys_path: Path = Field(default_factory=_default_authorized_keys)
    volume_root: Path = Path(DEFAULT_VOLUME_ROOT)
    service_name: str = DEFAULT_SERVICE_NAME
    install_script_url: str = DEFAULT_INSTALL_SCRIPT_URL
    exclude_patterns: tuple[str, ...] = tuple(DEFAULT_EXCLUDE_PATTERNS)

    @field_validator("ssh_key_path", "authorized_keys_path", "backup_source_dir", mode="before")
    @classmethod
    def _expand_user(cls, value: Any) -> Any:
        if isinstance(value, str | Path):
            return Path(value).expanduser()
        return value

    @field_validator("destination_host")
    @classmethod
    def _validate_host(cls, value: str) -> str:
        if not value or value.startswith("-") or not _HOSTNAME_PATTERN.match(value):
            raise ValueError(f"Invalid destination host: {value!r}")
        return value

    @field_validator("destination_user")
    @classmethod
    def _validate_user(cls, value: str) -> str:
        if not _USERNAME_PATTERN.match(value):
            raise ValueError(f"Invalid destination user: {value!r}")
        return value

    @field_validator("install_script_url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        if not value.startswith("https://"):
            raise ValueError("Install script URL must use https://")
        return value

    @field_validator("backup_file_name")
    @classmethod
    def _validate_archive_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Archive file name must not be empty")
        return value

    @property
    def archive_path(self) -> Path:
        """Archive location, relative names resolved against the working directory."""
        return Path(self.backup_file_name).expanduser().absolute()

    @property
    def destination(self) -> str:
        return f"{self.destination_user}@{self.destination_host}"


class EnvironmentOverrides(BaseSettings):
    """Configuration values supplied through ``COOLIFY_MIGRATE_*`` variables."""

    ssh_key_path: str | None = None
    destination_host: str | None = None
    destination_user: str | None = None
    ssh_port: int | None = None
    connect_timeout: int | None = None
    backup_source_dir: str | None = None
    backup_file_name: str | None = None
    authorized_keys_path: str | None = None
    volume_root: str | None = None
    service_name: str | None = None
    install_script_url: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="COOLIFY_MIGRATE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


def load_config(
    config_path: str | Path | None = None, overrides: dict[str, Any] | None = None
) -> HostConfig:
    """Load configuration from multiple sources.

    Precedence (lowest to highest): built-in defaults, user config file,
    project config file, environment variables, explicit overrides.

    Args:
        config_path: Optional path to YAML config file
        overrides: Values from the command line; ``None`` entries are ignored

    Returns:
        Validated, immutable configuration

    Raises:
        ConfigurationError: If a config file is unreadable or values are invalid
    """
    load_dotenv()

    data: dict[str, Any] = {}

    user_config_path = Path(USER_CONFIG_PATH).expanduser()
    if user_config_path.exists():
        _merge_config(data, _load_yaml_config(user_config_path))

    project_config = config_path or os.getenv(CONFIG_ENV_VAR)
    if project_config:
        project_config_path = Path(project_config).expanduser()
        if not project_config_path.exists():
            raise ConfigurationError(f"Config file {project_config_path} does not exist")
        _merge_config(data, _load_yaml_config(project_config_path))

    try:
        data.update(EnvironmentOverrides().model_dump(exclude_none=True))

        if overrides:
            data.update({key: value for key, value in overrides.items() if value is not None})

        config = HostConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    logger.debug(
        "Configuration loaded",
        destination=config.destination,
        source_dir=str(config.backup_source_dir),
        archive=str(config.archive_path),
    )
    return config


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load YAML configuration file."""
    try:
        content = config_path.read_text(encoding="utf-8")

        # Securely expand only allowed environment variables
        content = _expand_yaml_config(content)

        loaded = yaml.safe_load(content)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config from {config_path}: {e}") from e

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    # Accept both a flat mapping and one nested under "migration"
    if isinstance(loaded.get("migration"), dict):
        return loaded["migration"]
    return loaded


def _expand_yaml_config(content: str) -> str:
    """Securely expand environment variables with allowlist."""

    allowed_env_vars = {"HOME", "USER", "XDG_CONFIG_HOME", "XDG_DATA_HOME"}

    def replace_var(match):
        var_name = match.group(1)
        if var_name in allowed_env_vars:
            return os.getenv(var_name, match.group(0))
        logger.warning(
            "Environment variable not in allowlist, skipping expansion",
            variable=var_name,
        )
        return match.group(0)

    content = re.sub(r"\$\{([^}]+)\}", replace_var, content)
    content = re.sub(r"\$([A-Za-z_][A-Za-z0-9_]*)", replace_var, content)

    return content


def _merge_config(base: dict[str, Any], update: dict[str, Any]) -> None:
    """Merge configuration dictionaries with deep merging."""
    for key, value in update.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_config(base[key], value)
        else:
            base[key] = value
