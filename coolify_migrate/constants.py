"""Centralized constants for host migration."""

# SSH Configuration Options
SSH_NO_HOST_CHECK = "StrictHostKeyChecking=no"
SSH_BATCH_MODE = "BatchMode=yes"
SSH_ERROR_LOG_LEVEL = "LogLevel=ERROR"
SSH_DEFAULT_PORT = 22

# Defaults
DEFAULT_SOURCE_DIR = "/data/coolify/"
DEFAULT_ARCHIVE_NAME = "coolify_backup.tar.gz"
DEFAULT_DESTINATION_USER = "root"
DEFAULT_CONNECT_TIMEOUT = 5
DEFAULT_VOLUME_ROOT = "/var/lib/docker/volumes"
DEFAULT_SERVICE_NAME = "docker"
DEFAULT_INSTALL_SCRIPT_URL = "https://cdn.coollabs.io/coolify/install.sh"
DEFAULT_EXCLUDE_PATTERNS = ["*.sock"]

# Remote authorized keys (resolved by the remote shell)
REMOTE_AUTHORIZED_KEYS = "~/.ssh/authorized_keys"
REMOTE_AUTHORIZED_KEYS_BACKUP = "~/.ssh/authorized_keys_backup"
REMOTE_AUTHORIZED_KEYS_TEMP = "~/.ssh/authorized_keys_temp"

# Remote script exit codes for fatal steps
EXIT_REMOTE_SERVICE_STOP = 10
EXIT_REMOTE_EXTRACTION = 11
EXIT_REMOTE_INSTALL = 12
EXIT_SSH_FAILURE = 255

# Config discovery
CONFIG_ENV_VAR = "COOLIFY_MIGRATE_CONFIG"
USER_CONFIG_PATH = "~/.config/coolify-migrate/config.yml"
LOG_FILE_NAME = "migration.log"
