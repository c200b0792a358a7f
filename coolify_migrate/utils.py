"""Utility functions shared by migration components."""

from .constants import SSH_BATCH_MODE, SSH_DEFAULT_PORT, SSH_ERROR_LOG_LEVEL, SSH_NO_HOST_CHECK
from .core.config_loader import HostConfig


def build_ssh_command(host: HostConfig, connect_timeout: int | None = None) -> list[str]:
    """Build SSH command for the destination host.

    Host key checking is relaxed so first-contact hosts are accepted.

    Args:
        host: Migration configuration
        connect_timeout: Optional ConnectTimeout in seconds

    Returns:
        List of SSH command components ready for subprocess execution

    Example:
        >>> build_ssh_command(config, connect_timeout=5)
        ['ssh', '-i', '/root/.ssh/id_ed25519', '-o', 'StrictHostKeyChecking=no',
         '-o', 'BatchMode=yes', '-o', 'LogLevel=ERROR', '-o', 'ConnectTimeout=5',
         'root@server.example.com']
    """
    ssh_cmd = [
        "ssh",
        "-i", str(host.ssh_key_path),
        "-o", SSH_NO_HOST_CHECK,
        "-o", SSH_BATCH_MODE,  # Key auth only, never prompt
        "-o", SSH_ERROR_LOG_LEVEL,
    ]

    if connect_timeout is not None:
        ssh_cmd.extend(["-o", f"ConnectTimeout={connect_timeout}"])

    if host.ssh_port != SSH_DEFAULT_PORT:
        ssh_cmd.extend(["-p", str(host.ssh_port)])

    hostname = host.destination_host
    if ":" in hostname and not (hostname.startswith("[") and hostname.endswith("]")):
        # IPv6 address needs brackets
        hostname = f"[{hostname}]"

    ssh_cmd.append(f"{host.destination_user}@{hostname}")

    return ssh_cmd


def format_size(size_bytes: int) -> str:
    """Format bytes into human-readable string.

    Examples:
        >>> format_size(0)
        '0 B'
        >>> format_size(1024)
        '1.0 KB'
        >>> format_size(1536870912)
        '1.4 GB'
    """
    if size_bytes == 0:
        return "0 B"

    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_bytes < 1024.0:
            if unit == "B":
                return f"{int(size_bytes)} {unit}"
            else:
                return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"
