"""Discovery of named volumes mounted by running containers."""

import asyncio
from typing import Any

import docker
import structlog
from docker.errors import DockerException

from ..models.migration import VolumeMount
from .config_loader import HostConfig
from .exceptions import RuntimeUnavailable
from .settings import DOCKER_CLIENT_TIMEOUT

logger = structlog.get_logger()


class VolumeDiscoverer:
    """Resolves the host paths of volumes used by running containers.

    Paths are listed in container order, then mount order, and each path
    appears at most once even when several containers share a volume.
    """

    def __init__(self, config: HostConfig, client: docker.DockerClient | None = None):
        self.volume_root = config.volume_root
        self._client = client
        self.logger = logger.bind(component="volume_discoverer")

    def _get_client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = docker.from_env(timeout=DOCKER_CLIENT_TIMEOUT)
            except DockerException as e:
                raise RuntimeUnavailable(f"Docker is not reachable: {e}") from e
        return self._client

    async def discover(self) -> list[VolumeMount]:
        """List named volume mounts of all running containers.

        Raises:
            RuntimeUnavailable: If the Docker daemon cannot be queried
        """
        return await asyncio.to_thread(self._discover_sync)

    def _discover_sync(self) -> list[VolumeMount]:
        client = self._get_client()
        try:
            # Containers that exit between listing and inspection are dropped
            containers = client.containers.list(ignore_removed=True)
        except DockerException as e:
            raise RuntimeUnavailable(f"Failed to list running containers: {e}") from e

        mounts: list[VolumeMount] = []
        for container in containers:
            for volume_name in self._volume_names(container.attrs):
                mounts.append(
                    VolumeMount(
                        container=container.name,
                        name=volume_name,
                        host_path=str(self.volume_root / volume_name),
                    )
                )

        self.logger.info(
            "Discovered container volumes",
            containers=len(containers),
            volumes=len(mounts),
        )
        return mounts

    @staticmethod
    def _volume_names(attrs: dict[str, Any]) -> list[str]:
        """Names of the named mounts in a container's inspect data.

        Bind mounts carry no ``Name`` and are skipped.
        """
        names = []
        for mount in attrs.get("Mounts") or []:
            name = (mount.get("Name") or "").strip()
            if name:
                names.append(name)
        return names


def unique_paths(mounts: list[VolumeMount]) -> list[str]:
    """Host paths of ``mounts`` in first-seen order without duplicates."""
    return list(dict.fromkeys(mount.host_path for mount in mounts))
