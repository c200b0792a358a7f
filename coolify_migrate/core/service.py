"""Local orchestration service control."""

import asyncio

import structlog

from .settings import SERVICE_TIMEOUT
from .subprocess_manager import SubprocessManager

logger = structlog.get_logger()


class ServiceController:
    """Drives the local init system for one service."""

    def __init__(self, service_name: str, runner: SubprocessManager | None = None):
        self.service_name = service_name
        self.runner = runner or SubprocessManager()
        self.logger = logger.bind(component="service_controller", service=service_name)

    async def stop(self) -> tuple[bool, str]:
        """Stop the service.

        Returns:
            Tuple of (success: bool, error_message: str)
        """
        self.logger.info("Stopping service")
        try:
            result = await self.runner.run_command(
                ["systemctl", "stop", self.service_name], timeout=SERVICE_TIMEOUT
            )
        except asyncio.TimeoutError:
            return False, f"systemctl stop timed out after {SERVICE_TIMEOUT} seconds"
        except OSError as e:
            return False, str(e)

        if not result.success:
            self.logger.error("Service stop failed", error=result.error_output)
            return False, result.error_output
        return True, ""
