"""Centralized subprocess management with proper resource handling."""

import asyncio
import os
from pathlib import Path
from typing import Any, Optional

import structlog

logger = structlog.get_logger()

KILL_TIMEOUT = 5  # Time to wait after SIGTERM before SIGKILL


class SubprocessManager:
    """Runs external commands one at a time and guarantees they are reaped."""

    async def run_command(
        self,
        cmd: list[str],
        *,
        timeout: Optional[float] = None,
        capture_output: bool = True,
        stdin_path: Optional[Path] = None,
        env: Optional[dict[str, str]] = None,
    ) -> "SubprocessResult":
        """
        Run a command asynchronously with proper resource management.

        Args:
            cmd: Command and arguments as a list
            timeout: Timeout in seconds; None waits indefinitely
            capture_output: Capture stdout and stderr instead of passing
                them through to the terminal
            stdin_path: File streamed to the command's standard input
            env: Environment variables

        Returns:
            SubprocessResult with returncode, stdout, and stderr

        Raises:
            asyncio.TimeoutError: If command times out
        """
        logger.debug(
            "Executing command",
            command=" ".join(cmd),
            timeout=timeout,
            stdin=str(stdin_path) if stdin_path else None,
        )

        kwargs: dict[str, Any] = {"env": env or os.environ.copy()}

        if capture_output:
            kwargs["stdout"] = asyncio.subprocess.PIPE
            kwargs["stderr"] = asyncio.subprocess.PIPE

        stdin_file = None
        process = None
        try:
            if stdin_path is not None:
                stdin_file = open(stdin_path, "rb")  # noqa: SIM115 - closed in finally
                kwargs["stdin"] = stdin_file
            else:
                kwargs["stdin"] = asyncio.subprocess.DEVNULL

            process = await asyncio.create_subprocess_exec(*cmd, **kwargs)

            try:
                stdout_bytes, stderr_bytes = await asyncio.wait_for(
                    process.communicate(), timeout=timeout
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Command timed out, terminating process",
                    command=" ".join(cmd),
                    timeout=timeout,
                    pid=process.pid,
                )
                await _terminate(process)
                raise asyncio.TimeoutError(
                    f"Command timed out after {timeout} seconds: {' '.join(cmd)}"
                ) from None

            return SubprocessResult(
                returncode=process.returncode if process.returncode is not None else -1,
                stdout=stdout_bytes.decode(errors="replace") if stdout_bytes else "",
                stderr=stderr_bytes.decode(errors="replace") if stderr_bytes else "",
                cmd=cmd,
            )

        finally:
            if stdin_file is not None:
                stdin_file.close()
            if process is not None and process.returncode is None:
                await _terminate(process)


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Terminate a process, escalating to SIGKILL."""
    try:
        process.terminate()
        await asyncio.wait_for(process.wait(), timeout=KILL_TIMEOUT)
    except asyncio.TimeoutError:
        logger.warning("Process did not terminate gracefully, sending SIGKILL", pid=process.pid)
        process.kill()
        await process.wait()
    except ProcessLookupError:
        # Process already terminated
        pass


class SubprocessResult:
    """Result of a subprocess execution."""

    def __init__(self, returncode: int, stdout: str, stderr: str, cmd: list[str]):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.cmd = cmd

    @property
    def success(self) -> bool:
        """Check if the command succeeded."""
        return self.returncode == 0

    @property
    def error_output(self) -> str:
        """Best available diagnostic text for a failed command."""
        return self.stderr.strip() or self.stdout.strip() or f"exit code {self.returncode}"


# Global instance for convenience
_subprocess_manager = SubprocessManager()


async def run_command(*args, **kwargs) -> SubprocessResult:
    """Convenience function to run a command using the global subprocess manager."""
    return await _subprocess_manager.run_command(*args, **kwargs)
