"""
Local subprocess-based launcher.

Uses asyncio.subprocess so that waiting on a child can be cancelled by
the abort router instead of polling.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path

from scriptshell._types import CommandResult
from scriptshell.process._base import LAUNCH_FAILURE_STATUS, ProcessLauncher

logger = logging.getLogger(__name__)

# Seconds to wait for a killed child to exit and close its pipes
REAP_TIMEOUT = 2.0


class LocalLauncher(ProcessLauncher):
    """
    Runs commands through the host shell on this machine.

    Example:
        >>> launcher = LocalLauncher()
        >>> result = await launcher.run("ls -la", capture=True, cwd=Path("."))
        >>> print(result.stdout)
    """

    def __init__(self, *, env: dict[str, str] | None = None) -> None:
        """
        Initialize a local launcher.

        Args:
            env: Environment for child processes. Defaults to our own.
        """
        self._env = env

    async def run(self, command: str, *, capture: bool, cwd: Path) -> CommandResult:
        pipe = asyncio.subprocess.PIPE if capture else None
        try:
            proc = await asyncio.create_subprocess_shell(
                command,
                cwd=cwd,
                env=self._env,
                stdout=pipe,
                stderr=pipe,
            )
        except OSError as e:
            logger.debug("Could not launch %r: %s", command, e)
            return CommandResult(stdout="", stderr=str(e), exit_code=LAUNCH_FAILURE_STATUS)

        logger.debug("Started pid %s: %s", proc.pid, command)
        try:
            stdout_bytes, stderr_bytes = await proc.communicate()
        except asyncio.CancelledError:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            # Reap without letting a grandchild holding the pipes stall the abort
            reaper = asyncio.ensure_future(proc.wait())
            done, _ = await asyncio.wait({reaper}, timeout=REAP_TIMEOUT)
            if not done:
                logger.warning("pid %s not reaped %ss after kill", proc.pid, REAP_TIMEOUT)
            logger.debug("Stopped waiting on pid %s", proc.pid)
            raise

        return CommandResult(
            stdout=self._decode(stdout_bytes),
            stderr=self._decode(stderr_bytes),
            exit_code=proc.returncode if proc.returncode is not None else LAUNCH_FAILURE_STATUS,
        )

    @staticmethod
    def _decode(data: bytes | None) -> str:
        if not data:
            return ""
        return data.decode("utf-8", errors="replace")
