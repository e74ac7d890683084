"""
Process launchers.
"""

from scriptshell.process._base import LAUNCH_FAILURE_STATUS, ProcessLauncher
from scriptshell.process.local import LocalLauncher

__all__ = [
    "LAUNCH_FAILURE_STATUS",
    "ProcessLauncher",
    "LocalLauncher",
]
