"""
Companion Process Control.

Terminates the background companion process by name. The command depends
on the platform; a non-zero exit status is a failure, never ignored.
"""

import subprocess
import sys

from adnotes.backend.core.exceptions import CompanionProcessError, UnsupportedEnvironmentError
from adnotes.backend.core.logging import get_logger

logger = get_logger(__name__)


def build_terminate_command(process_name: str, platform: str) -> list[str]:
    """
    Build the platform command that kills process_name.

    Raises:
        UnsupportedEnvironmentError: If the platform is not recognized
    """
    if platform == "win32":
        return ["taskkill", "/IM", f"{process_name}.exe", "/F"]
    if platform.startswith("linux") or platform == "darwin":
        return ["pkill", "-f", process_name]
    raise UnsupportedEnvironmentError(f"Unsupported operating system: {platform}")


def terminate_process(process_name: str, platform: str | None = None) -> None:
    """
    Terminate the companion process.

    Args:
        process_name: Process name (without .exe on Windows)
        platform: Override for sys.platform

    Raises:
        UnsupportedEnvironmentError: If the platform is not recognized
        CompanionProcessError: If the command is missing or exits non-zero
    """
    command = build_terminate_command(process_name, platform or sys.platform)
    logger.info("Terminating companion process", extra={"command": command})

    try:
        result = subprocess.run(command, capture_output=True, text=True)
    except OSError as e:
        raise CompanionProcessError(f"Could not run {command[0]}: {e}") from e

    if result.returncode != 0:
        logger.error(
            "Companion process termination failed",
            extra={"returncode": result.returncode, "stderr": result.stderr.strip()},
        )
        raise CompanionProcessError(
            f"Failed to terminate {process_name} (exit status {result.returncode})"
        )
