"""Common utilities and types for terrafirm."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class TerrafirmError(Exception):
    """Base error. Terminal for the run; exit_code becomes the process status."""
    exit_code = 1


class InsufficientArgumentsError(TerrafirmError):
    """Not enough arguments to do anything useful (help + exit 2)."""
    exit_code = 2


@dataclass
class InvocationResult:
    """Outcome of one validate+execute cycle against a configuration."""
    config_name: str
    env_name: str
    success: bool
    message: str = ''
    duration: float = 0.0


def run_command(
    cmd: list[str],
    cwd: Optional[Path] = None,
    timeout: Optional[int] = None,
    capture: bool = False,
    env: Optional[dict] = None
) -> tuple[int, str, str]:
    """Run a command and return (returncode, stdout, stderr).

    Output goes straight to the terminal unless capture is set, in which
    case stdout/stderr are returned as strings (empty otherwise).
    """
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=capture,
            text=True,
            timeout=timeout,
            env=env,
            check=False  # We handle return codes explicitly
        )
        return result.returncode, result.stdout or '', result.stderr or ''
    except FileNotFoundError as e:
        logger.warning(f"Command not found: {cmd[0]} ({e})")
        return 127, '', str(e)
    except subprocess.TimeoutExpired:
        return -1, '', f'Command timed out after {timeout}s'
