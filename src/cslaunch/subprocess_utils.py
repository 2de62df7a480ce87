"""Subprocess helpers with consistent error reporting."""

import logging
import subprocess

logger = logging.getLogger(__name__)


def run_subprocess_with_context(
    *,
    cmd: list[str],
    operation_context: str,
) -> subprocess.CompletedProcess[str]:
    """Run a command, raising a descriptive error if it fails.

    Args:
        cmd: Command and arguments
        operation_context: What the command is for, used in error messages

    Returns:
        The completed process with captured text output

    Raises:
        RuntimeError: If the command cannot be started or exits non-zero
    """
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except FileNotFoundError as e:
        raise RuntimeError(f"Failed to {operation_context}: {cmd[0]} not found") from e

    if result.returncode != 0:
        stderr = result.stderr.strip()
        message = f"Failed to {operation_context} (exit code {result.returncode})"
        if stderr:
            message += f": {stderr}"
        raise RuntimeError(message)
    return result
