"""Subprocess helpers with consistent error context."""

import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def copied_env_for_git_subprocess() -> dict[str, str]:
    """Copy the current environment with interactive git prompts disabled.

    Without GIT_TERMINAL_PROMPT=0 a clone of a private repository blocks
    forever waiting for a username on the terminal.
    """
    env = os.environ.copy()
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


def run_subprocess_with_context(
    *,
    cmd: list[str],
    operation_context: str,
    cwd: Path | None = None,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command, raising RuntimeError with context on failure.

    Args:
        cmd: Command and arguments
        operation_context: Human description used in the error message,
            e.g. "fetch main from https://example.com/repo.git"
        cwd: Working directory
        timeout: Seconds before the process is killed
        env: Environment for the child process

    Returns:
        Completed process with captured text output

    Raises:
        RuntimeError: If the command is missing, exits non-zero or times out
    """
    logger.debug("Running %s (%s)", cmd[0], operation_context)
    try:
        return subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
            env=env,
        )
    except FileNotFoundError as e:
        raise RuntimeError(f"Failed to {operation_context}: '{cmd[0]}' is not installed") from e
    except subprocess.TimeoutExpired as e:
        raise RuntimeError(f"Failed to {operation_context}: timed out after {timeout}s") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        msg = f"Failed to {operation_context} (exit code {e.returncode})"
        if stderr:
            msg = f"{msg}\n{stderr}"
        raise RuntimeError(msg) from e
