"""Tests for subprocess_utils module."""

import os
import sys
from pathlib import Path

import pytest

from arca.subprocess_utils import copied_env_for_git_subprocess, run_subprocess_with_context


def test_copied_env_for_git_subprocess_sets_git_terminal_prompt() -> None:
    """copied_env_for_git_subprocess sets GIT_TERMINAL_PROMPT=0."""
    env = copied_env_for_git_subprocess()

    assert env["GIT_TERMINAL_PROMPT"] == "0"


def test_copied_env_for_git_subprocess_does_not_mutate_environ(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("GIT_TERMINAL_PROMPT", raising=False)

    copied_env_for_git_subprocess()

    assert "GIT_TERMINAL_PROMPT" not in os.environ


def test_run_subprocess_returns_output(tmp_path: Path) -> None:
    result = run_subprocess_with_context(
        cmd=[sys.executable, "-c", "print('hi')"],
        operation_context="say hi",
        cwd=tmp_path,
    )

    assert result.stdout.strip() == "hi"


def test_run_subprocess_failure_includes_context_and_stderr() -> None:
    with pytest.raises(RuntimeError) as exc_info:
        run_subprocess_with_context(
            cmd=[sys.executable, "-c", "import sys; sys.stderr.write('bad ref'); sys.exit(3)"],
            operation_context="fetch main",
        )

    message = str(exc_info.value)
    assert message.startswith("Failed to fetch main (exit code 3)")
    assert "bad ref" in message


def test_run_subprocess_missing_binary() -> None:
    with pytest.raises(RuntimeError, match="is not installed"):
        run_subprocess_with_context(
            cmd=["arca-definitely-not-a-real-binary"],
            operation_context="run nothing",
        )


def test_run_subprocess_timeout() -> None:
    with pytest.raises(RuntimeError, match="timed out"):
        run_subprocess_with_context(
            cmd=[sys.executable, "-c", "import time; time.sleep(5)"],
            operation_context="wait",
            timeout=0.2,
        )
