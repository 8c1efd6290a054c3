"""Shared fixtures for arca tests."""

from pathlib import Path

import pytest


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Alias for tmp_path with semantic meaning as a workspace directory.

    Tests that use 'tmp_project' communicate that they are testing
    workspace-level operations (config, lockfile, projections).
    """
    project = tmp_path / "project"
    project.mkdir()
    return project
