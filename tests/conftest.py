"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from envsetup.core.models.environment import EnvironmentPathSet


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """An empty directory that is the only entry on the probe's PATH."""
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def path_set(bin_dir: Path) -> EnvironmentPathSet:
    return EnvironmentPathSet([str(bin_dir)], case_insensitive=False)
