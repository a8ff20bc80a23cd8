"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at a temporary directory."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """A regular file with known content."""
    path = tmp_path / "motd"
    path.write_bytes(b"Welcome to a managed host.\n")
    return path


@pytest.fixture
def sample_dir(tmp_path: Path) -> Path:
    """A directory with one child file."""
    path = tmp_path / "conf.d"
    path.mkdir()
    (path / "10-base.conf").write_text("enabled = true\n")
    return path


@pytest.fixture
def sample_link(tmp_path: Path, sample_file: Path) -> Path:
    """A symbolic link pointing at sample_file."""
    path = tmp_path / "motd.link"
    path.symlink_to(sample_file)
    return path


@pytest.fixture
def dangling_link(tmp_path: Path) -> Path:
    """A symbolic link whose target does not exist."""
    path = tmp_path / "broken.link"
    path.symlink_to(tmp_path / "does-not-exist")
    return path


@pytest.fixture
def sample_fifo(tmp_path: Path) -> Path:
    """A named pipe."""
    if not hasattr(os, "mkfifo"):
        pytest.skip("named pipes are not supported on this platform")
    path = tmp_path / "events.fifo"
    os.mkfifo(path)
    return path
