from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from far_beyond_tool.adapters.filesystem.local_filesystem import LocalFileSystemAdapter
from far_beyond_tool.adapters.manifest.cargo_manifest import CargoManifestAdapter
from tests._fixtures.git_repos import GitFleetBuilder


@pytest.fixture
def filesystem() -> LocalFileSystemAdapter:
    return LocalFileSystemAdapter()


@pytest.fixture
def manifest() -> CargoManifestAdapter:
    return CargoManifestAdapter()


@pytest.fixture
def isolated_git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real git invocations away from the user's configuration."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Fleet Tester")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "fleet@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Fleet Tester")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "fleet@example.com")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")


@pytest.fixture
def git_fleet(tmp_path: Path, isolated_git_env: None) -> GitFleetBuilder:
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    return GitFleetBuilder(tmp_path / "fleet")
