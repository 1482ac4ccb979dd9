from __future__ import annotations

from pathlib import Path

import pytest

from far_beyond_tool.adapters.filesystem.local_filesystem import LocalFileSystemAdapter
from far_beyond_tool.application.use_cases.fleet_scanner import RepositoryFleetScanner
from far_beyond_tool.domain.errors import FilesystemError
from tests._fixtures.fakes import FakeGitClient, FakeRepo


def test_scan_keeps_only_organization_repositories(tmp_path: Path) -> None:
    for name in ("zeta", "alpha", "foreign", "no-origin", "broken"):
        (tmp_path / name / ".git").mkdir(parents=True)
    (tmp_path / "plain-dir").mkdir()
    (tmp_path / "notes.txt").write_text("not a repository", encoding="utf-8")

    client = FakeGitClient(
        {
            tmp_path / "zeta": FakeRepo(origin="git@github.com:far-beyond-dev/zeta.git"),
            tmp_path / "alpha": FakeRepo(origin="https://github.com/Far-Beyond-Dev/alpha.git"),
            tmp_path / "foreign": FakeRepo(origin="https://github.com/other/foreign.git"),
            tmp_path / "no-origin": FakeRepo(origin=None),
        }
    )
    scanner = RepositoryFleetScanner(client, LocalFileSystemAdapter(), "Far-Beyond-Dev")

    records = scanner.scan(tmp_path)

    assert [record.name for record in records] == ["alpha", "zeta"]
    assert records[1].remote_url == "git@github.com:far-beyond-dev/zeta.git"
    assert records[0].current_branch_name == "main"


def test_scan_of_empty_root_returns_nothing(tmp_path: Path) -> None:
    scanner = RepositoryFleetScanner(FakeGitClient(), LocalFileSystemAdapter(), "Far-Beyond-Dev")

    assert scanner.scan(tmp_path) == []


def test_unreadable_root_raises_filesystem_error(tmp_path: Path) -> None:
    scanner = RepositoryFleetScanner(FakeGitClient(), LocalFileSystemAdapter(), "Far-Beyond-Dev")

    with pytest.raises(FilesystemError, match="Unable to read directory"):
        scanner.scan(tmp_path / "missing")
