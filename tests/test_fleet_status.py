"""Tests for the read-only fleet status report."""

from __future__ import annotations

from pathlib import Path

from far_beyond_tool.adapters.filesystem.local_filesystem import LocalFileSystemAdapter
from far_beyond_tool.application.use_cases.fleet_scanner import RepositoryFleetScanner
from far_beyond_tool.application.use_cases.fleet_status import StatusReporter
from far_beyond_tool.domain.entities import DirtyState
from tests._fixtures.fakes import FakeGitClient, FakeRepo, linear_repo


def _reporter(tmp_path: Path, repos: dict[str, FakeRepo], **kwargs) -> tuple[StatusReporter, FakeGitClient]:
    mapped = {}
    for name, repo in repos.items():
        (tmp_path / name / ".git").mkdir(parents=True)
        mapped[tmp_path / name] = repo
    client = FakeGitClient(mapped)
    scanner = RepositoryFleetScanner(client, LocalFileSystemAdapter(), "Far-Beyond-Dev")
    return StatusReporter(scanner, client, **kwargs), client


def test_clean_repository_in_sync(tmp_path: Path) -> None:
    reporter, client = _reporter(tmp_path, {"horizon": linear_repo("b", "b", commits=["a", "b"])})

    [report] = reporter.execute(tmp_path).repositories

    assert report.branch == "main"
    assert report.is_clean
    assert report.up_to_date is True
    assert report.ahead is None and report.behind is None
    assert report.error is None
    assert client.mutations() == []


def test_ahead_and_behind_counts(tmp_path: Path) -> None:
    repo = FakeRepo(
        refs={"refs/heads/main": "l2", "refs/remotes/origin/main": "r3"},
        parents={"base": None, "l1": "base", "l2": "l1", "r1": "base", "r2": "r1", "r3": "r2"},
    )
    reporter, _ = _reporter(tmp_path, {"horizon": repo})

    [report] = reporter.execute(tmp_path).repositories

    assert report.up_to_date is False
    assert (report.ahead, report.behind) == (2, 3)


def test_dirty_states_are_reported_in_print_order(tmp_path: Path) -> None:
    repo = linear_repo(
        "a",
        "a",
        commits=["a"],
        states={DirtyState.UNTRACKED, DirtyState.STAGED, DirtyState.MODIFIED},
    )
    reporter, _ = _reporter(tmp_path, {"horizon": repo})

    [report] = reporter.execute(tmp_path).repositories

    assert not report.is_clean
    assert report.ordered_changes == ["modified", "untracked", "staged"]


def test_missing_remote_branch_leaves_comparison_empty(tmp_path: Path) -> None:
    repo = FakeRepo(branch="feature", refs={"refs/heads/feature": "a"}, parents={"a": None})
    reporter, _ = _reporter(tmp_path, {"horizon": repo})

    [report] = reporter.execute(tmp_path).repositories

    assert report.branch == "feature"
    assert report.up_to_date is None
    assert report.error is None


def test_detached_head_has_no_branch(tmp_path: Path) -> None:
    repo = FakeRepo(branch=None, detached_head="a", parents={"a": None})
    reporter, _ = _reporter(tmp_path, {"horizon": repo})

    [report] = reporter.execute(tmp_path).repositories

    assert report.branch is None
    assert report.up_to_date is None


def test_errors_are_captured_per_repository(tmp_path: Path) -> None:
    reporter, client = _reporter(
        tmp_path,
        {
            "alpha": linear_repo("a", "a", commits=["a"]),
            "beta": linear_repo("a", "a", commits=["a"]),
        },
        max_workers=2,
    )
    original = client.head_shorthand

    def failing_shorthand(repo_path: Path) -> str | None:
        if repo_path.name == "alpha":
            raise RuntimeError("index locked")
        return original(repo_path)

    client.head_shorthand = failing_shorthand

    alpha, beta = reporter.execute(tmp_path).repositories

    assert alpha.error == "index locked"
    assert beta.error is None
    assert beta.up_to_date is True
