"""Tests for the shell git adapter, including runs against real repositories."""

from __future__ import annotations

from pathlib import Path

import pytest

from far_beyond_tool.adapters.filesystem.local_filesystem import LocalFileSystemAdapter
from far_beyond_tool.adapters.git_client.shell_git_client import ShellGitClientAdapter, parse_porcelain_states
from far_beyond_tool.application.use_cases.fast_forward_sync import FastForwardSyncEngine, SyncOutcome
from far_beyond_tool.application.use_cases.fleet_scanner import RepositoryFleetScanner
from far_beyond_tool.application.use_cases.fleet_status import StatusReporter
from far_beyond_tool.domain.entities import DirtyState
from far_beyond_tool.domain.errors import FilesystemError, VcsError
from tests._fixtures.git_repos import GitFleetBuilder, git


@pytest.mark.parametrize(
    ("output", "expected"),
    [
        ("", set()),
        (" M src/lib.rs\n", {DirtyState.MODIFIED}),
        ("?? notes.txt\n", {DirtyState.UNTRACKED}),
        ("A  new.rs\n", {DirtyState.STAGED}),
        ("MM both.rs\n", {DirtyState.STAGED, DirtyState.MODIFIED}),
        ("R  old.rs -> new.rs\n D gone.rs\n", {DirtyState.STAGED, DirtyState.MODIFIED}),
        ("!! target/\n", set()),
    ],
)
def test_parse_porcelain_states(output: str, expected: set[DirtyState]) -> None:
    assert parse_porcelain_states(output) == expected


def test_missing_git_executable_raises_vcs_error(tmp_path: Path) -> None:
    client = ShellGitClientAdapter(git_executable="git-does-not-exist-fbcli")

    with pytest.raises(VcsError):
        client.fetch(tmp_path)


def test_clone_under_a_file_raises_filesystem_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(FilesystemError, match="Failed to create clone parent"):
        ShellGitClientAdapter().clone("https://github.com/Far-Beyond-Dev/Horizon.git", blocker / "nested" / "Horizon")


def _engine(client: ShellGitClientAdapter, **kwargs) -> FastForwardSyncEngine:
    scanner = RepositoryFleetScanner(client, LocalFileSystemAdapter(), "Far-Beyond-Dev")
    return FastForwardSyncEngine(scanner, client, **kwargs)


def test_real_repository_reads(git_fleet: GitFleetBuilder) -> None:
    clone = git_fleet.create("Horizon")
    client = ShellGitClientAdapter()

    assert "Far-Beyond-Dev" in client.origin_url(clone)
    assert client.head_shorthand(clone) == "main"
    assert client.head_commit(clone) == client.resolve_ref(clone, "refs/remotes/origin/main")
    assert client.resolve_ref(clone, "refs/remotes/origin/missing") is None
    assert client.working_tree_states(clone) == set()

    (clone / "scratch.txt").write_text("x", encoding="utf-8")
    assert client.working_tree_states(clone) == {DirtyState.UNTRACKED}


def test_real_fast_forward(git_fleet: GitFleetBuilder) -> None:
    clone = git_fleet.create("Horizon")
    before = git_fleet.head(clone)
    upstream = git_fleet.push_upstream("Horizon", "CHANGELOG.md", "new release\n")

    summary = _engine(ShellGitClientAdapter()).execute(git_fleet.workspace)

    [entry] = summary.repositories
    assert entry.outcome is SyncOutcome.UPDATED
    assert (entry.previous_commit_id, entry.current_commit_id) == (before, upstream)
    assert git_fleet.head(clone) == upstream
    assert (clone / "CHANGELOG.md").read_text(encoding="utf-8") == "new release\n"
    assert git("status", "--porcelain", cwd=clone) == ""

    [again] = _engine(ShellGitClientAdapter()).execute(git_fleet.workspace).repositories
    assert again.outcome is SyncOutcome.UP_TO_DATE


def test_real_diverged_history_is_left_alone(git_fleet: GitFleetBuilder) -> None:
    clone = git_fleet.create("Horizon")
    local = git_fleet.commit(clone, "local.txt", "mine\n", "local work")
    git_fleet.push_upstream("Horizon", "remote.txt", "theirs\n")

    [entry] = _engine(ShellGitClientAdapter()).execute(git_fleet.workspace).repositories

    assert entry.outcome is SyncOutcome.FAILED
    assert "manual merge required" in entry.error
    assert git_fleet.head(clone) == local


def test_real_dirty_tree_blocks_fast_forward(git_fleet: GitFleetBuilder) -> None:
    clone = git_fleet.create("Horizon")
    before = git_fleet.head(clone)
    git_fleet.push_upstream("Horizon", "CHANGELOG.md", "new release\n")
    (clone / "README.md").write_text("local edit\n", encoding="utf-8")

    [entry] = _engine(ShellGitClientAdapter()).execute(git_fleet.workspace).repositories

    assert entry.outcome is SyncOutcome.FAILED
    assert git_fleet.head(clone) == before
    assert (clone / "README.md").read_text(encoding="utf-8") == "local edit\n"


def test_real_untracked_file_in_the_way_is_preserved(git_fleet: GitFleetBuilder) -> None:
    clone = git_fleet.create("Horizon")
    before = git_fleet.head(clone)
    git_fleet.push_upstream("Horizon", "notes.txt", "upstream\n")
    (clone / "notes.txt").write_text("my local unsaved notes\n", encoding="utf-8")

    [entry] = _engine(ShellGitClientAdapter()).execute(git_fleet.workspace).repositories

    assert entry.outcome is SyncOutcome.FAILED
    assert "untracked" in entry.error
    assert git_fleet.head(clone) == before
    assert (clone / "notes.txt").read_text(encoding="utf-8") == "my local unsaved notes\n"


def test_real_failed_checkout_leaves_branch_untouched(git_fleet: GitFleetBuilder) -> None:
    clone = git_fleet.create("Horizon")
    before = git_fleet.head(clone)
    git_fleet.push_upstream("Horizon", "CHANGELOG.md", "new release\n")
    lock = clone / ".git" / "index.lock"
    lock.write_text("", encoding="utf-8")

    [entry] = _engine(ShellGitClientAdapter()).execute(git_fleet.workspace).repositories

    lock.unlink()
    assert entry.outcome is SyncOutcome.FAILED
    assert git_fleet.head(clone) == before
    assert git("status", "--porcelain", cwd=clone) == ""


def test_real_status_counts_local_commits(git_fleet: GitFleetBuilder) -> None:
    clone = git_fleet.create("Horizon")
    git_fleet.commit(clone, "a.txt", "a\n", "first local")
    git_fleet.commit(clone, "b.txt", "b\n", "second local")
    client = ShellGitClientAdapter()
    scanner = RepositoryFleetScanner(client, LocalFileSystemAdapter(), "Far-Beyond-Dev")

    [report] = StatusReporter(scanner, client).execute(git_fleet.workspace).repositories

    assert report.branch == "main"
    assert report.up_to_date is False
    assert (report.ahead, report.behind) == (2, 0)
    assert report.is_clean
