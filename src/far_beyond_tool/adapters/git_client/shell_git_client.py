from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from far_beyond_tool.domain.entities import DirtyState
from far_beyond_tool.domain.errors import FilesystemError, VcsError
from far_beyond_tool.domain.ports import GitClientPort


_STAGED_CODES = frozenset("MADRCT")
_WORKTREE_MODIFIED_CODES = frozenset("MDT")


class ShellGitClientAdapter(GitClientPort):
    def __init__(self, *, git_executable: str = "git", timeout_seconds: float = 300.0) -> None:
        self._git_executable = git_executable
        self._timeout_seconds = timeout_seconds
        self._logger = logging.getLogger(__name__)

    def clone(self, clone_url: str, local_path: Path) -> None:
        try:
            local_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise FilesystemError(f"Failed to create clone parent {local_path.parent}: {error}") from error
        self._logger.info(
            "cloning repository",
            extra={
                "event": "git.clone.start",
                "clone_url": clone_url,
                "local_path": str(local_path),
            },
        )
        self._run_git(["clone", clone_url, str(local_path)], cwd=local_path.parent)
        self._logger.info(
            "clone completed",
            extra={"event": "git.clone.success", "local_path": str(local_path)},
        )

    def origin_url(self, repo_path: Path) -> str | None:
        result = self._run_git_allow_fail(["remote", "get-url", "origin"], cwd=repo_path)
        if result.returncode != 0:
            return None
        url = (result.stdout or "").strip()
        return url or None

    def fetch(self, repo_path: Path) -> None:
        self._logger.info(
            "fetching origin",
            extra={"event": "git.fetch.start", "local_path": str(repo_path)},
        )
        self._run_git(["fetch", "--prune", "origin"], cwd=repo_path)

    def head_commit(self, repo_path: Path) -> str | None:
        return self.resolve_ref(repo_path, "HEAD")

    def head_shorthand(self, repo_path: Path) -> str | None:
        result = self._run_git_allow_fail(["symbolic-ref", "--quiet", "--short", "HEAD"], cwd=repo_path)
        if result.returncode != 0:
            return None
        branch = (result.stdout or "").strip()
        return branch or None

    def resolve_ref(self, repo_path: Path, ref: str) -> str | None:
        result = self._run_git_allow_fail(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], cwd=repo_path)
        if result.returncode != 0:
            return None
        commit_id = (result.stdout or "").strip()
        return commit_id or None

    def is_ancestor(self, repo_path: Path, ancestor: str, descendant: str) -> bool:
        result = self._run_git_allow_fail(["merge-base", "--is-ancestor", ancestor, descendant], cwd=repo_path)
        if result.returncode == 0:
            return True
        if result.returncode == 1:
            return False
        details = (result.stderr or "").strip() or "No command output"
        raise VcsError(f"Unable to compare commits {ancestor} and {descendant} in {repo_path}: {details}")

    def ahead_behind(self, repo_path: Path, local: str, upstream: str) -> tuple[int, int]:
        result = self._run_git(["rev-list", "--left-right", "--count", f"{local}...{upstream}"], cwd=repo_path)
        parts = (result.stdout or "").split()
        if len(parts) != 2:
            raise VcsError(f"Unexpected rev-list output in {repo_path}: {result.stdout!r}")
        return int(parts[0]), int(parts[1])

    def working_tree_states(self, repo_path: Path) -> set[DirtyState]:
        result = self._run_git(["status", "--porcelain=v1"], cwd=repo_path)
        return parse_porcelain_states(result.stdout or "")

    def update_ref(self, repo_path: Path, ref: str, new_commit: str, old_commit: str) -> None:
        self._run_git(["update-ref", "-m", "fbcli: fast-forward", ref, new_commit, old_commit], cwd=repo_path)

    def force_checkout(self, repo_path: Path, branch: str) -> None:
        self._run_git(["checkout", "--force", branch], cwd=repo_path)

    def _run_git_allow_fail(self, args: Sequence[str], cwd: Path) -> subprocess.CompletedProcess[str]:
        command = [self._git_executable, *args]
        try:
            return subprocess.run(
                command,
                cwd=str(cwd),
                check=False,
                text=True,
                capture_output=True,
                timeout=self._timeout_seconds,
            )
        except FileNotFoundError as error:
            raise VcsError(
                f"Git executable '{self._git_executable}' was not found in PATH"
            ) from error
        except NotADirectoryError as error:
            raise VcsError(f"Not a directory: {cwd}") from error
        except subprocess.TimeoutExpired as error:
            raise VcsError(
                f"Git command timed out after {self._timeout_seconds}s: {' '.join(command)}"
            ) from error

    def _run_git(self, args: Sequence[str], cwd: Path) -> subprocess.CompletedProcess[str]:
        result = self._run_git_allow_fail(args, cwd)
        if result.returncode == 0:
            return result

        command = [self._git_executable, *args]
        stderr = (result.stderr or "").strip()
        stdout = (result.stdout or "").strip()
        details = stderr or stdout or "No command output"
        self._logger.error(
            "git command failed",
            extra={
                "event": "git.command.error",
                "command": " ".join(command),
                "cwd": str(cwd),
                "return_code": result.returncode,
                "details": details,
            },
        )
        raise VcsError(f"Git command failed ({result.returncode}): {' '.join(command)}\n{details}")


def parse_porcelain_states(output: str) -> set[DirtyState]:
    """Classify `git status --porcelain=v1` lines into dirty-state categories."""
    states: set[DirtyState] = set()
    for line in output.splitlines():
        if len(line) < 2:
            continue
        index_code, worktree_code = line[0], line[1]
        if index_code == "?" and worktree_code == "?":
            states.add(DirtyState.UNTRACKED)
            continue
        if index_code == "!":
            continue
        if index_code in _STAGED_CODES:
            states.add(DirtyState.STAGED)
        if worktree_code in _WORKTREE_MODIFIED_CODES:
            states.add(DirtyState.MODIFIED)
    return states
