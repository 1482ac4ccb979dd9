from __future__ import annotations
"""Hexagonal architecture port interfaces.

Use cases depend only on these abstractions. Adapters provide the concrete
implementations (the `git` and `cargo` executables, the GitHub REST API, the
local filesystem, Cargo manifests).
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable

from .entities import DirtyState, OrganizationRepository


class GitProviderPort(ABC):
    """Organization repository discovery (GitHub REST API)."""

    @abstractmethod
    def list_repositories(self, organization: str) -> list[OrganizationRepository]:
        """List every repository visible in the organization."""
        raise NotImplementedError


class GitClientPort(ABC):
    """Local git primitives consumed by the fleet pipeline.

    Read methods return `None` for "not there" (no remote, no ref, no commit);
    operations that must succeed raise `VcsError`.
    """

    @abstractmethod
    def clone(self, clone_url: str, local_path: Path) -> None:
        """Clone a remote repository into a new local directory."""
        raise NotImplementedError

    @abstractmethod
    def origin_url(self, repo_path: Path) -> str | None:
        """Return the `origin` remote URL, or None when the path is not usable."""
        raise NotImplementedError

    @abstractmethod
    def fetch(self, repo_path: Path) -> None:
        """Fetch all refs from `origin`."""
        raise NotImplementedError

    @abstractmethod
    def head_commit(self, repo_path: Path) -> str | None:
        """Commit id HEAD points at, or None for an unborn HEAD."""
        raise NotImplementedError

    @abstractmethod
    def head_shorthand(self, repo_path: Path) -> str | None:
        """Branch shorthand for HEAD, or None when detached/unborn."""
        raise NotImplementedError

    @abstractmethod
    def resolve_ref(self, repo_path: Path, ref: str) -> str | None:
        """Commit id for a fully qualified ref, or None when absent."""
        raise NotImplementedError

    @abstractmethod
    def is_ancestor(self, repo_path: Path, ancestor: str, descendant: str) -> bool:
        """Whether `ancestor` is reachable from `descendant`."""
        raise NotImplementedError

    @abstractmethod
    def ahead_behind(self, repo_path: Path, local: str, upstream: str) -> tuple[int, int]:
        """Return `(ahead, behind)` commit counts of `local` relative to `upstream`."""
        raise NotImplementedError

    @abstractmethod
    def working_tree_states(self, repo_path: Path) -> set[DirtyState]:
        """Classify uncommitted working-tree entries."""
        raise NotImplementedError

    @abstractmethod
    def update_ref(self, repo_path: Path, ref: str, new_commit: str, old_commit: str) -> None:
        """Move `ref` to `new_commit` if it still points at `old_commit`."""
        raise NotImplementedError

    @abstractmethod
    def force_checkout(self, repo_path: Path, branch: str) -> None:
        """Point HEAD at `branch` and overwrite the working tree to match it."""
        raise NotImplementedError


class FileSystemPort(ABC):
    """Filesystem operations abstracted for testability and portability."""

    @abstractmethod
    def ensure_directory(self, path: Path) -> None:
        """Ensure target directory exists (create recursively if needed)."""
        raise NotImplementedError

    @abstractmethod
    def path_exists(self, path: Path) -> bool:
        """Return whether a path exists."""
        raise NotImplementedError

    @abstractmethod
    def list_directory(self, path: Path) -> Iterable[Path]:
        """Yield immediate children of a directory (non-recursive)."""
        raise NotImplementedError

    @abstractmethod
    def copy_file(self, source: Path, destination: Path) -> None:
        """Copy file bytes, replacing `destination` if it exists."""
        raise NotImplementedError

    @abstractmethod
    def remove_tree(self, path: Path) -> None:
        """Remove a file or directory tree if present."""
        raise NotImplementedError


class BuildToolPort(ABC):
    """External build tool invoked in release configuration."""

    @abstractmethod
    def build_release(self, source_dir: Path) -> tuple[int, str, str]:
        """Build and return `(exit_code, stdout, stderr)`."""
        raise NotImplementedError


class ManifestPort(ABC):
    """Package manifest (`Cargo.toml`) access."""

    @abstractmethod
    def package_name(self, manifest_path: Path) -> str | None:
        """Return `package.name`, or None when the field is absent."""
        raise NotImplementedError

    @abstractmethod
    def declares_workspace(self, manifest_path: Path) -> bool:
        """Whether the manifest contains a `[workspace]` table."""
        raise NotImplementedError

    @abstractmethod
    def set_package_name(self, manifest_path: Path, package_name: str) -> None:
        """Rewrite `package.name`, preserving the rest of the document."""
        raise NotImplementedError
