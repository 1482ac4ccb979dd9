from __future__ import annotations
"""Core domain entities shared by the fleet and plugin pipelines.

Every entity here is a short-lived value object recomputed per invocation.
Nothing is persisted between runs.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class DirtyState(str, Enum):
    """Working-tree change categories reported by the status pass."""

    MODIFIED = "modified"
    UNTRACKED = "untracked"
    STAGED = "staged"


DIRTY_STATE_PRINT_ORDER = (DirtyState.MODIFIED, DirtyState.UNTRACKED, DirtyState.STAGED)


@dataclass(slots=True)
class RepositoryRecord:
    """Snapshot of one fleet repository taken during a sync or status pass.

    Attributes:
        path: Local working-copy directory.
        remote_url: URL of the `origin` remote.
        current_branch_name: Branch shorthand (falls back to `main`).
        local_commit_id: Commit id HEAD points at.
        remote_commit_id: Commit id of `refs/remotes/origin/<branch>`, when known.
        dirty_files: Categories of uncommitted changes in the working tree.
    """

    path: Path
    remote_url: str
    current_branch_name: str = "main"
    local_commit_id: str | None = None
    remote_commit_id: str | None = None
    dirty_files: set[DirtyState] = field(default_factory=set)

    @property
    def name(self) -> str:
        return self.path.name


class MergeDecisionKind(str, Enum):
    UP_TO_DATE = "up_to_date"
    FAST_FORWARD_ELIGIBLE = "fast_forward_eligible"
    DIVERGED_REQUIRES_MANUAL_MERGE = "diverged_requires_manual_merge"


@dataclass(frozen=True, slots=True)
class MergeDecision:
    """Outcome of comparing a local branch tip against its remote counterpart.

    Use `analyze_merge` in the sync engine to obtain one; the target commit id is
    only set for fast-forward eligible decisions.
    """

    kind: MergeDecisionKind
    target_commit_id: str | None = None

    @property
    def is_up_to_date(self) -> bool:
        return self.kind is MergeDecisionKind.UP_TO_DATE

    @property
    def is_fast_forward(self) -> bool:
        return self.kind is MergeDecisionKind.FAST_FORWARD_ELIGIBLE

    @property
    def is_diverged(self) -> bool:
        return self.kind is MergeDecisionKind.DIVERGED_REQUIRES_MANUAL_MERGE


class BuildTargetKind(str, Enum):
    SINGLE_PLUGIN_DIR = "single_plugin_dir"
    WORKSPACE_MEMBER = "workspace_member"


@dataclass(frozen=True, slots=True)
class BuildTarget:
    """Resolved plugin crate to build.

    Attributes:
        kind: Whether the invocation targets a plugin directory or a workspace member.
        source_dir: Directory where the build tool is executed.
        package_name: Package name from the crate manifest.
        workspace_root: Workspace root for `WORKSPACE_MEMBER` targets.
    """

    kind: BuildTargetKind
    source_dir: Path
    package_name: str
    workspace_root: Path | None = None


@dataclass(frozen=True, slots=True)
class LibraryFormat:
    """Platform dynamic-library naming convention (`lib<name>.so`, `<name>.dll`, ...)."""

    extension: str
    file_prefix: str = ""


@dataclass(frozen=True, slots=True)
class Artifact:
    path: Path
    platform_extension: str

    @property
    def filename(self) -> str:
        return self.path.name


@dataclass(slots=True)
class OrganizationRepository:
    """Repository metadata returned by the organization listing API."""

    name: str
    full_name: str
    clone_url: str
    ssh_url: str
    html_url: str = ""
    description: str | None = None
    private: bool = False
    default_branch: str = "main"
    updated_at: str = ""
