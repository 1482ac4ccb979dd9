from __future__ import annotations
"""Fast-forward-only synchronization of the local repository fleet."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
import logging
from pathlib import Path

from far_beyond_tool.application.use_cases.fleet_scanner import RepositoryFleetScanner
from far_beyond_tool.domain.entities import DirtyState, MergeDecision, MergeDecisionKind, RepositoryRecord
from far_beyond_tool.domain.errors import DivergedHistoryError, FarBeyondError, VcsError, WorkingTreeDirtyError
from far_beyond_tool.domain.ports import GitClientPort


LOGGER = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"
_BLOCKING_STATES = frozenset({DirtyState.MODIFIED, DirtyState.STAGED, DirtyState.UNTRACKED})


class SyncOutcome(str, Enum):
    PLANNED = "planned"
    UP_TO_DATE = "up_to_date"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass(slots=True)
class RepositorySyncSummary:
    """Per-repository result returned by `FastForwardSyncEngine`."""

    name: str
    path: Path
    outcome: SyncOutcome
    branch: str | None = None
    previous_commit_id: str | None = None
    current_commit_id: str | None = None
    decision: MergeDecision | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome is not SyncOutcome.FAILED


@dataclass(slots=True)
class FleetSyncSummary:
    """Fleet-level result for one update pass."""

    root: Path
    dry_run: bool
    repositories: tuple[RepositorySyncSummary, ...]

    def count(self, outcome: SyncOutcome) -> int:
        return sum(1 for item in self.repositories if item.outcome is outcome)

    @property
    def failed_repositories(self) -> int:
        return self.count(SyncOutcome.FAILED)


def analyze_merge(git_client: GitClientPort, repo_path: Path, local_commit_id: str, remote_commit_id: str) -> MergeDecision:
    """Classify how the remote tip relates to the local tip.

    Equal tips are up to date. A remote tip that descends from the local tip is a
    fast-forward. Anything else, including a local branch carrying commits the
    remote lacks, needs a manual merge.
    """
    if local_commit_id == remote_commit_id:
        return MergeDecision(MergeDecisionKind.UP_TO_DATE)
    if git_client.is_ancestor(repo_path, local_commit_id, remote_commit_id):
        return MergeDecision(MergeDecisionKind.FAST_FORWARD_ELIGIBLE, target_commit_id=remote_commit_id)
    return MergeDecision(MergeDecisionKind.DIVERGED_REQUIRES_MANUAL_MERGE)


@dataclass(slots=True)
class FastForwardSyncEngine:
    """Fetch every fleet repository and fast-forward its current branch.

    Responsibilities:
    - scan the fleet through `RepositoryFleetScanner`
    - fetch `origin` and compare local/remote tips per repository
    - apply eligible fast-forwards, refusing on a dirty tree unless `force`
    - isolate failures so one repository never aborts the pass

    Fast-forward application force-checks-out the branch; with `force=True`
    uncommitted edits and untracked files in the way are discarded. A failed
    checkout moves the branch back to its previous tip.
    """

    scanner: RepositoryFleetScanner
    git_client: GitClientPort
    force: bool = False
    max_workers: int = 1

    def execute(self, root: Path, dry_run: bool = False) -> FleetSyncSummary:
        """Run one update pass over the fleet found under `root`.

        Args:
            root: Directory whose immediate children are scanned.
            dry_run: When `True`, only list repositories; no fetch or update.

        Returns:
            `FleetSyncSummary` with one entry per repository, in scan order.
        """
        records = self.scanner.scan(root)

        if dry_run:
            summaries = tuple(
                RepositorySyncSummary(name=record.name, path=record.path, outcome=SyncOutcome.PLANNED)
                for record in records
            )
            LOGGER.info(
                "fleet update dry-run planned",
                extra={"event": "sync.dry_run", "root": str(root), "count": len(summaries)},
            )
            return FleetSyncSummary(root=root, dry_run=True, repositories=summaries)

        if self.max_workers > 1 and len(records) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                summaries = tuple(executor.map(self.sync_repository, records))
        else:
            summaries = tuple(self.sync_repository(record) for record in records)

        summary = FleetSyncSummary(root=root, dry_run=False, repositories=summaries)
        LOGGER.info(
            "fleet update completed",
            extra={
                "event": "sync.completed",
                "root": str(root),
                "repo_count": len(summaries),
                "updated": summary.count(SyncOutcome.UPDATED),
                "up_to_date": summary.count(SyncOutcome.UP_TO_DATE),
                "failed": summary.failed_repositories,
            },
        )
        return summary

    def sync_repository(self, record: RepositoryRecord) -> RepositorySyncSummary:
        """Synchronize one repository, converting any failure into a summary entry."""
        LOGGER.info(
            "repository sync started",
            extra={"event": "sync.repository.start", "repo": record.name, "path": str(record.path)},
        )
        try:
            decision = self._synchronize(record)
        except FarBeyondError as error:
            LOGGER.error(
                "repository sync failed",
                extra={"event": "sync.repository.failed", "repo": record.name, "error": str(error)},
            )
            return self._summary(record, SyncOutcome.FAILED, error=str(error))
        except Exception as error:  # noqa: BLE001
            LOGGER.exception(
                "repository sync crashed",
                extra={"event": "sync.repository.crashed", "repo": record.name, "error": str(error)},
            )
            return self._summary(record, SyncOutcome.FAILED, error=str(error))

        outcome = SyncOutcome.UPDATED if decision.is_fast_forward else SyncOutcome.UP_TO_DATE
        LOGGER.info(
            "repository sync finished",
            extra={"event": "sync.repository.finished", "repo": record.name, "outcome": outcome.value},
        )
        return self._summary(record, outcome, decision=decision)

    def _synchronize(self, record: RepositoryRecord) -> MergeDecision:
        self.git_client.fetch(record.path)

        local_commit_id = self.git_client.head_commit(record.path)
        if local_commit_id is None:
            raise VcsError(f"HEAD does not point at a commit: {record.path}")
        record.local_commit_id = local_commit_id
        record.current_branch_name = self.git_client.head_shorthand(record.path) or DEFAULT_BRANCH

        remote_ref = f"refs/remotes/origin/{record.current_branch_name}"
        remote_commit_id = self.git_client.resolve_ref(record.path, remote_ref)
        if remote_commit_id is None:
            raise VcsError(f"Remote branch not found: {remote_ref}")
        record.remote_commit_id = remote_commit_id

        decision = analyze_merge(self.git_client, record.path, local_commit_id, remote_commit_id)
        if decision.is_diverged:
            raise DivergedHistoryError(record.current_branch_name)
        if decision.is_fast_forward:
            self._apply_fast_forward(record, decision)
        return decision

    def _apply_fast_forward(self, record: RepositoryRecord, decision: MergeDecision) -> None:
        if not self.force:
            record.dirty_files = self.git_client.working_tree_states(record.path)
            blocking = sorted(state.value for state in record.dirty_files & _BLOCKING_STATES)
            if blocking:
                raise WorkingTreeDirtyError(record.path, ", ".join(blocking))

        branch = record.current_branch_name
        branch_ref = f"refs/heads/{branch}"
        self.git_client.update_ref(record.path, branch_ref, decision.target_commit_id, record.local_commit_id)
        try:
            self.git_client.force_checkout(record.path, branch)
        except FarBeyondError:
            self._restore_branch(record, branch_ref, decision.target_commit_id)
            raise
        LOGGER.info(
            "repository fast-forwarded",
            extra={
                "event": "sync.repository.fast_forward",
                "repo": record.name,
                "branch": branch,
                "from": record.local_commit_id,
                "to": decision.target_commit_id,
            },
        )

    def _restore_branch(self, record: RepositoryRecord, branch_ref: str, moved_to: str) -> None:
        """Move the branch back to its pre-sync tip after a failed checkout."""
        try:
            self.git_client.update_ref(record.path, branch_ref, record.local_commit_id, moved_to)
        except FarBeyondError as error:
            LOGGER.error(
                "branch rollback failed",
                extra={
                    "event": "sync.repository.rollback_failed",
                    "repo": record.name,
                    "ref": branch_ref,
                    "expected": record.local_commit_id,
                    "error": str(error),
                },
            )
            return
        LOGGER.warning(
            "branch restored after failed checkout",
            extra={"event": "sync.repository.rolled_back", "repo": record.name, "ref": branch_ref},
        )

    @staticmethod
    def _summary(
        record: RepositoryRecord,
        outcome: SyncOutcome,
        *,
        decision: MergeDecision | None = None,
        error: str | None = None,
    ) -> RepositorySyncSummary:
        current_commit_id = record.local_commit_id
        if decision is not None and decision.is_fast_forward:
            current_commit_id = decision.target_commit_id
        return RepositorySyncSummary(
            name=record.name,
            path=record.path,
            outcome=outcome,
            branch=record.current_branch_name if record.local_commit_id else None,
            previous_commit_id=record.local_commit_id,
            current_commit_id=current_commit_id,
            decision=decision,
            error=error,
        )
