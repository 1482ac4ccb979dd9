from __future__ import annotations
"""Read-only status report over the repository fleet."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
from pathlib import Path

from far_beyond_tool.application.use_cases.fleet_scanner import RepositoryFleetScanner
from far_beyond_tool.domain.entities import DIRTY_STATE_PRINT_ORDER, DirtyState, RepositoryRecord
from far_beyond_tool.domain.ports import GitClientPort


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RepositoryStatusReport:
    """Status of one fleet repository.

    `ahead`/`behind` are only set when the remote-tracking branch exists and its
    tip differs from the local tip; `up_to_date` is `True` when the tips match and
    `None` when there is nothing to compare against.
    """

    name: str
    path: Path
    branch: str | None = None
    dirty_files: set[DirtyState] = field(default_factory=set)
    up_to_date: bool | None = None
    ahead: int | None = None
    behind: int | None = None
    error: str | None = None

    @property
    def is_clean(self) -> bool:
        return not self.dirty_files

    @property
    def ordered_changes(self) -> list[str]:
        return [state.value for state in DIRTY_STATE_PRINT_ORDER if state in self.dirty_files]


@dataclass(slots=True)
class FleetStatusSummary:
    root: Path
    repositories: tuple[RepositoryStatusReport, ...]


@dataclass(slots=True)
class StatusReporter:
    """Compute branch, dirty state and ahead/behind counts without mutating anything."""

    scanner: RepositoryFleetScanner
    git_client: GitClientPort
    max_workers: int = 1

    def execute(self, root: Path) -> FleetStatusSummary:
        records = self.scanner.scan(root)
        if self.max_workers > 1 and len(records) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                reports = tuple(executor.map(self.report, records))
        else:
            reports = tuple(self.report(record) for record in records)

        LOGGER.info(
            "fleet status completed",
            extra={"event": "status.completed", "root": str(root), "repo_count": len(reports)},
        )
        return FleetStatusSummary(root=root, repositories=reports)

    def report(self, record: RepositoryRecord) -> RepositoryStatusReport:
        """Build the status report for one repository; failures are captured in `error`."""
        report = RepositoryStatusReport(name=record.name, path=record.path)
        try:
            self._fill(record, report)
        except Exception as error:  # noqa: BLE001
            LOGGER.error(
                "repository status failed",
                extra={"event": "status.repository.failed", "repo": record.name, "error": str(error)},
            )
            report.error = str(error)
        return report

    def _fill(self, record: RepositoryRecord, report: RepositoryStatusReport) -> None:
        report.branch = self.git_client.head_shorthand(record.path)

        record.dirty_files = self.git_client.working_tree_states(record.path)
        report.dirty_files = set(record.dirty_files)

        if report.branch is None:
            return
        record.current_branch_name = report.branch

        local_commit_id = self.git_client.head_commit(record.path)
        remote_commit_id = self.git_client.resolve_ref(record.path, f"refs/remotes/origin/{report.branch}")
        record.local_commit_id = local_commit_id
        record.remote_commit_id = remote_commit_id
        if local_commit_id is None or remote_commit_id is None:
            return

        if local_commit_id == remote_commit_id:
            report.up_to_date = True
            return

        report.up_to_date = False
        report.ahead, report.behind = self.git_client.ahead_behind(record.path, local_commit_id, remote_commit_id)
