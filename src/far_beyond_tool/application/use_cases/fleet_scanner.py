from __future__ import annotations
"""Discovery of local working copies that belong to the tracked organization."""

from dataclasses import dataclass
import logging
from pathlib import Path

from far_beyond_tool.domain.entities import RepositoryRecord
from far_beyond_tool.domain.errors import FilesystemError, VcsError
from far_beyond_tool.domain.ports import FileSystemPort, GitClientPort


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RepositoryFleetScanner:
    """Best-effort filter over the immediate subdirectories of a root.

    A directory is part of the fleet when it holds a `.git` entry and its
    `origin` URL contains the organization identifier, compared
    case-insensitively. Anything else is skipped without being reported.
    Results are sorted by directory name.
    """

    git_client: GitClientPort
    filesystem: FileSystemPort
    organization: str

    def scan(self, root: Path) -> list[RepositoryRecord]:
        needle = self.organization.lower()
        records: list[RepositoryRecord] = []

        try:
            candidates = sorted(self.filesystem.list_directory(root), key=lambda path: path.name)
        except OSError as error:
            raise FilesystemError(f"Unable to read directory {root}: {error}") from error

        for candidate in candidates:
            if not candidate.is_dir():
                continue
            if not self.filesystem.path_exists(candidate / ".git"):
                continue

            try:
                remote_url = self.git_client.origin_url(candidate)
            except VcsError as error:
                LOGGER.debug(
                    "candidate skipped: unreadable repository",
                    extra={"event": "fleet.scan.skip.unreadable", "path": str(candidate), "error": str(error)},
                )
                continue

            if not remote_url:
                LOGGER.debug(
                    "candidate skipped: no origin remote",
                    extra={"event": "fleet.scan.skip.no_origin", "path": str(candidate)},
                )
                continue

            if needle not in remote_url.lower():
                LOGGER.debug(
                    "candidate skipped: origin outside organization",
                    extra={"event": "fleet.scan.skip.foreign", "path": str(candidate), "remote_url": remote_url},
                )
                continue

            records.append(RepositoryRecord(path=candidate, remote_url=remote_url))

        LOGGER.info(
            "fleet scanned",
            extra={
                "event": "fleet.scan.completed",
                "root": str(root),
                "organization": self.organization,
                "count": len(records),
            },
        )
        return records
