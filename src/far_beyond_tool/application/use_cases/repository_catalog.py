from __future__ import annotations
"""Organization repository listing and single-repository cloning."""

from dataclasses import dataclass
import logging
from pathlib import Path

from far_beyond_tool.domain.entities import OrganizationRepository
from far_beyond_tool.domain.errors import FilesystemError
from far_beyond_tool.domain.ports import FileSystemPort, GitClientPort, GitProviderPort


LOGGER = logging.getLogger(__name__)


def clone_url_for(organization: str, repository: str, *, use_ssh: bool = False) -> str:
    if use_ssh:
        return f"git@github.com:{organization}/{repository}.git"
    return f"https://github.com/{organization}/{repository}.git"


@dataclass(slots=True)
class RepositoryCatalog:
    git_provider: GitProviderPort
    git_client: GitClientPort
    filesystem: FileSystemPort
    organization: str

    def list_repositories(self, public_only: bool = False) -> list[OrganizationRepository]:
        repositories = self.git_provider.list_repositories(self.organization)
        if public_only:
            repositories = [repository for repository in repositories if not repository.private]
        LOGGER.info(
            "organization repositories listed",
            extra={
                "event": "catalog.listed",
                "organization": self.organization,
                "public_only": public_only,
                "count": len(repositories),
            },
        )
        return repositories

    def clone(self, repository: str, target_dir: Path | None = None, *, use_ssh: bool = False) -> Path:
        """Clone one organization repository; the target directory must not exist yet."""
        local_path = target_dir if target_dir is not None else Path(repository)
        if self.filesystem.path_exists(local_path):
            raise FilesystemError(f"Directory '{local_path}' already exists")

        self.git_client.clone(clone_url_for(self.organization, repository, use_ssh=use_ssh), local_path)
        return local_path
