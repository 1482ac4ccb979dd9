from __future__ import annotations
"""Copy a built plugin library into a Horizon installation."""

from dataclasses import dataclass
import logging
from pathlib import Path

from far_beyond_tool.domain.entities import Artifact
from far_beyond_tool.domain.errors import FilesystemError
from far_beyond_tool.domain.ports import FileSystemPort


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class DeploymentCopier:
    """Copy artifacts to `<destination_root>/<plugins_dirname>/<filename>`.

    An existing file with the same name is overwritten without backup.
    """

    filesystem: FileSystemPort
    plugins_dirname: str = "plugins"

    def deploy(self, artifact: Artifact, destination_root: Path) -> Path:
        plugins_dir = destination_root / self.plugins_dirname
        target_path = plugins_dir / artifact.filename

        try:
            self.filesystem.ensure_directory(plugins_dir)
        except OSError as error:
            raise FilesystemError(f"Failed to create plugins directory: {plugins_dir}: {error}") from error

        try:
            self.filesystem.copy_file(artifact.path, target_path)
        except OSError as error:
            raise FilesystemError(f"Failed to copy plugin to {target_path}: {error}") from error

        LOGGER.info(
            "artifact deployed",
            extra={"event": "deploy.copied", "source": str(artifact.path), "target": str(target_path)},
        )
        return target_path
