from __future__ import annotations
"""Discovery of the dynamic library produced by a plugin build."""

from dataclasses import dataclass, field
import logging
from pathlib import Path

from far_beyond_tool.domain.conventions import PluginConventions
from far_beyond_tool.domain.entities import Artifact, BuildTarget, BuildTargetKind, LibraryFormat
from far_beyond_tool.domain.errors import AmbiguousArtifactError, ArtifactNotFoundError, ManifestError
from far_beyond_tool.domain.ports import FileSystemPort, ManifestPort


LOGGER = logging.getLogger(__name__)


def library_format_for(platform_name: str) -> LibraryFormat:
    """Map a platform identifier (`sys.platform` or `platform.system()`) to its library naming."""
    normalized = platform_name.strip().lower()
    if normalized.startswith("win") or normalized.startswith("cygwin"):
        return LibraryFormat(extension="dll")
    if normalized in {"darwin", "macos"}:
        return LibraryFormat(extension="dylib", file_prefix="lib")
    return LibraryFormat(extension="so", file_prefix="lib")


@dataclass(slots=True)
class ArtifactLocator:
    """Find the built library for a `BuildTarget`.

    Matching runs over one directory level, on files with the platform
    extension, comparing names with the platform `lib` prefix removed:

    1. exact: name equals the package name;
    2. prefix: name starts with the package name (first in name order);
    3. substring: name starts with the plugin prefix and contains the
       package name; several candidates here raise `AmbiguousArtifactError`.
    """

    manifest: ManifestPort
    filesystem: FileSystemPort
    library_format: LibraryFormat
    conventions: PluginConventions = field(default_factory=PluginConventions)

    def locate(self, target: BuildTarget) -> Artifact:
        output_dir = self.output_directory(target)
        return self.find_in(output_dir, target.package_name)

    def output_directory(self, target: BuildTarget) -> Path:
        if target.kind is BuildTargetKind.WORKSPACE_MEMBER and target.workspace_root is not None:
            return self.conventions.output_dir(target.workspace_root)

        workspace_root = self._find_enclosing_workspace(target.source_dir)
        if workspace_root is not None:
            LOGGER.info(
                "enclosing workspace found",
                extra={"event": "artifact.workspace.found", "workspace_root": str(workspace_root)},
            )
            return self.conventions.output_dir(workspace_root)
        return self.conventions.output_dir(target.source_dir)

    def find_in(self, output_dir: Path, package_name: str) -> Artifact:
        if not self.filesystem.path_exists(output_dir):
            raise ArtifactNotFoundError(
                f"Release output directory not found for plugin {package_name} ({output_dir})"
            )

        keys = {package_name, package_name.replace("-", "_")}
        exact: list[Path] = []
        prefixed: list[Path] = []
        contained: list[Path] = []

        for path in sorted(self.filesystem.list_directory(output_dir), key=lambda item: item.name):
            if not path.is_file():
                continue
            stems = self._library_stems(path.name)
            if not stems:
                continue
            if stems & keys:
                exact.append(path)
            elif any(stem.startswith(key) for stem in stems for key in keys):
                prefixed.append(path)
            elif any(
                stem.startswith(self.conventions.namespace_prefix) and key in stem for stem in stems for key in keys
            ):
                contained.append(path)

        for tier, matches in (("exact", exact), ("prefix", prefixed)):
            if matches:
                return self._artifact(matches[0], tier, len(matches))

        if len(contained) > 1:
            raise AmbiguousArtifactError(package_name, [path.name for path in contained])
        if contained:
            return self._artifact(contained[0], "substring", 1)

        raise ArtifactNotFoundError(
            f"Could not find built plugin library in {output_dir} for plugin {package_name}"
        )

    def _library_stems(self, filename: str) -> set[str]:
        suffix = f".{self.library_format.extension}"
        if not filename.endswith(suffix):
            return set()
        stem = filename[: -len(suffix)]
        stems = {stem}
        prefix = self.library_format.file_prefix
        if prefix and stem.startswith(prefix) and len(stem) > len(prefix):
            stems.add(stem[len(prefix):])
        return stems

    def _artifact(self, path: Path, tier: str, candidates: int) -> Artifact:
        LOGGER.info(
            "artifact located",
            extra={"event": "artifact.located", "path": str(path), "tier": tier, "candidates": candidates},
        )
        return Artifact(path=path, platform_extension=self.library_format.extension)

    def _find_enclosing_workspace(self, source_dir: Path) -> Path | None:
        for parent in source_dir.parents:
            candidate = parent / self.conventions.manifest_filename
            if not self.filesystem.path_exists(candidate):
                continue
            try:
                if self.manifest.declares_workspace(candidate):
                    return parent
            except ManifestError as error:
                LOGGER.warning(
                    "ancestor manifest ignored",
                    extra={"event": "artifact.workspace.unreadable", "manifest": str(candidate), "error": str(error)},
                )
        return None
