from __future__ import annotations
"""Detection of what `plugin build` should build from the current directory."""

from dataclasses import dataclass, field
import logging
from pathlib import Path

from far_beyond_tool.domain.conventions import PluginConventions
from far_beyond_tool.domain.entities import BuildTarget, BuildTargetKind
from far_beyond_tool.domain.errors import (
    InvalidInvocationContextError,
    ManifestFieldMissingError,
    MissingTargetError,
    ReservedPackageNameError,
    TargetNotFoundError,
)
from far_beyond_tool.domain.ports import FileSystemPort, ManifestPort


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class BuildContextResolver:
    """Resolve a `BuildTarget` for one invocation.

    Decision order:
    1. `current_dir` holds a manifest and is named with the plugin prefix:
       single plugin directory, package name read from that manifest.
    2. `current_dir` holds a `crates/` directory: workspace root, the plugin
       identifier is required and normalized with the plugin prefix.
    3. Anything else is an invalid invocation context.

    The reserved host-system crate is rejected in both branches.
    """

    manifest: ManifestPort
    filesystem: FileSystemPort
    conventions: PluginConventions = field(default_factory=PluginConventions)

    def resolve(self, current_dir: Path, plugin: str | None = None) -> BuildTarget:
        manifest_path = current_dir / self.conventions.manifest_filename
        crates_dir = current_dir / self.conventions.crates_dirname
        dir_name = current_dir.name

        if self.conventions.is_reserved(dir_name):
            raise ReservedPackageNameError(dir_name)

        if self.filesystem.path_exists(manifest_path) and dir_name.startswith(self.conventions.namespace_prefix):
            package_name = self._read_package_name(manifest_path)
            target = BuildTarget(
                kind=BuildTargetKind.SINGLE_PLUGIN_DIR,
                source_dir=current_dir,
                package_name=package_name,
            )
        elif self.filesystem.path_exists(crates_dir):
            target = self._resolve_workspace_member(current_dir, crates_dir, plugin)
        else:
            raise InvalidInvocationContextError(current_dir)

        LOGGER.info(
            "build target resolved",
            extra={
                "event": "build.context.resolved",
                "kind": target.kind.value,
                "source_dir": str(target.source_dir),
                "package_name": target.package_name,
            },
        )
        return target

    def _resolve_workspace_member(self, workspace_root: Path, crates_dir: Path, plugin: str | None) -> BuildTarget:
        identifier = (plugin or "").strip()
        if not identifier:
            raise MissingTargetError()

        crate_name = self.conventions.crate_name(identifier)
        if self.conventions.is_reserved(crate_name):
            raise ReservedPackageNameError(crate_name)

        crate_dir = crates_dir / crate_name
        if not self.filesystem.path_exists(crate_dir):
            raise TargetNotFoundError(crate_name, crates_dir)

        package_name = self._read_package_name(crate_dir / self.conventions.manifest_filename)
        return BuildTarget(
            kind=BuildTargetKind.WORKSPACE_MEMBER,
            source_dir=crate_dir,
            package_name=package_name,
            workspace_root=workspace_root,
        )

    def _read_package_name(self, manifest_path: Path) -> str:
        package_name = self.manifest.package_name(manifest_path)
        if package_name is None:
            raise ManifestFieldMissingError("package.name", manifest_path)
        if self.conventions.is_reserved(package_name):
            raise ReservedPackageNameError(package_name)
        return package_name
