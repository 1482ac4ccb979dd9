from __future__ import annotations
"""Application use case for building a plugin and deploying its library."""

from dataclasses import dataclass
import logging
from pathlib import Path

from far_beyond_tool.application.use_cases.artifact_locator import ArtifactLocator
from far_beyond_tool.application.use_cases.build_context import BuildContextResolver
from far_beyond_tool.application.use_cases.deployment import DeploymentCopier
from far_beyond_tool.domain.entities import Artifact, BuildTarget
from far_beyond_tool.domain.errors import BuildFailedError, FilesystemError
from far_beyond_tool.domain.ports import BuildToolPort


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class BuildOrchestrator:
    """Run the release build for a target and fail on non-zero exit.

    Builds are not retried; stderr is surfaced verbatim in `BuildFailedError`.
    """

    build_tool: BuildToolPort

    def build(self, target: BuildTarget) -> None:
        exit_code, _stdout, stderr = self.build_tool.build_release(target.source_dir)
        if exit_code != 0:
            LOGGER.error(
                "plugin build failed",
                extra={
                    "event": "build.failed",
                    "package_name": target.package_name,
                    "exit_code": exit_code,
                },
            )
            raise BuildFailedError(stderr)


@dataclass(slots=True)
class PluginBuildSummary:
    target: BuildTarget
    artifact: Artifact
    artifact_size: int
    deployed_path: Path | None


@dataclass(slots=True)
class PluginBuildPipeline:
    """Resolve, build, locate and (optionally) deploy one plugin.

    All-or-nothing: the first failing step aborts the command.
    """

    resolver: BuildContextResolver
    orchestrator: BuildOrchestrator
    locator: ArtifactLocator
    copier: DeploymentCopier

    def execute(
        self,
        current_dir: Path,
        plugin: str | None = None,
        *,
        destination_root: Path | None = None,
        copy: bool = True,
    ) -> PluginBuildSummary:
        """Build the plugin selected by `current_dir` and `plugin`.

        Args:
            current_dir: Directory the command was invoked from.
            plugin: Plugin identifier, required from a workspace root.
            destination_root: Horizon installation receiving the library.
            copy: Deploy the library into `destination_root/plugins` when `True`.
        """
        target = self.resolver.resolve(current_dir, plugin)
        self.orchestrator.build(target)
        artifact = self.locator.locate(target)

        deployed_path: Path | None = None
        if copy:
            if destination_root is None:
                raise ValueError("destination_root is required when copy is enabled")
            deployed_path = self.copier.deploy(artifact, destination_root)

        try:
            artifact_size = artifact.path.stat().st_size
        except OSError as error:
            raise FilesystemError(f"Unable to read built library {artifact.path}: {error}") from error

        summary = PluginBuildSummary(
            target=target,
            artifact=artifact,
            artifact_size=artifact_size,
            deployed_path=deployed_path,
        )
        LOGGER.info(
            "plugin build completed",
            extra={
                "event": "build.completed",
                "package_name": target.package_name,
                "artifact": str(artifact.path),
                "deployed_path": str(deployed_path) if deployed_path else None,
            },
        )
        return summary
