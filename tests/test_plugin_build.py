"""End-to-end tests for `PluginBuildPipeline` with a fake cargo."""

from __future__ import annotations

from pathlib import Path

import pytest

from far_beyond_tool.adapters.filesystem.local_filesystem import LocalFileSystemAdapter
from far_beyond_tool.adapters.manifest.cargo_manifest import CargoManifestAdapter
from far_beyond_tool.application.use_cases.artifact_locator import ArtifactLocator
from far_beyond_tool.application.use_cases.build_context import BuildContextResolver
from far_beyond_tool.application.use_cases.deployment import DeploymentCopier
from far_beyond_tool.application.use_cases.plugin_build import BuildOrchestrator, PluginBuildPipeline
from far_beyond_tool.domain.entities import Artifact, BuildTarget, LibraryFormat
from far_beyond_tool.domain.errors import BuildFailedError, FilesystemError, ReservedPackageNameError
from tests._fixtures.fakes import FakeBuildTool
from tests._fixtures.files import write_file


def _pipeline(build_tool: FakeBuildTool) -> PluginBuildPipeline:
    manifest = CargoManifestAdapter()
    filesystem = LocalFileSystemAdapter()
    return PluginBuildPipeline(
        resolver=BuildContextResolver(manifest, filesystem),
        orchestrator=BuildOrchestrator(build_tool),
        locator=ArtifactLocator(manifest, filesystem, LibraryFormat("so", "lib")),
        copier=DeploymentCopier(filesystem),
    )


def _emit_library(name: str):
    def on_build(source_dir: Path) -> None:
        write_file(source_dir / "target" / "release" / name, "\x7fELF" + "0" * 60)

    return on_build


def _plugin_dir(tmp_path: Path, name: str = "plugin_demo") -> Path:
    plugin_dir = tmp_path / name
    write_file(plugin_dir / "Cargo.toml", f'[package]\nname = "{name}"\nversion = "0.1.0"\n')
    return plugin_dir


def test_build_and_deploy_single_plugin(tmp_path: Path) -> None:
    plugin_dir = _plugin_dir(tmp_path)
    build_tool = FakeBuildTool(on_build=_emit_library("libplugin_demo.so"))
    horizon = tmp_path / "Horizon"

    summary = _pipeline(build_tool).execute(plugin_dir, destination_root=horizon)

    assert build_tool.invocations == [plugin_dir]
    assert summary.target.package_name == "plugin_demo"
    assert summary.artifact.filename == "libplugin_demo.so"
    assert summary.artifact_size == 64
    assert summary.deployed_path == horizon / "plugins" / "libplugin_demo.so"
    assert summary.deployed_path.exists()


def test_no_copy_leaves_destination_untouched(tmp_path: Path) -> None:
    plugin_dir = _plugin_dir(tmp_path)
    horizon = tmp_path / "Horizon"

    summary = _pipeline(FakeBuildTool(on_build=_emit_library("libplugin_demo.so"))).execute(
        plugin_dir, destination_root=horizon, copy=False
    )

    assert summary.deployed_path is None
    assert not horizon.exists()


def test_copy_without_destination_is_rejected(tmp_path: Path) -> None:
    plugin_dir = _plugin_dir(tmp_path)

    with pytest.raises(ValueError):
        _pipeline(FakeBuildTool(on_build=_emit_library("libplugin_demo.so"))).execute(plugin_dir)


def test_build_failure_surfaces_stderr(tmp_path: Path) -> None:
    plugin_dir = _plugin_dir(tmp_path)
    build_tool = FakeBuildTool(exit_code=101, stderr="error[E0425]: cannot find value `x`")

    with pytest.raises(BuildFailedError) as excinfo:
        _pipeline(build_tool).execute(plugin_dir, destination_root=tmp_path / "Horizon")

    assert excinfo.value.stderr == "error[E0425]: cannot find value `x`"
    assert str(excinfo.value).startswith("Cargo build failed:\n")
    assert not (tmp_path / "Horizon").exists()


def test_reserved_crate_never_reaches_the_build_tool(tmp_path: Path) -> None:
    write_file(tmp_path / "crates" / "plugin_system" / "Cargo.toml", '[package]\nname = "plugin_system"\n')
    build_tool = FakeBuildTool()

    with pytest.raises(ReservedPackageNameError):
        _pipeline(build_tool).execute(tmp_path, "system", destination_root=tmp_path / "Horizon")

    assert build_tool.invocations == []


def test_workspace_member_build_reads_workspace_output(tmp_path: Path) -> None:
    write_file(tmp_path / "Cargo.toml", '[workspace]\nmembers = ["crates/*"]\n')
    write_file(tmp_path / "crates" / "plugin_chat" / "Cargo.toml", '[package]\nname = "plugin_chat"\n')

    def on_build(source_dir: Path) -> None:
        write_file(tmp_path / "target" / "release" / "libplugin_chat.so", "lib")

    build_tool = FakeBuildTool(on_build=on_build)

    summary = _pipeline(build_tool).execute(tmp_path, "chat", copy=False)

    assert build_tool.invocations == [tmp_path / "crates" / "plugin_chat"]
    assert summary.artifact.path == tmp_path / "target" / "release" / "libplugin_chat.so"


class _VanishedLibraryLocator:
    def __init__(self, path: Path) -> None:
        self.path = path

    def locate(self, target: BuildTarget) -> Artifact:
        return Artifact(path=self.path, platform_extension="so")


def test_vanished_library_raises_filesystem_error(tmp_path: Path) -> None:
    plugin_dir = _plugin_dir(tmp_path)
    pipeline = _pipeline(FakeBuildTool())
    pipeline.locator = _VanishedLibraryLocator(tmp_path / "target" / "release" / "libplugin_demo.so")

    with pytest.raises(FilesystemError, match="Unable to read built library"):
        pipeline.execute(plugin_dir, copy=False)
