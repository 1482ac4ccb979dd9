from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from far_beyond_tool.adapters.build_tool.shell_cargo_builder import ShellCargoBuildRunner
from far_beyond_tool.adapters.filesystem.local_filesystem import LocalFileSystemAdapter
from far_beyond_tool.adapters.git_client.shell_git_client import ShellGitClientAdapter
from far_beyond_tool.adapters.git_providers.github_organization import GitHubOrganizationProviderAdapter
from far_beyond_tool.adapters.manifest.cargo_manifest import CargoManifestAdapter
from far_beyond_tool.application.use_cases.artifact_locator import ArtifactLocator, library_format_for
from far_beyond_tool.application.use_cases.build_context import BuildContextResolver
from far_beyond_tool.application.use_cases.deployment import DeploymentCopier
from far_beyond_tool.application.use_cases.fast_forward_sync import (
    FastForwardSyncEngine,
    FleetSyncSummary,
    SyncOutcome,
)
from far_beyond_tool.application.use_cases.fleet_scanner import RepositoryFleetScanner
from far_beyond_tool.application.use_cases.fleet_status import FleetStatusSummary, StatusReporter
from far_beyond_tool.application.use_cases.plugin_build import (
    BuildOrchestrator,
    PluginBuildPipeline,
    PluginBuildSummary,
)
from far_beyond_tool.application.use_cases.plugin_scaffold import PluginScaffolder
from far_beyond_tool.application.use_cases.repository_catalog import RepositoryCatalog
from far_beyond_tool.cli.config import AppConfig, load_config
from far_beyond_tool.logging_utils import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fbcli",
        description="Far Beyond development kit: Horizon plugin builds and organization repository management.",
    )
    parser.add_argument(
        "--log-level",
        required=False,
        help="Log level for stderr diagnostics. Falls back to FBCLI_LOG_LEVEL, then LOG_LEVEL (default WARNING).",
    )
    groups = parser.add_subparsers(dest="group", required=True)

    plugin_parser = groups.add_parser("plugin", help="Horizon plugin commands.")
    plugin_commands = plugin_parser.add_subparsers(dest="command", required=True)

    new_parser = plugin_commands.add_parser("new", help="Create a new plugin from the sample repository.")
    new_parser.add_argument("name", help="Plugin name.")
    new_parser.add_argument("-p", "--path", required=False, help="Target directory (defaults to current directory).")
    new_parser.set_defaults(handler=_run_plugin_new)

    build_parser_ = plugin_commands.add_parser(
        "build", help="Build a plugin from its directory or from the workspace root."
    )
    build_parser_.add_argument("plugin", nargs="?", help="Plugin name, required from the workspace root.")
    build_parser_.add_argument(
        "--horizon-path",
        required=False,
        help="Horizon installation receiving the library. Falls back to HORIZON_PATH, then ../Horizon.",
    )
    build_parser_.add_argument("--no-copy", action="store_true", help="Skip copying into the plugins directory.")
    build_parser_.set_defaults(handler=_run_plugin_build)

    repo_parser = groups.add_parser("repo", help="Organization repository commands.")
    repo_commands = repo_parser.add_subparsers(dest="command", required=True)

    list_parser = repo_commands.add_parser("list", help="List organization repositories.")
    list_parser.add_argument("--public-only", action="store_true", help="Show only public repositories.")
    list_parser.set_defaults(handler=_run_repo_list)

    clone_parser = repo_commands.add_parser("clone", help="Clone an organization repository.")
    clone_parser.add_argument("repo", help="Repository name.")
    clone_parser.add_argument("-p", "--path", required=False, help="Target directory (defaults to repo name).")
    clone_parser.add_argument("--ssh", action="store_true", help="Use SSH instead of HTTPS.")
    clone_parser.set_defaults(handler=_run_repo_clone)

    update_parser = repo_commands.add_parser(
        "update", help="Fast-forward every organization repository in the current directory."
    )
    update_parser.add_argument("--dry-run", action="store_true", help="Only list what would be updated.")
    update_parser.add_argument(
        "--force",
        action="store_true",
        help="Fast-forward even with uncommitted changes or untracked files (they may be overwritten).",
    )
    update_parser.add_argument("--jobs", type=int, required=False, help="Parallel workers. Falls back to FBCLI_JOBS.")
    update_parser.set_defaults(handler=_run_repo_update)

    status_parser = repo_commands.add_parser(
        "status", help="Show status of every organization repository in the current directory."
    )
    status_parser.add_argument("--jobs", type=int, required=False, help="Parallel workers. Falls back to FBCLI_JOBS.")
    status_parser.set_defaults(handler=_run_repo_status)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config(args=args, env=os.environ)
    except ValueError as error:
        parser.error(str(error))

    configure_logging(config.log_level, config.log_format)
    logger = logging.getLogger(__name__)
    logger.info(
        "cli configuration resolved",
        extra={
            "event": "cli.config.resolved",
            "group": args.group,
            "command": args.command,
            "organization": config.organization,
            "horizon_path": str(config.horizon_path),
            "jobs": config.jobs,
        },
    )

    try:
        args.handler(args, config, Path.cwd())
    except RuntimeError as error:
        logger.error(
            "cli execution failed",
            extra={"event": "cli.execution.failed", "error_type": type(error).__name__},
        )
        print(f"error: {error}", file=sys.stderr)
        return 1
    return 0


def _git_client(config: AppConfig) -> ShellGitClientAdapter:
    return ShellGitClientAdapter(
        git_executable=config.git_executable,
        timeout_seconds=config.git_timeout_seconds,
    )


def _fleet_scanner(config: AppConfig, git_client: ShellGitClientAdapter) -> RepositoryFleetScanner:
    return RepositoryFleetScanner(
        git_client=git_client,
        filesystem=LocalFileSystemAdapter(),
        organization=config.organization,
    )


def _repository_catalog(config: AppConfig) -> RepositoryCatalog:
    return RepositoryCatalog(
        git_provider=GitHubOrganizationProviderAdapter(
            api_base_url=config.github_api_base_url,
            token=config.github_token,
            timeout_seconds=config.http_timeout_seconds,
        ),
        git_client=_git_client(config),
        filesystem=LocalFileSystemAdapter(),
        organization=config.organization,
    )


def _plugin_build_pipeline(config: AppConfig) -> PluginBuildPipeline:
    filesystem = LocalFileSystemAdapter()
    manifest = CargoManifestAdapter()
    conventions = config.plugin_conventions
    return PluginBuildPipeline(
        resolver=BuildContextResolver(manifest=manifest, filesystem=filesystem, conventions=conventions),
        orchestrator=BuildOrchestrator(build_tool=ShellCargoBuildRunner(cargo_executable=config.cargo_executable)),
        locator=ArtifactLocator(
            manifest=manifest,
            filesystem=filesystem,
            library_format=library_format_for(sys.platform),
            conventions=conventions,
        ),
        copier=DeploymentCopier(filesystem=filesystem, plugins_dirname=conventions.plugins_dirname),
    )


def _run_plugin_new(args, config: AppConfig, cwd: Path) -> None:
    target_dir = Path(args.path).expanduser() if args.path else Path(".")
    print(f"Creating new Horizon plugin: {args.name}")
    print(f"Target directory: {target_dir / args.name}")

    scaffolder = PluginScaffolder(
        git_client=_git_client(config),
        manifest=CargoManifestAdapter(),
        filesystem=LocalFileSystemAdapter(),
        sample_repository_url=config.sample_repository_url,
        conventions=config.plugin_conventions,
    )
    plugin_dir = scaffolder.execute(args.name, target_dir)

    print("Plugin created successfully!")
    print(f"Plugin location: {plugin_dir}")
    print("Next steps:")
    print(f"  1. cd {plugin_dir}")
    print("  2. fbcli plugin build")


def _run_plugin_build(args, config: AppConfig, cwd: Path) -> None:
    print("Building Horizon plugin...")
    summary = _plugin_build_pipeline(config).execute(
        cwd,
        args.plugin,
        destination_root=config.horizon_path,
        copy=not args.no_copy,
    )
    _print_build_summary(summary)


def _run_repo_list(args, config: AppConfig, cwd: Path) -> None:
    print(f"Fetching repositories from {config.organization}...")
    repositories = _repository_catalog(config).list_repositories(public_only=args.public_only)

    print(f"Found {len(repositories)} repositories:")
    for repository in repositories:
        visibility = "private" if repository.private else "public"
        print(f"- {repository.name} [{visibility}]")
        print(f"  {repository.description or 'No description'}")
        print(f"  {repository.html_url}")


def _run_repo_clone(args, config: AppConfig, cwd: Path) -> None:
    target_dir = Path(args.path).expanduser() if args.path else None
    print(f"Cloning repository: {args.repo}")
    local_path = _repository_catalog(config).clone(args.repo, target_dir, use_ssh=args.ssh)

    print("Repository cloned successfully!")
    print(f"Location: {local_path}")
    print("Next steps:")
    print(f"  cd {local_path}")
    if (local_path / config.plugin_conventions.manifest_filename).exists():
        print("  cargo build")


def _run_repo_update(args, config: AppConfig, cwd: Path) -> None:
    git_client = _git_client(config)
    engine = FastForwardSyncEngine(
        scanner=_fleet_scanner(config, git_client),
        git_client=git_client,
        force=args.force,
        max_workers=config.jobs,
    )
    print(f"Scanning for {config.organization} repositories in: {cwd}")
    summary = engine.execute(cwd, dry_run=args.dry_run)
    _print_sync_summary(summary, config.organization)


def _run_repo_status(args, config: AppConfig, cwd: Path) -> None:
    git_client = _git_client(config)
    reporter = StatusReporter(
        scanner=_fleet_scanner(config, git_client),
        git_client=git_client,
        max_workers=config.jobs,
    )
    print(f"Checking status of {config.organization} repositories in: {cwd}")
    summary = reporter.execute(cwd)
    _print_status_summary(summary, config.organization)


def _print_build_summary(summary: PluginBuildSummary) -> None:
    print("Plugin built successfully!")
    print(f"Package: {summary.target.package_name}")
    print(f"Library: {summary.artifact.path} ({format_bytes(summary.artifact_size)})")
    if summary.deployed_path is not None:
        print(f"Copied to: {summary.deployed_path.parent}")


def _print_sync_summary(summary: FleetSyncSummary, organization: str) -> None:
    if not summary.repositories:
        print(f"No {organization} repositories found in {summary.root}")
        return

    print(f"Found {len(summary.repositories)} repositories:")
    for item in summary.repositories:
        print(f"  - {item.name}")

    if summary.dry_run:
        print("[DRY-RUN] No changes made.")
        return

    print("Updating repositories...")
    for item in summary.repositories:
        if item.outcome is SyncOutcome.UPDATED:
            print(f"  {item.name}: updated ({_short(item.previous_commit_id)} -> {_short(item.current_commit_id)})")
        elif item.outcome is SyncOutcome.UP_TO_DATE:
            print(f"  {item.name}: already up to date")
        else:
            print(f"  {item.name}: update failed: {item.error}")

    print(
        "Update complete: "
        f"{summary.count(SyncOutcome.UPDATED)} updated, "
        f"{summary.count(SyncOutcome.UP_TO_DATE)} up to date, "
        f"{summary.failed_repositories} failed"
    )


def _print_status_summary(summary: FleetStatusSummary, organization: str) -> None:
    if not summary.repositories:
        print(f"No {organization} repositories found in {summary.root}")
        return

    for report in summary.repositories:
        print(report.name)
        if report.branch:
            print(f"  branch: {report.branch}")
        if report.error:
            print(f"  error: {report.error}")
            continue
        if report.is_clean:
            print("  working directory clean")
        else:
            print(f"  uncommitted changes: {', '.join(report.ordered_changes)}")
        if report.up_to_date:
            print("  up to date with remote")
        if report.ahead:
            print(f"  {report.ahead} commits ahead")
        if report.behind:
            print(f"  {report.behind} commits behind")

    print(f"Status check complete for {len(summary.repositories)} repositories")


def format_bytes(size: int) -> str:
    units = ("B", "KB", "MB", "GB", "TB")
    value = float(size)
    unit_index = 0
    while value >= 1024.0 and unit_index < len(units) - 1:
        value /= 1024.0
        unit_index += 1
    if unit_index == 0:
        return f"{size} {units[0]}"
    return f"{value:.1f} {units[unit_index]}"


def _short(commit_id: str | None) -> str:
    return commit_id[:7] if commit_id else "unknown"


if __name__ == "__main__":
    raise SystemExit(main())
