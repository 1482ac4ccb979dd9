from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Mapping

from far_beyond_tool.domain.conventions import PluginConventions


DEFAULT_ORGANIZATION = "Far-Beyond-Dev"
DEFAULT_GITHUB_API_BASE_URL = "https://api.github.com"
DEFAULT_SAMPLE_REPOSITORY_URL = "https://github.com/Far-Beyond-Dev/Horizon-Plugin-Sample.git"
DEFAULT_HORIZON_PATH = Path("..") / "Horizon"
SUPPORTED_LOG_FORMATS = {"json", "text"}


@dataclass(slots=True)
class AppConfig:
    organization: str
    github_api_base_url: str
    github_token: str | None
    http_timeout_seconds: float
    git_executable: str
    git_timeout_seconds: float
    cargo_executable: str
    sample_repository_url: str
    plugin_conventions: PluginConventions
    horizon_path: Path
    jobs: int
    log_level: str
    log_format: str


def load_config(args, env: Mapping[str, str]) -> AppConfig:
    """Merge command-line arguments, environment variables and defaults.

    Raises:
        ValueError: When a value is present but invalid.
    """
    organization = _normalize_empty(env.get("FBCLI_ORG")) or DEFAULT_ORGANIZATION
    github_api_base_url = (
        _normalize_empty(env.get("FBCLI_GITHUB_API_BASE_URL")) or DEFAULT_GITHUB_API_BASE_URL
    ).rstrip("/")
    github_token = _normalize_empty(env.get("GITHUB_TOKEN"))

    http_timeout_seconds = _parse_float(env.get("FBCLI_HTTP_TIMEOUT_SECONDS"), "FBCLI_HTTP_TIMEOUT_SECONDS", 30.0)
    git_timeout_seconds = _parse_float(env.get("FBCLI_GIT_TIMEOUT_SECONDS"), "FBCLI_GIT_TIMEOUT_SECONDS", 300.0)

    git_executable = _normalize_empty(env.get("FBCLI_GIT")) or "git"
    cargo_executable = _normalize_empty(env.get("FBCLI_CARGO")) or "cargo"
    sample_repository_url = _normalize_empty(env.get("FBCLI_SAMPLE_REPO_URL")) or DEFAULT_SAMPLE_REPOSITORY_URL

    defaults = PluginConventions()
    plugin_conventions = PluginConventions(
        namespace_prefix=_normalize_empty(env.get("FBCLI_PLUGIN_PREFIX")) or defaults.namespace_prefix,
        reserved_package=_normalize_empty(env.get("FBCLI_RESERVED_PACKAGE")) or defaults.reserved_package,
        build_output_dir=_normalize_empty(env.get("FBCLI_BUILD_OUTPUT_DIR")) or defaults.build_output_dir,
    )

    raw_horizon_path = _normalize_empty(_arg_str(args, "horizon_path")) or _normalize_empty(env.get("HORIZON_PATH"))
    horizon_path = Path(raw_horizon_path).expanduser() if raw_horizon_path else DEFAULT_HORIZON_PATH

    raw_jobs = _normalize_empty(_arg_str(args, "jobs")) or _normalize_empty(env.get("FBCLI_JOBS"))
    jobs = 1
    if raw_jobs is not None:
        try:
            jobs = int(raw_jobs)
        except ValueError as error:
            raise ValueError("FBCLI_JOBS/--jobs must be an integer") from error
        if jobs <= 0:
            raise ValueError("FBCLI_JOBS/--jobs must be greater than 0")

    log_level = (
        _normalize_empty(_arg_str(args, "log_level"))
        or _normalize_empty(env.get("FBCLI_LOG_LEVEL"))
        or _normalize_empty(env.get("LOG_LEVEL"))
        or "WARNING"
    ).upper()
    if log_level not in logging.getLevelNamesMapping():
        raise ValueError(f"Unsupported log level '{log_level}'")
    log_format = (_normalize_empty(env.get("FBCLI_LOG_FORMAT")) or "json").lower()
    if log_format not in SUPPORTED_LOG_FORMATS:
        valid = ", ".join(sorted(SUPPORTED_LOG_FORMATS))
        raise ValueError(f"Unsupported log format '{log_format}'. Allowed values: {valid}")

    return AppConfig(
        organization=organization,
        github_api_base_url=github_api_base_url,
        github_token=github_token,
        http_timeout_seconds=http_timeout_seconds,
        git_executable=git_executable,
        git_timeout_seconds=git_timeout_seconds,
        cargo_executable=cargo_executable,
        sample_repository_url=sample_repository_url,
        plugin_conventions=plugin_conventions,
        horizon_path=horizon_path,
        jobs=jobs,
        log_level=log_level,
        log_format=log_format,
    )


def _arg_str(args, name: str) -> str | None:
    value = getattr(args, name, None)
    return str(value) if value is not None else None


def _parse_float(value: str | None, name: str, default: float) -> float:
    raw = _normalize_empty(value)
    if raw is None:
        return default
    try:
        parsed = float(raw)
    except ValueError as error:
        raise ValueError(f"{name} must be a number") from error
    if parsed <= 0:
        raise ValueError(f"{name} must be greater than 0")
    return parsed


def _normalize_empty(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None
