from __future__ import annotations
"""Cargo build runner backed by a shell process.

Builds are not time-limited: a hung `cargo` blocks the command until it exits.
"""

import logging
import subprocess
from pathlib import Path
from typing import Callable

from far_beyond_tool.domain.errors import BuildFailedError
from far_beyond_tool.domain.ports import BuildToolPort


class ShellCargoBuildRunner(BuildToolPort):
    """Run `cargo build --release` through a shell process."""

    def __init__(
        self,
        *,
        cargo_executable: str = "cargo",
        runner: Callable[..., subprocess.CompletedProcess[str]] = subprocess.run,
    ) -> None:
        self._cargo_executable = cargo_executable
        self._runner = runner
        self._logger = logging.getLogger(__name__)

    def build_release(self, source_dir: Path) -> tuple[int, str, str]:
        command = [self._cargo_executable, "build", "--release"]
        self._logger.info(
            "cargo build started",
            extra={"event": "cargo.build.start", "source_dir": str(source_dir)},
        )
        try:
            completed = self._runner(
                command,
                cwd=str(source_dir),
                check=False,
                text=True,
                capture_output=True,
            )
        except FileNotFoundError as error:
            raise BuildFailedError(
                f"Cargo executable '{self._cargo_executable}' was not found in PATH"
            ) from error

        self._logger.info(
            "cargo build finished",
            extra={
                "event": "cargo.build.finished",
                "source_dir": str(source_dir),
                "return_code": completed.returncode,
            },
        )
        return completed.returncode, completed.stdout or "", completed.stderr or ""
