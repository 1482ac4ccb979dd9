from __future__ import annotations
"""`Cargo.toml` reader/writer.

Reads go through `tomllib`; the package rename goes through `tomlkit` so the
sample manifest keeps its comments and layout.
"""

import tomllib
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from far_beyond_tool.domain.errors import ManifestError, ManifestFieldMissingError, ManifestParseError
from far_beyond_tool.domain.ports import ManifestPort


class CargoManifestAdapter(ManifestPort):
    def package_name(self, manifest_path: Path) -> str | None:
        data = self._load(manifest_path)
        package = data.get("package")
        if not isinstance(package, dict):
            return None
        name = package.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
        return None

    def declares_workspace(self, manifest_path: Path) -> bool:
        data = self._load(manifest_path)
        return isinstance(data.get("workspace"), dict)

    def set_package_name(self, manifest_path: Path, package_name: str) -> None:
        try:
            document = tomlkit.parse(manifest_path.read_text(encoding="utf-8"))
        except OSError as error:
            raise ManifestError(f"Unable to read manifest {manifest_path}: {error}") from error
        except TOMLKitError as error:
            raise ManifestParseError(f"Invalid TOML in {manifest_path}: {error}") from error

        package = document.get("package")
        if package is None:
            raise ManifestFieldMissingError("package", manifest_path)
        package["name"] = package_name

        try:
            manifest_path.write_text(tomlkit.dumps(document), encoding="utf-8")
        except OSError as error:
            raise ManifestError(f"Unable to write manifest {manifest_path}: {error}") from error

    @staticmethod
    def _load(manifest_path: Path) -> dict[str, Any]:
        try:
            return tomllib.loads(manifest_path.read_text(encoding="utf-8"))
        except OSError as error:
            raise ManifestError(f"Unable to read manifest {manifest_path}: {error}") from error
        except tomllib.TOMLDecodeError as error:
            raise ManifestParseError(f"Invalid TOML in {manifest_path}: {error}") from error
