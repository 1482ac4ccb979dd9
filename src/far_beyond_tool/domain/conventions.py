from __future__ import annotations
"""Naming conventions of the Horizon plugin ecosystem.

Built once from configuration at startup and handed to every plugin use case.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class PluginConventions:
    namespace_prefix: str = "plugin_"
    reserved_package: str = "plugin_system"
    manifest_filename: str = "Cargo.toml"
    crates_dirname: str = "crates"
    build_output_dir: str = "target/release"
    plugins_dirname: str = "plugins"

    def crate_name(self, identifier: str) -> str:
        """Prefix a user-supplied plugin identifier with the namespace token."""
        if identifier.startswith(self.namespace_prefix):
            return identifier
        return f"{self.namespace_prefix}{identifier}"

    def is_reserved(self, name: str) -> bool:
        return name == self.reserved_package

    def output_dir(self, root: Path) -> Path:
        return root / self.build_output_dir
