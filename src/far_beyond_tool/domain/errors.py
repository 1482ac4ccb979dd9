from __future__ import annotations
"""Error taxonomy raised by use cases and adapters.

Every error derives from `RuntimeError` so the CLI can report them the same way
it reports adapter failures.
"""


class FarBeyondError(RuntimeError):
    """Base class for all expected CLI failures."""


class ContextError(FarBeyondError):
    """The command was invoked from a directory it cannot work in."""


class InvalidInvocationContextError(ContextError):
    def __init__(self, directory: object) -> None:
        super().__init__(f"Not in a plugin directory or workspace root: {directory}")


class MissingTargetError(ContextError):
    def __init__(self) -> None:
        super().__init__("A plugin name is required when building from the workspace root")


class TargetNotFoundError(ContextError):
    def __init__(self, crate_name: str, crates_dir: object) -> None:
        super().__init__(f"Plugin crate '{crate_name}' not found in {crates_dir}")
        self.crate_name = crate_name


class ManifestError(FarBeyondError):
    """Package manifest is missing, malformed or lacks a required field."""


class ManifestFieldMissingError(ManifestError):
    def __init__(self, field_name: str, manifest_path: object) -> None:
        super().__init__(f"Manifest is missing the '{field_name}' field ({manifest_path})")
        self.field_name = field_name


class ManifestParseError(ManifestError):
    pass


class ReservedPackageNameError(FarBeyondError):
    def __init__(self, package_name: str) -> None:
        super().__init__(f"'{package_name}' is not a buildable plugin crate")
        self.package_name = package_name


class VcsError(FarBeyondError):
    """Git operation failed (clone, fetch, ref lookup, checkout)."""


class DivergedHistoryError(FarBeyondError):
    def __init__(self, branch: str) -> None:
        super().__init__(f"Cannot fast-forward '{branch}', manual merge required")
        self.branch = branch


class WorkingTreeDirtyError(FarBeyondError):
    def __init__(self, path: object, states: object) -> None:
        super().__init__(
            f"Working tree has uncommitted changes ({states}); "
            f"commit or stash them, or rerun with --force: {path}"
        )


class BuildFailedError(FarBeyondError):
    def __init__(self, stderr: str) -> None:
        super().__init__(f"Cargo build failed:\n{stderr}")
        self.stderr = stderr


class ArtifactNotFoundError(FarBeyondError):
    pass


class AmbiguousArtifactError(ArtifactNotFoundError):
    def __init__(self, package_name: str, candidates: list[str]) -> None:
        super().__init__(
            f"Several libraries could belong to '{package_name}': {', '.join(candidates)}"
        )
        self.candidates = candidates


class FilesystemError(FarBeyondError):
    pass


class ProviderError(FarBeyondError):
    """Organization repository listing failed."""


class InvalidPluginNameError(FarBeyondError):
    pass
