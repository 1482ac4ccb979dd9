from __future__ import annotations

import shutil
from pathlib import Path

from far_beyond_tool.domain.ports import FileSystemPort


class LocalFileSystemAdapter(FileSystemPort):
    def ensure_directory(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def path_exists(self, path: Path) -> bool:
        return path.exists()

    def list_directory(self, path: Path):
        return path.iterdir()

    def copy_file(self, source: Path, destination: Path) -> None:
        shutil.copyfile(source, destination)

    def remove_tree(self, path: Path) -> None:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
