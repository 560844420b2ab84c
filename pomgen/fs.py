"""File-access capability consumed by the pipeline."""

from __future__ import annotations

import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import List, Protocol

from .errors import PersistenceFailure

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".angular",
    ".cache",
    ".idea",
    ".vscode",
    "node_modules",
    "dist",
    "coverage",
}


class FileAccess(Protocol):
    """Contract for reading, enumerating, and writing files."""

    def exists(self, path: Path) -> bool:
        ...

    def is_file(self, path: Path) -> bool:
        ...

    def is_dir(self, path: Path) -> bool:
        ...

    def list_files(self, root: Path, pattern: str = "*") -> List[Path]:
        ...

    def read_text(self, path: Path) -> str:
        ...

    def write_text(self, path: Path, content: str) -> None:
        ...


class LocalFileSystem:
    """FileAccess implementation backed by the local disk."""

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_file(self, path: Path) -> bool:
        return Path(path).is_file()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def list_files(self, root: Path, pattern: str = "*") -> List[Path]:
        """Recursively list files whose name matches ``pattern``, sorted by path."""
        root_path = Path(root)
        if not root_path.is_dir():
            return []
        matches: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(root_path):
            dirnames[:] = sorted(d for d in dirnames if d not in _EXCLUDED_DIRS)
            for filename in filenames:
                if fnmatchcase(filename, pattern):
                    matches.append(Path(dirpath) / filename)
        return sorted(matches)

    def read_text(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_text(self, path: Path, content: str) -> None:
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8", newline="\n")
        except OSError as exc:
            raise PersistenceFailure(f"Failed to write {target}: {exc}", path=target) from exc


__all__ = ["FileAccess", "LocalFileSystem"]
