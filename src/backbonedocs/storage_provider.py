"""
File storage abstraction for chapter documents.
Default implementation reads a local directory; the interface allows other backends later.
"""
from __future__ import annotations

from pathlib import Path
from typing import Protocol


class ChapterStore(Protocol):
    @property
    def root(self) -> Path:
        ...

    def exists(self) -> bool:
        ...

    def list_names(self) -> list[str]:
        ...

    def read_text(self, name: str) -> str:
        ...


class LocalChapterStore:
    def __init__(self, root: Path):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def exists(self) -> bool:
        return self._root.is_dir()

    def list_names(self) -> list[str]:
        """Returns regular file names in directory listing order (not normalized)."""
        return [entry.name for entry in self._root.iterdir() if entry.is_file()]

    def read_text(self, name: str) -> str:
        # newline="" keeps CRLF files byte-faithful.
        with open(self._root / str(name), "r", encoding="utf-8", newline="") as handle:
            return handle.read()
