"""Ordered, conflict-detecting map of generated files."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Iterator

from springforge.errors import FileConflictError


class GeneratedFileMap:
    """Relative POSIX path -> file text, in insertion order.

    Each entry remembers its origin (the template id, dependency id or
    step that produced it) so a second write to the same path can name
    both producers.
    """

    def __init__(self) -> None:
        self._files: dict[str, str] = {}
        self._origins: dict[str, str] = {}

    @staticmethod
    def normalize(path: str | Path) -> str:
        text = str(path).replace("\\", "/")
        return PurePosixPath(text.lstrip("/")).as_posix()

    def add(self, path: str | Path, content: str, origin: str) -> None:
        """Record *content* at *path*.

        Raises:
            FileConflictError: *path* was already added.
        """
        key = self.normalize(path)
        if key in self._files:
            raise FileConflictError(key, self._origins[key], origin)
        self._files[key] = content
        self._origins[key] = origin

    def get(self, path: str | Path) -> str | None:
        return self._files.get(self.normalize(path))

    def origin_of(self, path: str | Path) -> str | None:
        return self._origins.get(self.normalize(path))

    def paths(self) -> list[str]:
        return list(self._files)

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self._files.items())

    def as_dict(self) -> dict[str, str]:
        return dict(self._files)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return self.normalize(path) in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __repr__(self) -> str:
        return f"GeneratedFileMap({len(self)} files)"
