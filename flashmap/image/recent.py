from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple

MAX_RECENT_FILES = 10


@dataclass(frozen=True)
class RecentFiles:
    """Most-recently-used paths, newest first. Persisting them is up to the caller."""

    paths: Tuple[str, ...] = ()
    limit: int = MAX_RECENT_FILES

    @classmethod
    def from_iterable(cls, paths: Iterable[str], limit: int = MAX_RECENT_FILES) -> "RecentFiles":
        unique = tuple(dict.fromkeys(str(p) for p in paths))
        return cls(unique[:limit], limit)

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def __contains__(self, path: object) -> bool:
        return path in self.paths

    def add(self, path: str) -> "RecentFiles":
        # a known path keeps its position
        if path in self.paths:
            return self
        return RecentFiles(((path,) + self.paths)[: self.limit], self.limit)

    def remove(self, path: str) -> "RecentFiles":
        return RecentFiles(tuple(p for p in self.paths if p != path), self.limit)
