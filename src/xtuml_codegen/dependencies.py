"""Append-only set of files whose modification triggers regeneration."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, MutableSet


class DependencyTracker:
    """Tracks absolute source paths for the lifetime of one orchestrator.

    Entries are only ever added. A new tracker starts empty.
    """

    def __init__(self) -> None:
        self._paths: set[str] = set()

    def add(self, path: str | os.PathLike[str]) -> None:
        self._paths.add(os.fspath(path))

    def update(self, paths: Iterable[str | os.PathLike[str]]) -> None:
        for path in paths:
            self.add(path)

    def intersects(self, paths: Iterable[str | os.PathLike[str]]) -> bool:
        """Return True if any of ``paths`` is tracked."""
        return any(os.fspath(path) in self._paths for path in paths)

    def publish(self, target: MutableSet[str]) -> None:
        """Add every tracked path to a host dependency set."""
        for path in self._paths:
            target.add(path)

    def snapshot(self) -> frozenset[str]:
        return frozenset(self._paths)

    def __contains__(self, path: object) -> bool:
        if isinstance(path, os.PathLike):
            path = os.fspath(path)
        return path in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def __repr__(self) -> str:
        return f"DependencyTracker({len(self._paths)} paths)"
