"""Recursive file enumeration for source-model discovery."""

from __future__ import annotations

import asyncio
import inspect
import os
import stat
from collections.abc import Awaitable, Callable
from pathlib import Path

FileHandler = Callable[[str], Awaitable[None] | None]


async def for_each_file(path: str | os.PathLike[str], handler: FileHandler) -> None:
    """Invoke ``handler`` once for every regular file reachable from ``path``.

    A file path is handed to the handler as-is. A directory is listed and all
    of its entries are visited concurrently; the coroutine returns once every
    branch has finished. ``OSError`` from stat or listdir and any exception
    raised by the handler propagate unchanged.

    Entries that are neither directories nor regular files (sockets, FIFOs,
    devices) are skipped. Symbolic links are followed and cycles are not
    detected.
    """
    file_path = os.fspath(path)
    info = await asyncio.to_thread(os.stat, file_path)
    if stat.S_ISDIR(info.st_mode):
        entries = await asyncio.to_thread(os.listdir, file_path)
        await asyncio.gather(*(for_each_file(os.path.join(file_path, entry), handler) for entry in entries))
        return
    if not stat.S_ISREG(info.st_mode):
        return
    result = handler(file_path)
    if inspect.isawaitable(result):
        await result


async def collect_files(path: str | os.PathLike[str], suffix: str | None = None) -> list[Path]:
    """Return the sorted files under ``path``, optionally filtered by name suffix."""
    found: list[Path] = []

    def _collect(file_name: str) -> None:
        if suffix is None or file_name.endswith(suffix):
            found.append(Path(file_name))

    await for_each_file(path, _collect)
    return sorted(found)
