"""Host build-system interface and a minimal in-process host.

The orchestrator only needs a handful of lifecycle hook points plus a few
attributes on the compiler and compilation objects. Any build system exposing
the same shape can embed it; ``LocalCompiler`` is the reference host used for
embedding in plain Python programs and in tests.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, MutableSet
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from watchfiles import awatch

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    "__pycache__",
    ".git",
    ".jj",
    ".venv",
    "node_modules",
)


# ---------------------------------------------------------------------------
# Hook primitives
# ---------------------------------------------------------------------------


@dataclass
class Tap:
    name: str
    fn: Callable[..., Any]


class SyncHook:
    """Calls tapped functions in registration order."""

    def __init__(self) -> None:
        self.taps: list[Tap] = []

    def tap(self, name: str, fn: Callable[..., Any]) -> None:
        self.taps.append(Tap(name, fn))

    def call(self, *args: Any) -> None:
        for tap in self.taps:
            tap.fn(*args)


class AsyncSeriesHook:
    """Awaits tapped coroutine functions one after another.

    The first exception aborts the series and propagates to the caller.
    """

    def __init__(self) -> None:
        self.taps: list[Tap] = []

    def tap(self, name: str, fn: Callable[..., Awaitable[Any]]) -> None:
        self.taps.append(Tap(name, fn))

    async def promise(self, *args: Any) -> None:
        for tap in self.taps:
            await tap.fn(*args)


@dataclass
class CompilerHooks:
    environment: SyncHook = field(default_factory=SyncHook)
    before_run: AsyncSeriesHook = field(default_factory=AsyncSeriesHook)
    watch_run: AsyncSeriesHook = field(default_factory=AsyncSeriesHook)
    after_compile: SyncHook = field(default_factory=SyncHook)


# ---------------------------------------------------------------------------
# Host protocols
# ---------------------------------------------------------------------------


class Compiler(Protocol):
    context: Path
    watch_mode: bool
    modified_files: set[str]
    hooks: CompilerHooks


class Compilation(Protocol):
    compiler: Compiler
    file_dependencies: MutableSet[str]


class Plugin(Protocol):
    def apply(self, compiler: Compiler) -> None: ...


# ---------------------------------------------------------------------------
# File watching
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileChange:
    path: Path
    change_type: str


ChangeHandler = Callable[[list[FileChange]], Awaitable[None]]


class FileWatcher:
    """Batches filesystem changes from ``watchfiles`` and hands them to a callback."""

    def __init__(
        self,
        watch_paths: Iterable[Path],
        on_changes: ChangeHandler,
        *,
        extensions: set[str] | None = None,
        ignore_patterns: Iterable[str] | None = None,
        debounce_ms: int = 200,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        self._watch_paths = [Path(p).resolve() for p in watch_paths]
        self._on_changes = on_changes
        self._extensions = extensions
        self._ignore_patterns = list(DEFAULT_IGNORE_PATTERNS if ignore_patterns is None else ignore_patterns)
        self._debounce_s = debounce_ms / 1000
        self._stop_event = stop_event or asyncio.Event()
        self._running = False
        self._pending: dict[Path, str] = {}
        self._timer: asyncio.Task[None] | None = None
        self._deliveries: set[asyncio.Task[None]] = set()

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        self._running = True
        try:
            async for changes in awatch(*self._watch_paths, stop_event=self._stop_event):
                if not self._running:
                    break
                for change, raw_path in changes:
                    path = Path(raw_path)
                    if self._should_ignore(path):
                        continue
                    self._pending[path] = change.name
                if self._pending:
                    self._schedule_flush()
        finally:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._deliveries:
                await asyncio.gather(*self._deliveries, return_exceptions=True)
            # changes still inside the debounce window are delivered, not dropped
            if self._pending:
                await self._deliver(self._drain())

    def stop(self) -> None:
        self._running = False
        self._stop_event.set()

    def _should_ignore(self, path: Path) -> bool:
        if self._extensions is not None and path.suffix not in self._extensions:
            return True
        for root in self._watch_paths:
            try:
                relative = path.relative_to(root)
            except ValueError:
                continue
            return any(part in self._ignore_patterns for part in relative.parts)
        return True

    def _schedule_flush(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = asyncio.create_task(self._flush_later())

    async def _flush_later(self) -> None:
        await asyncio.sleep(self._debounce_s)
        self._timer = None
        delivery = asyncio.create_task(self._deliver(self._drain()))
        self._deliveries.add(delivery)
        delivery.add_done_callback(self._deliveries.discard)

    def _drain(self) -> list[FileChange]:
        batch = [FileChange(path=path, change_type=kind) for path, kind in self._pending.items()]
        self._pending.clear()
        return batch

    async def _deliver(self, batch: list[FileChange]) -> None:
        try:
            await self._on_changes(batch)
        except Exception:
            logger.exception("Change handler failed for %d file(s)", len(batch))


# ---------------------------------------------------------------------------
# Reference host
# ---------------------------------------------------------------------------


@dataclass
class LocalCompilation:
    compiler: "LocalCompiler"
    file_dependencies: set[str] = field(default_factory=set)


CompileStep = Callable[[LocalCompilation], Awaitable[None] | None]


class LocalCompiler:
    """Minimal host that drives the lifecycle hooks in order.

    ``environment`` fires once, right after the plugins are applied. A
    single-shot ``run()`` fires ``before_run``; each watch cycle fires
    ``watch_run``. Both are followed by the compile step and ``after_compile``.
    """

    def __init__(
        self,
        context: Path,
        *,
        plugins: Iterable[Plugin] = (),
        compile_step: CompileStep | None = None,
    ) -> None:
        self.context = Path(context).resolve()
        self.watch_mode = False
        self.modified_files: set[str] = set()
        self.file_dependencies: set[str] = set()
        self.hooks = CompilerHooks()
        self._compile_step = compile_step
        self._cycle_lock = asyncio.Lock()
        for plugin in plugins:
            plugin.apply(self)
        self.hooks.environment.call(self)

    async def run(self) -> LocalCompilation:
        self.watch_mode = False
        self.modified_files = set()
        async with self._cycle_lock:
            await self.hooks.before_run.promise(self)
            return await self._compile()

    async def run_cycle(self, modified_files: Iterable[str] = ()) -> LocalCompilation:
        self.watch_mode = True
        async with self._cycle_lock:
            self.modified_files = {str(path) for path in modified_files}
            await self.hooks.watch_run.promise(self)
            compilation = await self._compile()
            self.file_dependencies.update(compilation.file_dependencies)
            return compilation

    async def watch(
        self,
        stop_event: asyncio.Event | None = None,
        *,
        debounce_ms: int = 200,
        extensions: set[str] | None = None,
        ignore_patterns: Iterable[str] | None = None,
    ) -> None:
        """Run one watch cycle, then one more per batch of file changes until stopped."""
        await self.run_cycle()

        async def _on_changes(changes: list[FileChange]) -> None:
            await self.run_cycle(str(change.path) for change in changes)

        watcher = FileWatcher(
            self._watch_roots(),
            _on_changes,
            extensions=extensions,
            ignore_patterns=ignore_patterns,
            debounce_ms=debounce_ms,
            stop_event=stop_event,
        )
        await watcher.start()

    def _watch_roots(self) -> list[Path]:
        roots = [self.context]
        for dependency in sorted(self.file_dependencies):
            parent = Path(dependency).parent
            if not any(parent == root or root in parent.parents for root in roots):
                roots.append(parent)
        return roots

    async def _compile(self) -> LocalCompilation:
        compilation = LocalCompilation(compiler=self)
        if self._compile_step is not None:
            result = self._compile_step(compilation)
            if inspect.isawaitable(result):
                await result
        self.hooks.after_compile.call(compilation)
        return compilation
