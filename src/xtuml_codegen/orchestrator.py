"""Incremental two-stage code generation driven by host lifecycle hooks."""

from __future__ import annotations

import asyncio
import importlib.resources
import logging
import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from rich.console import Console

from xtuml_codegen.collector import for_each_file
from xtuml_codegen.config import CodegenConfig, build_config
from xtuml_codegen.dependencies import DependencyTracker
from xtuml_codegen.host import Compilation, Compiler
from xtuml_codegen.preconditions import check_environment
from xtuml_codegen.process import run_process

logger = logging.getLogger(__name__)

PLUGIN_NAME = "XtumlCodegenPlugin"
MODEL_SUFFIX = ".xtuml"
PREBUILD_MODULE = "bridgepoint.prebuild"
GENERATE_MODULE = "rsl.gen_erate"


def _default_schema_path() -> Path:
    """Return the schema artifact bundled inside the package."""
    return Path(importlib.resources.files("xtuml_codegen")) / "schema" / "schema.sql"  # type: ignore[arg-type]


class BuildTrigger(str, Enum):
    """Why a build cycle runs the pipeline."""

    FIRST_BUILD = "first_build"
    WATCH_TRIGGER = "watch_trigger"


class CodegenOrchestrator:
    """Runs ``bridgepoint.prebuild`` then ``rsl.gen_erate`` when sources change.

    Usage:
        plugin = CodegenOrchestrator({
            "sourceModels": ["models"],
            "archetypes": ["templates/main.arc"],
        })
        plugin.apply(compiler)

    In watch mode every discovered model file and every archetype is tracked;
    later cycles only regenerate when the host reports a tracked file as
    modified. The tracked set is published to the host after each compile so
    that its watcher keeps observing those files.
    """

    def __init__(
        self,
        options: Mapping[str, Any] | CodegenConfig | None = None,
        *,
        console: Console | None = None,
    ) -> None:
        self._config = build_config(options)
        self._dependencies = DependencyTracker()
        self._cycle_lock = asyncio.Lock()
        self._environment_checked = False
        self._console = console or Console()

    @property
    def config(self) -> CodegenConfig:
        return self._config

    @property
    def dependencies(self) -> DependencyTracker:
        return self._dependencies

    @property
    def schema_path(self) -> Path:
        return self._config.schema_path or _default_schema_path()

    def workspace(self, compiler: Compiler) -> Path:
        return Path(_resolve_path(compiler, self._config.gen_workspace))

    def prebuild_output_path(self, compiler: Compiler) -> Path:
        return self.workspace(compiler) / self._config.prebuild_output

    # -- Host wiring --------------------------------------------------------

    def apply(self, compiler: Compiler) -> None:
        compiler.hooks.environment.tap(PLUGIN_NAME, self.check_environment)
        compiler.hooks.before_run.tap(PLUGIN_NAME, self.execute_build)
        compiler.hooks.watch_run.tap(PLUGIN_NAME, self.execute_build)
        compiler.hooks.after_compile.tap(PLUGIN_NAME, self.update_compilation_dependencies)

    def check_environment(self, compiler: Compiler | None = None) -> None:
        if self._environment_checked:
            return
        check_environment(self._config.python)
        self._environment_checked = True

    # -- Build cycle --------------------------------------------------------

    def decide(self, compiler: Compiler) -> BuildTrigger | None:
        """Return the reason to run the pipeline, or None to skip this cycle."""
        if not compiler.watch_mode or len(self._dependencies) == 0:
            return BuildTrigger.FIRST_BUILD
        if self._dependencies.intersects(compiler.modified_files):
            return BuildTrigger.WATCH_TRIGGER
        return None

    async def execute_build(self, compiler: Compiler) -> None:
        async with self._cycle_lock:
            trigger = self.decide(compiler)
            if trigger is None:
                logger.debug("No tracked source changed; skipping code generation")
                return
            logger.debug("Running code generation (%s)", trigger.value)
            await self.prebuild(compiler)
            await self.generate(compiler)

    async def prebuild(self, compiler: Compiler) -> None:
        self._console.print("\nStarting pre-build...")
        workspace = self.workspace(compiler)
        await asyncio.to_thread(workspace.mkdir, parents=True, exist_ok=True)
        source_models = self._resolve(compiler, self._config.source_models)
        if compiler.watch_mode:
            for source_model in source_models:
                await for_each_file(source_model, self._track_model)
        await run_process(
            self._config.python,
            ["-m", PREBUILD_MODULE, "-o", self.prebuild_output_path(compiler), *source_models],
            quiet=self._config.quiet,
            stage="pre-build",
        )
        self._console.print("Done.")

    async def generate(self, compiler: Compiler) -> None:
        self._console.print("\nStarting code generation...")
        archetypes = self._resolve(compiler, self._config.archetypes)
        if compiler.watch_mode:
            self._dependencies.update(archetypes)
        arch_args: list[str] = []
        for archetype in archetypes:
            arch_args.extend(["-arch", archetype])
        await run_process(
            self._config.python,
            [
                "-m",
                GENERATE_MODULE,
                "-nopersist",
                "-import",
                _resolve_path(compiler, self.schema_path),
                "-import",
                self.prebuild_output_path(compiler),
                *arch_args,
            ],
            quiet=self._config.quiet,
            stage="code generation",
        )
        self._console.print("Done.")

    def update_compilation_dependencies(self, compilation: Compilation) -> None:
        if compilation.compiler.watch_mode:
            self._dependencies.publish(compilation.file_dependencies)

    # -- Helpers ------------------------------------------------------------

    def _track_model(self, file_name: str) -> None:
        if file_name.endswith(MODEL_SUFFIX):
            self._dependencies.add(os.path.normpath(file_name))

    @staticmethod
    def _resolve(compiler: Compiler, paths: tuple[str, ...]) -> list[str]:
        return [_resolve_path(compiler, path) for path in paths]


def _resolve_path(compiler: Compiler, path: str | os.PathLike[str]) -> str:
    raw = os.fspath(path)
    return os.path.normpath(raw if os.path.isabs(raw) else os.path.join(compiler.context, raw))
