from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from xtuml_codegen.host import CompilerHooks


@dataclass
class FakeCompiler:
    context: Path
    watch_mode: bool = False
    modified_files: set[str] = field(default_factory=set)
    hooks: CompilerHooks = field(default_factory=CompilerHooks)


@dataclass
class FakeCompilation:
    compiler: FakeCompiler
    file_dependencies: set[str] = field(default_factory=set)


class FakeProcess:
    def __init__(self, returncode: int) -> None:
        self.returncode = returncode

    async def wait(self) -> int:
        return self.returncode


@dataclass
class SpawnRecorder:
    """Stands in for ``asyncio.create_subprocess_exec``.

    Exit codes are looked up by the ``-m`` module name of the invocation.
    """

    exit_codes: dict[str, int] = field(default_factory=dict)
    calls: list[list[str]] = field(default_factory=list)
    kwargs: list[dict[str, Any]] = field(default_factory=list)

    async def __call__(self, program: str, *args: str, **kwargs: Any) -> FakeProcess:
        self.calls.append([program, *args])
        self.kwargs.append(kwargs)
        module = args[1] if len(args) > 1 and args[0] == "-m" else program
        return FakeProcess(self.exit_codes.get(module, 0))

    def modules(self) -> list[str]:
        return [call[2] for call in self.calls]
