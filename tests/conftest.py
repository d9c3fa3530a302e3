from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from tests.helpers import SpawnRecorder


@pytest.fixture
def spawn(monkeypatch: pytest.MonkeyPatch) -> SpawnRecorder:
    recorder = SpawnRecorder()
    monkeypatch.setattr("xtuml_codegen.process.asyncio.create_subprocess_exec", recorder)
    return recorder


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False, width=120)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project root with one model file and one archetype."""
    (tmp_path / "models").mkdir()
    (tmp_path / "models" / "a.xtuml").write_text("-- model\n", encoding="utf-8")
    (tmp_path / "t").mkdir()
    (tmp_path / "t" / "x.arc").write_text(".// archetype\n", encoding="utf-8")
    return tmp_path
