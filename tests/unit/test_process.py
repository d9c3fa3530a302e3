"""Tests for external process execution."""

from __future__ import annotations

import asyncio

import pytest

from xtuml_codegen.errors import PIPELINE_001, PipelineStageError
from xtuml_codegen.process import ProcessResult, run_process, stream_disposition


@pytest.mark.parametrize(
    ("quiet", "expected"),
    [
        (0, (asyncio.subprocess.DEVNULL, None, None)),
        (1, (asyncio.subprocess.DEVNULL, None, asyncio.subprocess.DEVNULL)),
        (2, (asyncio.subprocess.DEVNULL, asyncio.subprocess.DEVNULL, asyncio.subprocess.DEVNULL)),
        (5, (asyncio.subprocess.DEVNULL, asyncio.subprocess.DEVNULL, asyncio.subprocess.DEVNULL)),
    ],
)
def test_stream_disposition(quiet: int, expected: tuple) -> None:
    assert stream_disposition(quiet) == expected


@pytest.mark.asyncio
async def test_success_returns_result(spawn) -> None:
    result = await run_process("python", ["-m", "tool", "-o", "out.sql"], quiet=0)

    assert result == ProcessResult(returncode=0, signal=None)
    assert spawn.calls == [["python", "-m", "tool", "-o", "out.sql"]]
    assert spawn.kwargs[0]["stdin"] == asyncio.subprocess.DEVNULL
    assert spawn.kwargs[0]["stdout"] is None
    assert spawn.kwargs[0]["stderr"] is None


@pytest.mark.asyncio
async def test_nonzero_exit_raises_with_code(spawn) -> None:
    spawn.exit_codes["tool"] = 2

    with pytest.raises(PipelineStageError) as excinfo:
        await run_process("python", ["-m", "tool"], stage="pre-build")

    assert excinfo.value.returncode == 2
    assert excinfo.value.signal is None
    assert excinfo.value.stage == "pre-build"
    assert excinfo.value.code == PIPELINE_001


@pytest.mark.asyncio
async def test_signal_termination_raises_with_signal(spawn) -> None:
    spawn.exit_codes["tool"] = -9

    with pytest.raises(PipelineStageError) as excinfo:
        await run_process("python", ["-m", "tool"])

    assert excinfo.value.signal == 9
    assert excinfo.value.returncode is None


@pytest.mark.asyncio
async def test_unlaunchable_program_raises_pipeline_error(monkeypatch: pytest.MonkeyPatch) -> None:
    async def missing(*_args, **_kwargs):
        raise FileNotFoundError("no such file")

    monkeypatch.setattr("xtuml_codegen.process.asyncio.create_subprocess_exec", missing)

    with pytest.raises(PipelineStageError) as excinfo:
        await run_process("not-a-real-program", [])

    assert isinstance(excinfo.value.__cause__, FileNotFoundError)
