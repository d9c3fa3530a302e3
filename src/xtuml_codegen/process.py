"""External process execution for the toolchain stages."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass

from xtuml_codegen.errors import PipelineStageError

logger = logging.getLogger(__name__)

INHERIT = None
SUPPRESS = asyncio.subprocess.DEVNULL


@dataclass(frozen=True)
class ProcessResult:
    returncode: int
    signal: int | None = None


def stream_disposition(quiet: int) -> tuple[int | None, int | None, int | None]:
    """Return the (stdin, stdout, stderr) disposition for a verbosity level.

    stdin is always suppressed. ``quiet`` 0 inherits stdout and stderr, 1
    suppresses stderr only, 2 or more suppresses both.
    """
    stdout = SUPPRESS if quiet > 1 else INHERIT
    stderr = SUPPRESS if quiet > 0 else INHERIT
    return SUPPRESS, stdout, stderr


async def run_process(
    program: str,
    args: Sequence[str | os.PathLike[str]],
    *,
    quiet: int = 1,
    stage: str | None = None,
) -> ProcessResult:
    """Run ``program`` with ``args`` to completion.

    Raises:
        PipelineStageError: the program could not be launched, exited with a
            nonzero code, or was terminated by a signal.
    """
    stage_name = stage or program
    argv = [os.fspath(arg) for arg in args]
    stdin, stdout, stderr = stream_disposition(quiet)
    logger.debug("Spawning %s: %s %s", stage_name, program, " ".join(argv))
    try:
        proc = await asyncio.create_subprocess_exec(
            program,
            *argv,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
        )
    except OSError as exc:
        raise PipelineStageError(f"Failed to launch {program}: {exc}", stage=stage_name) from exc
    returncode = await proc.wait()
    if returncode == 0:
        return ProcessResult(returncode=0)
    # asyncio reports death by signal N as returncode -N
    if returncode < 0:
        raise PipelineStageError(
            f"{stage_name} terminated by signal {-returncode}",
            stage=stage_name,
            returncode=None,
            signal=-returncode,
        )
    raise PipelineStageError(
        f"{stage_name} exited with code {returncode}",
        stage=stage_name,
        returncode=returncode,
    )
