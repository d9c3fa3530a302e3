"""Startup checks for the external code-generation toolchain."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from xtuml_codegen.errors import InterpreterMissingError, PackageMissingError

logger = logging.getLogger(__name__)

REQUIRED_PACKAGES: tuple[str, ...] = ("pyxtuml", "pyrsl")


def _succeeds(argv: Sequence[str]) -> bool:
    try:
        completed = subprocess.run(
            list(argv),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError:
        return False
    return completed.returncode == 0


def check_interpreter(python: str = "python") -> None:
    if not _succeeds([python, "--version"]):
        raise InterpreterMissingError(python)


def check_package(package: str, python: str = "python") -> None:
    if not _succeeds([python, "-m", "pip", "show", package]):
        raise PackageMissingError(package)


def check_environment(python: str = "python", packages: Sequence[str] = REQUIRED_PACKAGES) -> None:
    """Verify the interpreter and each required package, failing on the first gap.

    Raises:
        InterpreterMissingError: ``python`` cannot be launched.
        PackageMissingError: a package in ``packages`` is not installed.
    """
    check_interpreter(python)
    for package in packages:
        check_package(package, python)
    logger.debug("Toolchain prerequisites satisfied: %s with %s", python, ", ".join(packages))
