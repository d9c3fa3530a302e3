"""Tests for error codes."""

from __future__ import annotations

from xtuml_codegen.errors import (
    PIPELINE_001,
    PRECONDITION_001,
    PRECONDITION_002,
    CodegenError,
    ConfigError,
    InterpreterMissingError,
    PackageMissingError,
    PipelineStageError,
    PreconditionError,
)


def test_class_codes() -> None:
    assert ConfigError.code == "CONFIG"
    assert PreconditionError.code == "PRECONDITION"
    assert InterpreterMissingError.code == PRECONDITION_001
    assert PackageMissingError.code == PRECONDITION_002
    assert PipelineStageError.code == PIPELINE_001


def test_instance_code_override() -> None:
    error = ConfigError("bad option", code="CONFIG_001")
    assert error.code == "CONFIG_001"
    assert ConfigError.code == "CONFIG"


def test_nothing_is_recoverable_by_default() -> None:
    for error in (
        ConfigError("x"),
        PreconditionError("x", hint="y"),
        InterpreterMissingError("python"),
        PipelineStageError("x", stage="pre-build"),
    ):
        assert isinstance(error, CodegenError)
        assert error.recoverable is False
