# src/xtuml_codegen/errors.py
from __future__ import annotations

CONFIG_001 = "CONFIG_001"  # Invalid option value
CONFIG_002 = "CONFIG_002"  # Config file not found
CONFIG_003 = "CONFIG_003"  # Unreadable or malformed config file
PRECONDITION_001 = "PRECONDITION_001"  # Interpreter missing
PRECONDITION_002 = "PRECONDITION_002"  # Required package missing
PIPELINE_001 = "PIPELINE_001"  # Toolchain stage failed


class CodegenError(Exception):
    """Base exception for all xtuml-codegen errors."""
    code: str = "CODEGEN-UNKNOWN"
    recoverable: bool = False

    def __init__(self, message: str, code: str | None = None, recoverable: bool | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable


class ConfigError(CodegenError):
    code = "CONFIG"


class PreconditionError(CodegenError):
    code = "PRECONDITION"

    def __init__(self, message: str, hint: str, code: str | None = None):
        super().__init__(message, code=code)
        self.hint = hint


class InterpreterMissingError(PreconditionError):
    code = PRECONDITION_001

    def __init__(self, interpreter: str):
        super().__init__(
            "Python is not installed.",
            hint=f"Make `{interpreter}` available on PATH or set the `python` option.",
        )
        self.interpreter = interpreter


class PackageMissingError(PreconditionError):
    code = PRECONDITION_002

    def __init__(self, package: str):
        super().__init__(
            f"`{package}` is not installed. Install with `pip install {package}`",
            hint=f"pip install {package}",
        )
        self.package = package


class PipelineStageError(CodegenError):
    code = PIPELINE_001

    def __init__(
        self,
        message: str,
        *,
        stage: str,
        returncode: int | None = None,
        signal: int | None = None,
    ):
        super().__init__(message)
        self.stage = stage
        self.returncode = returncode
        self.signal = signal
