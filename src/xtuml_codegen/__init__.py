"""xtuml-codegen: incremental xtUML code generation inside a host build."""

from xtuml_codegen.config import CodegenConfig, load_config
from xtuml_codegen.dependencies import DependencyTracker
from xtuml_codegen.errors import (
    CodegenError,
    ConfigError,
    InterpreterMissingError,
    PackageMissingError,
    PipelineStageError,
    PreconditionError,
)
from xtuml_codegen.host import LocalCompiler
from xtuml_codegen.orchestrator import BuildTrigger, CodegenOrchestrator

__all__ = [
    "BuildTrigger",
    "CodegenConfig",
    "CodegenError",
    "CodegenOrchestrator",
    "ConfigError",
    "DependencyTracker",
    "InterpreterMissingError",
    "LocalCompiler",
    "PackageMissingError",
    "PipelineStageError",
    "PreconditionError",
    "load_config",
]
