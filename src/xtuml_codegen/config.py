"""Configuration management for xtuml-codegen."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from xtuml_codegen.errors import CONFIG_001, CONFIG_002, CONFIG_003, ConfigError

DEFAULT_CONFIG_FILENAME = "xtuml-codegen.yaml"


class CodegenConfig(BaseModel):
    """Options recognized by the orchestrator.

    Every option can be given under its camelCase name (``genWorkspace``) or
    its field name (``gen_workspace``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    # 0 inherits stdout and stderr, 1 suppresses stderr, 2+ suppresses both
    quiet: int = Field(default=1, ge=0)
    gen_workspace: Path = Field(default=Path(".codegen"), alias="genWorkspace")
    prebuild_output: str = Field(default="out.sql", alias="prebuildOutput", min_length=1)
    source_models: tuple[str, ...] = Field(default=(), alias="sourceModels")
    archetypes: tuple[str, ...] = ()
    python: str = "python"
    schema_path: Path | None = Field(default=None, alias="schema")


def merge_options(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Shallow-merge option mappings; later layers win per key."""
    merged: dict[str, Any] = {}
    for layer in layers:
        if layer:
            merged.update(_normalize_keys(layer))
    return merged


def build_config(options: Mapping[str, Any] | CodegenConfig | None = None) -> CodegenConfig:
    if isinstance(options, CodegenConfig):
        return options
    try:
        return CodegenConfig.model_validate(merge_options(options))
    except ValidationError as exc:
        raise ConfigError(f"Invalid xtuml-codegen options: {exc}", code=CONFIG_001) from exc


def load_config(config_path: Path | None = None, overrides: Mapping[str, Any] | None = None) -> CodegenConfig:
    resolved_path = _resolve_config_path(config_path)
    data: dict[str, Any] = {}
    if resolved_path is not None:
        data = _load_yaml(resolved_path)
    return build_config(merge_options(data, overrides))


def serialize_config(config: CodegenConfig) -> dict[str, Any]:
    return config.model_dump(mode="json", by_alias=True)


def _normalize_keys(options: Mapping[str, Any]) -> dict[str, Any]:
    aliases = {
        field.alias: name
        for name, field in CodegenConfig.model_fields.items()
        if field.alias is not None
    }
    return {aliases.get(key, key): value for key, value in options.items()}


def _resolve_config_path(config_path: Path | None) -> Path | None:
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}", code=CONFIG_002)
        return config_path
    default_path = Path.cwd() / DEFAULT_CONFIG_FILENAME
    return default_path if default_path.exists() else None


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read config file: {path}", code=CONFIG_003) from exc
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file: {path}", code=CONFIG_003) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config file must define a mapping.", code=CONFIG_003)
    return data
