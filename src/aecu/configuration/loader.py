"""Configuration loader service."""

from __future__ import annotations

import shlex
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from aecu.execution_history.history_manager import DEFAULT_HISTORY_ROOT

from .runtime_settings import (
    Configuration,
    HistorySettings,
    InterpreterSettings,
    RepositoryKind,
    RepositorySettings,
)

DEFAULT_INTERPRETER_COMMAND = ("groovy",)


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> Configuration:
    """Load and validate the configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    return Configuration(
        path=path,
        repository=_parse_repository_section(parsed.get("repository"), path.parent),
        history=_parse_history_section(parsed.get("history")),
        run_modes=_normalize_run_modes(parsed.get("run_modes")),
        interpreter=_parse_interpreter_section(parsed.get("interpreter")),
    )


def _parse_repository_section(value: Any, base_path: Path) -> RepositorySettings:
    section = _require_mapping(value, "repository")
    kind_raw = _require_non_empty_string(
        section.get("type", RepositoryKind.FILESYSTEM.value), "repository.type"
    ).lower()
    try:
        kind = RepositoryKind(kind_raw)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in RepositoryKind)
        raise ConfigurationError(f"repository.type must be one of: {allowed}.") from exc

    root: Path | None = None
    if kind is RepositoryKind.FILESYSTEM:
        root_value = _require_non_empty_string(section.get("root"), "repository.root")
        root = _resolve_path(base_path, root_value)
        if not root.is_dir():
            raise ConfigurationError(f"Repository root directory not found: {root}")
    return RepositorySettings(kind=kind, root=root)


def _parse_history_section(value: Any) -> HistorySettings:
    if value is None:
        return HistorySettings(root=DEFAULT_HISTORY_ROOT)
    section = _require_mapping(value, "history")
    root = _require_non_empty_string(section.get("root", DEFAULT_HISTORY_ROOT), "history.root")
    if not root.startswith("/"):
        raise ConfigurationError("history.root must be an absolute repository path.")
    return HistorySettings(root=root)


def _parse_interpreter_section(value: Any) -> InterpreterSettings:
    if value is None:
        return InterpreterSettings(command=DEFAULT_INTERPRETER_COMMAND)
    section = _require_mapping(value, "interpreter")
    command = section.get("command", list(DEFAULT_INTERPRETER_COMMAND))
    if isinstance(command, str):
        parts = tuple(shlex.split(command))
    elif isinstance(command, Sequence):
        if not all(isinstance(item, str) for item in command):
            raise ConfigurationError("interpreter.command entries must be strings.")
        parts = tuple(item for item in command if item.strip())
    else:
        raise ConfigurationError("interpreter.command must be a string or list of strings.")
    if not parts:
        raise ConfigurationError("interpreter.command must not be empty.")
    return InterpreterSettings(command=parts)


def _normalize_run_modes(value: Any) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset(item.strip() for item in value.split(",") if item.strip())
    if isinstance(value, Sequence):
        modes = set()
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError("run_modes entries must be strings.")
            stripped = item.strip()
            if stripped:
                modes.add(stripped)
        return frozenset(modes)
    raise ConfigurationError("run_modes must be a string or list of strings.")


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' is required.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped
