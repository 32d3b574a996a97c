"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class RepositoryKind(str, Enum):
    """Supported content repository backends."""

    FILESYSTEM = "filesystem"
    MEMORY = "memory"


@dataclass(frozen=True)
class RepositorySettings:
    """Content repository backend selection."""

    kind: RepositoryKind
    root: Path | None


@dataclass(frozen=True)
class HistorySettings:
    """Location of execution history records inside the repository."""

    root: str


@dataclass(frozen=True)
class InterpreterSettings:
    """External command used to run upgrade scripts."""

    command: tuple[str, ...]


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path
    repository: RepositorySettings
    history: HistorySettings
    run_modes: frozenset[str]
    interpreter: InterpreterSettings
