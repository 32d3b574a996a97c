"""Wiring of the upgrade service from configuration."""

from __future__ import annotations

from collections.abc import Iterable

from aecu.configuration.runtime_settings import Configuration, RepositoryKind, RepositorySettings
from aecu.content_repository.filesystem_repository import FileSystemContentRepository
from aecu.content_repository.in_memory_repository import InMemoryContentRepository
from aecu.content_repository.repository_contracts import ContentRepository
from aecu.execution_history.history_manager import HistoryManager
from aecu.script_execution.script_interpreter import ScriptInterpreter, SubprocessScriptInterpreter

from .aecu_service import AecuService
from .environment_providers import StaticRunModeProvider


def build_repository(settings: RepositorySettings) -> ContentRepository:
    if settings.kind is RepositoryKind.MEMORY:
        return InMemoryContentRepository()
    if settings.root is None:
        raise ValueError("A filesystem repository requires a root directory.")
    return FileSystemContentRepository(settings.root)


def build_service(
    configuration: Configuration,
    *,
    run_modes: Iterable[str] | None = None,
    interpreter: ScriptInterpreter | None = None,
) -> AecuService:
    """Build an `AecuService`; explicit `run_modes` replace the configured ones."""
    return AecuService(
        repository=build_repository(configuration.repository),
        run_mode_provider=StaticRunModeProvider(
            configuration.run_modes if run_modes is None else run_modes
        ),
        interpreter=interpreter or SubprocessScriptInterpreter(configuration.interpreter.command),
        history_manager=HistoryManager(configuration.history.root),
    )
