"""Upgrade service facade."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from aecu.aecu_errors import AecuError
from aecu.content_repository.repository_contracts import (
    ContentRepository,
    LoginFailure,
    PersistenceFailure,
    RepositorySession,
)
from aecu.execution_history.history_manager import HistoryManager
from aecu.execution_history.history_models import HistoryEntry
from aecu.script_discovery.candidate_discovery import find_candidates
from aecu.script_execution.execution_outcomes import ExecutionResult
from aecu.script_execution.script_executor import ScriptExecutor
from aecu.script_execution.script_interpreter import ScriptInterpreter

from .environment_providers import RunModeProvider, package_version

LOGGER = logging.getLogger(__name__)


class AecuService:
    """Entry point for discovering, executing and recording upgrade scripts.

    Each public operation opens its own repository session, commits at most once and closes
    the session on every exit path. Failures are raised as `AecuError`.
    """

    def __init__(
        self,
        repository: ContentRepository,
        run_mode_provider: RunModeProvider,
        interpreter: ScriptInterpreter,
        *,
        history_manager: HistoryManager | None = None,
        version_provider: Callable[[], str] | None = None,
    ) -> None:
        self._repository = repository
        self._run_mode_provider = run_mode_provider
        self._executor = ScriptExecutor(interpreter)
        self._history_manager = history_manager or HistoryManager()
        self._version_provider = version_provider or package_version

    def get_version(self) -> str:
        return self._version_provider()

    def get_files(self, path: str | None) -> list[str]:
        """List the scripts below `path` that apply to the active run modes, in run order."""
        run_modes = self._run_mode_provider.active_run_modes()
        with self._session() as session:
            return find_candidates(session, path, run_modes)

    def execute(self, path: str | None) -> ExecutionResult:
        """Execute one script, including its fallback when the script fails."""
        with self._session() as session:
            result = self._executor.execute(session, path)
            session.commit()
            return result

    def create_history_entry(self) -> HistoryEntry:
        with self._session() as session:
            return self._history_manager.create_history_entry(session)

    def store_execution_in_history(
        self, entry: HistoryEntry | None, result: ExecutionResult
    ) -> HistoryEntry:
        with self._session() as session:
            return self._history_manager.store_execution_in_history(session, entry, result)

    def finish_history_entry(self, entry: HistoryEntry | None) -> HistoryEntry:
        with self._session() as session:
            return self._history_manager.finish_history_entry(session, entry)

    def get_history(self, start_index: int, count: int) -> list[HistoryEntry]:
        with self._session() as session:
            return self._history_manager.get_history(session, start_index, count)

    def get_history_entry(self, path: str) -> HistoryEntry:
        with self._session() as session:
            return self._history_manager.read_history_entry(session, path)

    def run(self, path: str | None) -> HistoryEntry:
        """Execute every script below `path` in order and record the batch in the history.

        A hard error stops the batch; the history entry is still finished before the error
        is re-raised.
        """
        scripts = self.get_files(path)
        entry = self.create_history_entry()
        LOGGER.info("Running %d script(s) below %s", len(scripts), path)
        try:
            for script in scripts:
                entry = self.store_execution_in_history(entry, self.execute(script))
        except Exception:
            LOGGER.error("Batch below %s aborted after %d script(s)", path, len(entry.results))
            self.finish_history_entry(entry)
            raise
        return self.finish_history_entry(entry)

    @contextmanager
    def _session(self) -> Iterator[RepositorySession]:
        try:
            session = self._repository.login()
        except LoginFailure as exc:
            raise AecuError(f"Unable to open repository session: {exc}") from exc
        with session:
            try:
                yield session
            except PersistenceFailure as exc:
                raise AecuError(str(exc)) from exc
