"""Execution of single upgrade scripts with fallback handling."""

from __future__ import annotations

import logging

from aecu.aecu_errors import InvalidPathError, InvalidScriptNameError
from aecu.content_repository.repository_contracts import RepositorySession
from aecu.content_repository.repository_paths import node_name
from aecu.script_discovery.path_resolution import is_valid_script_name

from .execution_outcomes import ExecutionResult
from .fallback_resolution import get_fallback_script
from .script_interpreter import ScriptInterpreter

LOGGER = logging.getLogger(__name__)


class ScriptExecutor:
    """Runs scripts through an interpreter and falls back to `<name>.fallback.groovy`."""

    def __init__(self, interpreter: ScriptInterpreter) -> None:
        self._interpreter = interpreter

    def execute(self, session: RepositorySession, path: str | None) -> ExecutionResult:
        """Execute the script at `path`.

        Raises:
          InvalidScriptNameError: If `path` does not name a runnable script.
          InvalidPathError: If `path` is empty or does not exist.
        """
        if path is None or not path.strip():
            raise InvalidPathError("Path is empty.")
        if not is_valid_script_name(node_name(path)):
            raise InvalidScriptNameError(f"Invalid script name: {path}")
        node = session.resolve(path)
        if node is None:
            raise InvalidPathError(f"Path is invalid: {path}")
        return self._execute_script(session, node.path)

    def _execute_script(self, session: RepositorySession, path: str) -> ExecutionResult:
        outcome = self._interpreter.run(session, path)
        success = not (outcome.exception_trace or "").strip()
        LOGGER.info(
            "Executed %s in %d ms: %s", path, outcome.elapsed_ms, "ok" if success else "failed"
        )

        fallback = None
        if not success:
            fallback_path = get_fallback_script(session, path)
            if fallback_path is not None:
                LOGGER.info("Running fallback script %s for %s", fallback_path, path)
                fallback = self._execute_script(session, fallback_path)

        return ExecutionResult(
            path=path,
            success=success,
            elapsed_ms=outcome.elapsed_ms,
            result=outcome.result,
            output=(outcome.output or "") + (outcome.exception_trace or ""),
            fallback=fallback,
        )
