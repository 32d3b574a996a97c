"""Script interpreter collaborator contract and subprocess implementation."""

from __future__ import annotations

import logging
import shlex
import subprocess
import tempfile
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from aecu.aecu_errors import AecuError, InvalidPathError
from aecu.content_repository.repository_contracts import PersistenceFailure, RepositorySession

LOGGER = logging.getLogger(__name__)

CommandRunner = Callable[[Sequence[str]], subprocess.CompletedProcess[str]]


@dataclass(frozen=True)
class InterpreterOutcome:
    """Raw values reported by the interpreter for one script run."""

    result: str
    output: str
    exception_trace: str | None
    elapsed_ms: int


class ScriptInterpreter(Protocol):  # pylint: disable=too-few-public-methods
    """Runs the script stored at a repository path.

    Script errors are reported through `exception_trace`, not raised.
    """

    def run(self, session: RepositorySession, path: str) -> InterpreterOutcome: ...


class SubprocessScriptInterpreter:  # pylint: disable=too-few-public-methods
    """Interpreter running scripts with an external command such as `groovy`."""

    def __init__(
        self,
        command: Sequence[str],
        *,
        run_command: CommandRunner | None = None,
    ) -> None:
        if not command:
            raise ValueError("Interpreter command must not be empty.")
        self._command = tuple(command)
        self._run_command = run_command or _run_captured

    def run(self, session: RepositorySession, path: str) -> InterpreterOutcome:
        node = session.resolve(path)
        if node is None:
            raise InvalidPathError(f"Script not found: {path}")
        try:
            source = session.read_text(node)
        except PersistenceFailure as exc:
            raise AecuError(f"Unable to read script {path}: {exc}") from exc

        with tempfile.TemporaryDirectory(prefix="aecu-") as workdir:
            script_file = Path(workdir) / node.name
            script_file.write_text(source, encoding="utf-8")
            command = (*self._command, str(script_file))
            LOGGER.debug("Running %s", shlex.join(command))
            started = time.monotonic()
            try:
                completed = self._run_command(command)
            except FileNotFoundError as exc:
                raise AecuError(
                    f"Interpreter command not found: {shlex.join(self._command)}"
                ) from exc
            except OSError as exc:
                raise AecuError(
                    f"Unable to start interpreter {shlex.join(self._command)}: {exc}"
                ) from exc
            elapsed_ms = int((time.monotonic() - started) * 1000)

        stdout = completed.stdout or ""
        stderr = completed.stderr or ""
        if completed.returncode == 0:
            return InterpreterOutcome(
                result=f"exit code {completed.returncode}",
                output=stdout + stderr,
                exception_trace=None,
                elapsed_ms=elapsed_ms,
            )
        trace = stderr if stderr.strip() else f"Script exited with code {completed.returncode}"
        return InterpreterOutcome(
            result=f"exit code {completed.returncode}",
            output=stdout,
            exception_trace=trace,
            elapsed_ms=elapsed_ms,
        )


def _run_captured(command: Sequence[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        list(command),
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=False,
    )
