"""Tests for single script execution with fallbacks."""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest
from aecu.aecu_errors import InvalidPathError, InvalidScriptNameError
from aecu.content_repository import InMemoryContentRepository, RepositorySession
from aecu.script_execution import ExecutionResult, InterpreterOutcome, ScriptExecutor


class _FakeInterpreter:  # pylint: disable=too-few-public-methods
    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.calls: list[str] = []

    def run(self, session: RepositorySession, path: str) -> InterpreterOutcome:
        self.calls.append(path)
        if path in self.failing:
            return InterpreterOutcome(
                result="",
                output=f"running {path}\n",
                exception_trace=f"boom in {path}",
                elapsed_ms=7,
            )
        return InterpreterOutcome(
            result="done", output=f"running {path}\n", exception_trace=None, elapsed_ms=5
        )


def _repository() -> InMemoryContentRepository:
    repository = InMemoryContentRepository()
    repository.add_file("/scripts/migrate.groovy")
    repository.add_file("/scripts/migrate.fallback.groovy")
    repository.add_file("/scripts/plain.groovy")
    return repository


def test_successful_script_has_no_fallback() -> None:
    interpreter = _FakeInterpreter()
    with _repository().login() as session:
        result = ScriptExecutor(interpreter).execute(session, "/scripts/migrate.groovy")

    assert result == ExecutionResult(
        path="/scripts/migrate.groovy",
        success=True,
        elapsed_ms=5,
        result="done",
        output="running /scripts/migrate.groovy\n",
    )
    assert interpreter.calls == ["/scripts/migrate.groovy"]


def test_failed_script_runs_its_fallback() -> None:
    interpreter = _FakeInterpreter(failing={"/scripts/migrate.groovy"})
    with _repository().login() as session:
        result = ScriptExecutor(interpreter).execute(session, "/scripts/migrate.groovy")

    assert result.success is False
    assert result.output == "running /scripts/migrate.groovy\nboom in /scripts/migrate.groovy"
    assert result.fallback is not None
    assert result.fallback.path == "/scripts/migrate.fallback.groovy"
    assert result.fallback.success is True
    assert result.fallback.fallback is None
    assert result.recovered is True
    assert interpreter.calls == ["/scripts/migrate.groovy", "/scripts/migrate.fallback.groovy"]


def test_failed_fallback_is_reported_without_further_fallbacks() -> None:
    interpreter = _FakeInterpreter(
        failing={"/scripts/migrate.groovy", "/scripts/migrate.fallback.groovy"}
    )
    with _repository().login() as session:
        result = ScriptExecutor(interpreter).execute(session, "/scripts/migrate.groovy")

    assert result.success is False
    assert result.fallback is not None
    assert result.fallback.success is False
    assert result.fallback.fallback is None
    assert result.recovered is False


def test_failed_script_without_fallback() -> None:
    interpreter = _FakeInterpreter(failing={"/scripts/plain.groovy"})
    with _repository().login() as session:
        result = ScriptExecutor(interpreter).execute(session, "/scripts/plain.groovy")

    assert result.success is False
    assert result.fallback is None


def test_blank_exception_trace_counts_as_success() -> None:
    class _BlankTraceInterpreter:  # pylint: disable=too-few-public-methods
        def run(self, session: RepositorySession, path: str) -> InterpreterOutcome:
            return InterpreterOutcome(result="", output="", exception_trace="  \n", elapsed_ms=1)

    with _repository().login() as session:
        result = ScriptExecutor(_BlankTraceInterpreter()).execute(session, "/scripts/plain.groovy")

    assert result.success is True


def test_rejects_invalid_script_names() -> None:
    executor = ScriptExecutor(_FakeInterpreter())
    with _repository().login() as session:
        with pytest.raises(InvalidScriptNameError):
            executor.execute(session, "/scripts/migrate.fallback.groovy")
        with pytest.raises(InvalidScriptNameError):
            executor.execute(session, "/scripts")


def test_rejects_missing_scripts() -> None:
    executor = ScriptExecutor(_FakeInterpreter())
    with _repository().login() as session:
        with pytest.raises(InvalidPathError):
            executor.execute(session, "/scripts/missing.groovy")
        with pytest.raises(InvalidPathError):
            executor.execute(session, "")


def test_execution_result_is_immutable_and_limits_fallback_depth() -> None:
    inner = ExecutionResult(
        path="/a.fallback.groovy", success=True, elapsed_ms=1, result="", output=""
    )
    nested = ExecutionResult(
        path="/a.groovy", success=False, elapsed_ms=1, result="", output="", fallback=inner
    )

    with pytest.raises(FrozenInstanceError):
        nested.success = True  # type: ignore[misc]
    with pytest.raises(ValueError):
        ExecutionResult(
            path="/b.groovy", success=False, elapsed_ms=1, result="", output="", fallback=nested
        )
