"""Tests for the subprocess script interpreter."""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

import pytest
from aecu.aecu_errors import AecuError, InvalidPathError
from aecu.content_repository import InMemoryContentRepository
from aecu.script_execution import SubprocessScriptInterpreter


def _repository() -> InMemoryContentRepository:
    repository = InMemoryContentRepository()
    repository.add_file("/scripts/hello.groovy", text='println "hello"\n')
    return repository


def test_runs_command_with_script_copy_and_captures_output() -> None:
    captured: list[tuple[tuple[str, ...], str]] = []

    def _fake_run(command: Sequence[str]) -> subprocess.CompletedProcess[str]:
        script_file = Path(command[-1])
        captured.append((tuple(command), script_file.read_text(encoding="utf-8")))
        return subprocess.CompletedProcess(list(command), 0, stdout="hello\n", stderr="")

    interpreter = SubprocessScriptInterpreter(("groovy", "-e"), run_command=_fake_run)
    with _repository().login() as session:
        outcome = interpreter.run(session, "/scripts/hello.groovy")

    command, source = captured[0]
    assert command[:2] == ("groovy", "-e")
    assert command[2].endswith("hello.groovy")
    assert source == 'println "hello"\n'
    assert outcome.output == "hello\n"
    assert outcome.exception_trace is None
    assert outcome.result == "exit code 0"
    assert outcome.elapsed_ms >= 0


def test_non_zero_exit_reports_stderr_as_exception_trace() -> None:
    def _fake_run(command: Sequence[str]) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(list(command), 1, stdout="partial\n", stderr="Trace")

    interpreter = SubprocessScriptInterpreter(("groovy",), run_command=_fake_run)
    with _repository().login() as session:
        outcome = interpreter.run(session, "/scripts/hello.groovy")

    assert outcome.output == "partial\n"
    assert outcome.exception_trace == "Trace"


def test_non_zero_exit_without_stderr_still_reports_failure() -> None:
    def _fake_run(command: Sequence[str]) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(list(command), 3, stdout="", stderr="")

    interpreter = SubprocessScriptInterpreter(("groovy",), run_command=_fake_run)
    with _repository().login() as session:
        outcome = interpreter.run(session, "/scripts/hello.groovy")

    assert outcome.exception_trace == "Script exited with code 3"


def test_missing_interpreter_command_is_an_error() -> None:
    def _fake_run(command: Sequence[str]) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError(command[0])

    interpreter = SubprocessScriptInterpreter(("no-such-groovy",), run_command=_fake_run)
    with _repository().login() as session, pytest.raises(AecuError, match="not found"):
        interpreter.run(session, "/scripts/hello.groovy")


def test_unexecutable_interpreter_command_is_an_error() -> None:
    def _fake_run(command: Sequence[str]) -> subprocess.CompletedProcess[str]:
        raise PermissionError(13, "Permission denied", command[0])

    interpreter = SubprocessScriptInterpreter(("/opt/groovy",), run_command=_fake_run)
    with _repository().login() as session, pytest.raises(AecuError, match="Unable to start"):
        interpreter.run(session, "/scripts/hello.groovy")


def test_undecodable_interpreter_output_is_replaced() -> None:
    repository = InMemoryContentRepository()
    repository.add_file(
        "/scripts/binary.groovy",
        text="import sys\nsys.stdout.buffer.write(b\"\\xff done\")\n",
    )

    interpreter = SubprocessScriptInterpreter((sys.executable,))
    with repository.login() as session:
        outcome = interpreter.run(session, "/scripts/binary.groovy")

    assert outcome.exception_trace is None
    assert outcome.output == "\ufffd done"


def test_missing_script_is_an_error() -> None:
    interpreter = SubprocessScriptInterpreter(("groovy",))
    with _repository().login() as session, pytest.raises(InvalidPathError):
        interpreter.run(session, "/scripts/missing.groovy")


def test_empty_command_is_rejected() -> None:
    with pytest.raises(ValueError):
        SubprocessScriptInterpreter(())
