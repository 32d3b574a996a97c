"""Execution history entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from aecu.script_execution.execution_outcomes import ExecutionResult


class HistoryState(str, Enum):
    """Lifecycle state of a history entry."""

    RUNNING = "running"
    FINISHED = "finished"


class HistoryOutcome(str, Enum):
    """Overall result of the scripts recorded in a history entry."""

    SUCCESS = "success"
    FAILURE = "failure"
    UNKNOWN = "unknown"


@dataclass
class HistoryEntry:
    """Record of one batch run; results are only ever appended."""

    path: str
    state: HistoryState
    start: datetime
    end: datetime | None = None
    results: list[ExecutionResult] = field(default_factory=list)

    @property
    def outcome(self) -> HistoryOutcome:
        if not self.results:
            return HistoryOutcome.UNKNOWN
        if all(result.success for result in self.results):
            return HistoryOutcome.SUCCESS
        return HistoryOutcome.FAILURE

    @property
    def duration_ms(self) -> int | None:
        if self.end is None:
            return None
        return int((self.end - self.start).total_seconds() * 1000)
