"""Execution history exports."""

from .history_manager import DEFAULT_HISTORY_ROOT, HistoryManager
from .history_models import HistoryEntry, HistoryOutcome, HistoryState

__all__ = [
    "DEFAULT_HISTORY_ROOT",
    "HistoryEntry",
    "HistoryManager",
    "HistoryOutcome",
    "HistoryState",
]
