"""History reporting exports."""

from .history_report_writer import (
    HISTORY_COLUMNS,
    HISTORY_SHEET_NAME,
    RESULTS_COLUMNS,
    RESULTS_SHEET_NAME,
    write_history_workbook,
)

__all__ = [
    "HISTORY_COLUMNS",
    "HISTORY_SHEET_NAME",
    "RESULTS_COLUMNS",
    "RESULTS_SHEET_NAME",
    "write_history_workbook",
]
