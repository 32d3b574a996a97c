"""History workbook writer service."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import get_column_letter

from aecu.execution_history.history_models import HistoryEntry
from aecu.script_execution.execution_outcomes import ExecutionResult

HISTORY_SHEET_NAME = "History"
RESULTS_SHEET_NAME = "Results"

HISTORY_COLUMNS = ("Entry", "State", "Outcome", "Start", "End", "Duration (ms)", "Scripts")
RESULTS_COLUMNS = ("Entry", "#", "Script", "Fallback", "Success", "Time (ms)", "Result", "Output")

_MAX_COLUMN_WIDTH = 80


def write_history_workbook(entries: Sequence[HistoryEntry], output_path: Path | str) -> Path:
    """Write one row per history entry and one row per recorded script run."""
    workbook = Workbook()
    history_sheet = workbook.active
    history_sheet.title = HISTORY_SHEET_NAME
    results_sheet = workbook.create_sheet(RESULTS_SHEET_NAME)

    _write_header(history_sheet, HISTORY_COLUMNS)
    _write_header(results_sheet, RESULTS_COLUMNS)

    for entry in entries:
        history_sheet.append(
            [
                entry.path,
                entry.state.value,
                entry.outcome.value,
                entry.start.isoformat(),
                entry.end.isoformat() if entry.end else None,
                entry.duration_ms,
                len(entry.results),
            ]
        )
        for index, result in enumerate(entry.results, start=1):
            results_sheet.append(_result_row(entry.path, index, result, is_fallback=False))
            if result.fallback is not None:
                results_sheet.append(
                    _result_row(entry.path, index, result.fallback, is_fallback=True)
                )

    _fit_columns(history_sheet)
    _fit_columns(results_sheet)

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output)
    return output.resolve()


def _result_row(
    entry_path: str, index: int, result: ExecutionResult, *, is_fallback: bool
) -> list[object]:
    return [
        entry_path,
        index,
        result.path,
        "yes" if is_fallback else "no",
        "OK" if result.success else "FAILED",
        result.elapsed_ms,
        _cell_text(result.result),
        _cell_text(result.output),
    ]


def _cell_text(text: str) -> str:
    # Worksheets reject most control characters, e.g. ANSI colour escapes.
    return ILLEGAL_CHARACTERS_RE.sub("", text)


def _write_header(sheet, columns: Sequence[str]) -> None:
    for column, label in enumerate(columns, start=1):
        sheet.cell(row=1, column=column, value=label)
        sheet.cell(row=1, column=column).style = "Headline 1"
    sheet.freeze_panes = "A2"


def _fit_columns(sheet) -> None:
    for column_cells in sheet.iter_cols(min_row=1, max_row=sheet.max_row):
        longest = max(len(str(cell.value)) for cell in column_cells if cell.value is not None)
        letter = get_column_letter(column_cells[0].column)
        sheet.column_dimensions[letter].width = max(10, min(longest + 2, _MAX_COLUMN_WIDTH))
