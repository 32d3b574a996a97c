"""Persistence of execution history entries in the content repository."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from typing import Any

from aecu.aecu_errors import AecuError, InvalidHistoryStateError, InvalidPathError
from aecu.content_repository.repository_contracts import (
    NT_UNSTRUCTURED,
    SLING_ORDERED_FOLDER,
    ContentNode,
    PersistenceFailure,
    RepositorySession,
)
from aecu.content_repository.repository_paths import join_path, normalize_path
from aecu.content_repository.staged_session import ensure_folder
from aecu.script_execution.execution_outcomes import ExecutionResult

from .history_models import HistoryEntry, HistoryState

LOGGER = logging.getLogger(__name__)

DEFAULT_HISTORY_ROOT = "/var/aecu"

STATE_PROPERTY = "state"
START_PROPERTY = "start"
END_PROPERTY = "end"
PATH_PROPERTY = "path"
SUCCESS_PROPERTY = "success"
ELAPSED_PROPERTY = "elapsed_ms"
RESULT_PROPERTY = "result"
OUTPUT_PROPERTY = "output"
FALLBACK_NODE_NAME = "fallback"

# year / month / day folders above the entry nodes
_DATE_FOLDER_DEPTH = 3


class HistoryManager:
    """Create, extend, finish and read history entries below `history_root`.

    Entries live at `<history_root>/<yyyy>/<MM>/<dd>/<HHMMSSffffff>`; each stored result is a
    numbered child node with an optional `fallback` child of the same shape. Every write
    operation commits the session it is given exactly once.
    """

    def __init__(
        self,
        history_root: str = DEFAULT_HISTORY_ROOT,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._history_root = normalize_path(history_root)
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def history_root(self) -> str:
        return self._history_root

    def create_history_entry(self, session: RepositorySession) -> HistoryEntry:
        start = self._clock()
        day_folder = join_path(self._history_root, f"{start:%Y}/{start:%m}/{start:%d}")
        try:
            ensure_folder(session, day_folder, SLING_ORDERED_FOLDER)
            node = session.add_node(
                day_folder,
                _unique_entry_name(session, day_folder, start),
                NT_UNSTRUCTURED,
                {STATE_PROPERTY: HistoryState.RUNNING.value, START_PROPERTY: start.isoformat()},
            )
            session.commit()
        except PersistenceFailure as exc:
            raise AecuError(f"Unable to create history entry: {exc}") from exc
        LOGGER.info("Created history entry %s", node.path)
        return HistoryEntry(path=node.path, state=HistoryState.RUNNING, start=start)

    def store_execution_in_history(
        self,
        session: RepositorySession,
        entry: HistoryEntry | None,
        result: ExecutionResult,
    ) -> HistoryEntry:
        """Append `result` to a running entry and persist it.

        Raises:
          InvalidHistoryStateError: If `entry` is missing or no longer running; the entry is
            left unchanged.
        """
        if entry is None:
            raise InvalidHistoryStateError("History entry is missing.")
        if entry.state is not HistoryState.RUNNING:
            raise InvalidHistoryStateError(
                f"History entry {entry.path} is {entry.state.value}, expected running."
            )
        try:
            _write_result(session, entry.path, str(len(entry.results) + 1), result)
            session.commit()
        except PersistenceFailure as exc:
            raise AecuError(f"Unable to store execution result: {exc}") from exc
        entry.results.append(result)
        return entry

    def finish_history_entry(
        self, session: RepositorySession, entry: HistoryEntry | None
    ) -> HistoryEntry:
        """Mark a running entry as finished.

        Must be called exactly once per run; finishing an entry that is not running raises
        `InvalidHistoryStateError`.
        """
        if entry is None:
            raise InvalidHistoryStateError("History entry is missing.")
        if entry.state is not HistoryState.RUNNING:
            raise InvalidHistoryStateError(f"History entry {entry.path} is already finished.")
        end = self._clock()
        try:
            session.set_properties(
                entry.path,
                {STATE_PROPERTY: HistoryState.FINISHED.value, END_PROPERTY: end.isoformat()},
            )
            session.commit()
        except PersistenceFailure as exc:
            raise AecuError(f"Unable to finish history entry: {exc}") from exc
        entry.state = HistoryState.FINISHED
        entry.end = end
        LOGGER.info("Finished history entry %s with %d result(s)", entry.path, len(entry.results))
        return entry

    def get_history(
        self, session: RepositorySession, start_index: int, count: int
    ) -> list[HistoryEntry]:
        """Return up to `count` entries, newest first, skipping the first `start_index`."""
        if start_index < 0 or count < 0:
            raise AecuError("History paging arguments must not be negative.")
        nodes = itertools.islice(self._iter_entry_nodes(session), start_index, start_index + count)
        return [_read_entry(session, node) for node in nodes]

    def read_history_entry(self, session: RepositorySession, path: str) -> HistoryEntry:
        node = session.resolve(path)
        if node is None:
            raise InvalidPathError(f"History entry not found: {path}")
        return _read_entry(session, node)

    def _iter_entry_nodes(self, session: RepositorySession) -> Iterator[ContentNode]:
        root = session.resolve(self._history_root)
        if root is None:
            return
        yield from _iter_descending(session, root, _DATE_FOLDER_DEPTH)


def _iter_descending(
    session: RepositorySession, node: ContentNode, depth: int
) -> Iterator[ContentNode]:
    children = sorted(session.list_children(node), key=lambda child: child.name, reverse=True)
    for child in children:
        if depth == 0:
            yield child
        else:
            yield from _iter_descending(session, child, depth - 1)


def _unique_entry_name(session: RepositorySession, day_folder: str, start: datetime) -> str:
    base_name = f"{start:%H%M%S%f}"
    name = base_name
    for suffix in itertools.count(1):
        if session.resolve(join_path(day_folder, name)) is None:
            break
        name = f"{base_name}-{suffix}"
    return name


def _write_result(
    session: RepositorySession, parent: str, name: str, result: ExecutionResult
) -> None:
    node = session.add_node(
        parent,
        name,
        NT_UNSTRUCTURED,
        {
            PATH_PROPERTY: result.path,
            SUCCESS_PROPERTY: result.success,
            ELAPSED_PROPERTY: result.elapsed_ms,
            RESULT_PROPERTY: result.result,
            OUTPUT_PROPERTY: result.output,
        },
    )
    if result.fallback is not None:
        _write_result(session, node.path, FALLBACK_NODE_NAME, result.fallback)


def _read_entry(session: RepositorySession, node: ContentNode) -> HistoryEntry:
    try:
        state = HistoryState(session.get_property(node, STATE_PROPERTY))
    except ValueError as exc:
        raise AecuError(f"History entry {node.path} has an unknown state.") from exc
    start = _parse_timestamp(session.get_property(node, START_PROPERTY), node.path)
    end_value = session.get_property(node, END_PROPERTY)
    result_nodes = sorted(
        (child for child in session.list_children(node) if child.name.isdigit()),
        key=lambda child: int(child.name),
    )
    return HistoryEntry(
        path=node.path,
        state=state,
        start=start,
        end=_parse_timestamp(end_value, node.path) if end_value is not None else None,
        results=[_read_result(session, child, allow_fallback=True) for child in result_nodes],
    )


def _read_result(
    session: RepositorySession, node: ContentNode, *, allow_fallback: bool
) -> ExecutionResult:
    fallback = None
    if allow_fallback:
        fallback_node = session.resolve(join_path(node.path, FALLBACK_NODE_NAME))
        if fallback_node is not None:
            fallback = _read_result(session, fallback_node, allow_fallback=False)
    return ExecutionResult(
        path=str(session.get_property(node, PATH_PROPERTY, "")),
        success=bool(session.get_property(node, SUCCESS_PROPERTY, False)),
        elapsed_ms=int(session.get_property(node, ELAPSED_PROPERTY, 0)),
        result=str(session.get_property(node, RESULT_PROPERTY, "")),
        output=str(session.get_property(node, OUTPUT_PROPERTY, "")),
        fallback=fallback,
    )


def _parse_timestamp(value: Any, path: str) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError as exc:
            raise AecuError(f"History entry {path} has an invalid timestamp: {value!r}") from exc
    raise AecuError(f"History entry {path} has an invalid timestamp: {value!r}")
