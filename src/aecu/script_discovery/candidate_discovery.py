"""Recursive discovery of upgrade scripts."""

from __future__ import annotations

import logging
from collections.abc import Set

from aecu.aecu_errors import InvalidPathError
from aecu.content_repository.repository_contracts import ContentNode, RepositorySession

from .path_resolution import is_folder, is_valid_script_name, matches_run_modes

LOGGER = logging.getLogger(__name__)


def find_candidates(
    session: RepositorySession, path: str | None, active_run_modes: Set[str]
) -> list[str]:
    """Return the paths of all scripts below `path` that apply to the active run modes.

    Folders are walked depth first in the repository's child order, which is also the
    execution order. Folders whose run-mode suffix does not match are skipped together with
    everything below them; nodes that are neither folders nor scripts are ignored.
    """
    if path is None or not path.strip():
        raise InvalidPathError("Path is empty.")
    node = session.resolve(path)
    if node is None:
        raise InvalidPathError(f"Path is invalid: {path}")
    candidates: list[str] = []
    _collect_candidates(session, node, active_run_modes, candidates)
    LOGGER.debug("Found %d script candidate(s) below %s", len(candidates), node.path)
    return candidates


def _collect_candidates(
    session: RepositorySession,
    node: ContentNode,
    active_run_modes: Set[str],
    candidates: list[str],
) -> None:
    if is_folder(node) and matches_run_modes(node.name, active_run_modes):
        for child in session.list_children(node):
            _collect_candidates(session, child, active_run_modes, candidates)
    elif is_valid_script_name(node.name):
        candidates.append(node.path)
