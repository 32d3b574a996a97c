"""Node classification and name rules for upgrade script discovery."""

from __future__ import annotations

from collections.abc import Set

from aecu.content_repository.repository_contracts import (
    NT_FOLDER,
    SLING_FOLDER,
    SLING_ORDERED_FOLDER,
    ContentNode,
)

SCRIPT_EXTENSION = ".groovy"
FALLBACK_MARKER = ".fallback."

FOLDER_TYPES = frozenset({SLING_FOLDER, SLING_ORDERED_FOLDER, NT_FOLDER})

RUN_MODE_SEPARATOR = "."
COMBINATION_SEPARATOR = ";"


def is_folder(node: ContentNode) -> bool:
    """Return True for plain, ordered and generic folder nodes."""
    return node.primary_type in FOLDER_TYPES


def matches_run_modes(name: str, active_run_modes: Set[str]) -> bool:
    """Check a folder name's run-mode suffix against the active run modes.

    `scripts.author;publish.dev` matches when `author` is active, or when both `publish` and
    `dev` are active. Names without a `.` always match.
    """
    if RUN_MODE_SEPARATOR not in name:
        return True
    suffix = name.split(RUN_MODE_SEPARATOR, 1)[1]
    for combination in suffix.split(COMBINATION_SEPARATOR):
        required_modes = combination.split(RUN_MODE_SEPARATOR)
        if any(not mode for mode in required_modes):
            continue
        if all(mode in active_run_modes for mode in required_modes):
            return True
    return False


def is_valid_script_name(name: str) -> bool:
    """Return True for `*.groovy` names that are not fallback scripts."""
    if not name.endswith(SCRIPT_EXTENSION):
        return False
    return FALLBACK_MARKER not in name
