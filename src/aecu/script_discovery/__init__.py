"""Script discovery exports."""

from .candidate_discovery import find_candidates
from .path_resolution import (
    FALLBACK_MARKER,
    SCRIPT_EXTENSION,
    is_folder,
    is_valid_script_name,
    matches_run_modes,
)

__all__ = [
    "FALLBACK_MARKER",
    "SCRIPT_EXTENSION",
    "find_candidates",
    "is_folder",
    "is_valid_script_name",
    "matches_run_modes",
]
