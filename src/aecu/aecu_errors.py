"""Errors surfaced to callers of the upgrade service."""

from __future__ import annotations


class AecuError(Exception):
    """Raised when an upgrade operation cannot be completed."""


class InvalidPathError(AecuError):
    """Raised when a repository path is missing or does not resolve."""


class InvalidScriptNameError(AecuError):
    """Raised when a path does not name an executable upgrade script."""


class InvalidHistoryStateError(AecuError):
    """Raised when a history entry is not in a state that allows the requested change."""
