"""Lookup of fallback scripts by naming convention."""

from __future__ import annotations

from aecu.content_repository.repository_contracts import RepositorySession
from aecu.content_repository.repository_paths import join_path, node_name, parent_path
from aecu.script_discovery.path_resolution import FALLBACK_MARKER, SCRIPT_EXTENSION


def fallback_script_name(name: str) -> str:
    """Map `migrate.v2.groovy` to `migrate.fallback.groovy`."""
    base_name = name.split(".", 1)[0]
    return f"{base_name}{FALLBACK_MARKER}{SCRIPT_EXTENSION.lstrip('.')}"


def get_fallback_script(session: RepositorySession, path: str) -> str | None:
    """Return the sibling fallback script of `path` if one exists.

    Fallback scripts never have a fallback of their own.
    """
    name = node_name(path)
    if FALLBACK_MARKER in name:
        return None
    candidate = join_path(parent_path(path), fallback_script_name(name))
    if session.resolve(candidate) is None:
        return None
    return candidate
