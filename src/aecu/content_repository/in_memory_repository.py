"""Dictionary-backed content repository."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from .repository_contracts import NT_FILE, REP_ROOT, SLING_FOLDER, PersistenceFailure
from .repository_paths import ROOT_PATH, node_name, normalize_path, parent_path
from .staged_session import StagedRepositorySession, StoredNode


class InMemoryContentRepository:
    """Content repository holding its whole tree in memory.

    Children keep insertion order, which is the natural child order seen by discovery.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, StoredNode] = {ROOT_PATH: StoredNode(primary_type=REP_ROOT)}
        self._texts: dict[str, str] = {}
        self._lock = threading.Lock()
        self.commit_count = 0
        self.open_session_count = 0

    def login(self) -> StagedRepositorySession:
        with self._lock:
            self.open_session_count += 1
        return StagedRepositorySession(self, on_close=self._release_session)

    def add_folder(self, path: str, primary_type: str = SLING_FOLDER) -> str:
        """Create a folder, and any missing ancestors, outside of a session."""
        normalized = normalize_path(path)
        with self._lock:
            self._add(normalized, StoredNode(primary_type=primary_type))
        return normalized

    def add_file(self, path: str, text: str = "", primary_type: str = NT_FILE) -> str:
        """Create a leaf node with text content; missing ancestors become folders."""
        normalized = normalize_path(path)
        with self._lock:
            self._add(normalized, StoredNode(primary_type=primary_type))
            self._texts[normalized] = text
        return normalized

    def load(self, path: str) -> StoredNode | None:
        return self._nodes.get(normalize_path(path))

    def load_text(self, path: str) -> str | None:
        return self._texts.get(normalize_path(path))

    def apply(self, changes: Mapping[str, StoredNode]) -> None:
        with self._lock:
            for path, stored in changes.items():
                self._nodes[path] = stored.copy()
            self.commit_count += 1

    def properties_of(self, path: str) -> dict[str, Any]:
        stored = self.load(path)
        if stored is None:
            raise PersistenceFailure(f"Node not found: {path}")
        return dict(stored.properties)

    def _add(self, path: str, stored: StoredNode) -> None:
        if path == ROOT_PATH:
            return
        parent = parent_path(path)
        if parent not in self._nodes:
            self._add(parent, StoredNode(primary_type=SLING_FOLDER))
        siblings = self._nodes[parent].child_names
        name = node_name(path)
        if name not in siblings:
            siblings.append(name)
        self._nodes[path] = stored

    def _release_session(self) -> None:
        with self._lock:
            self.open_session_count -= 1
