"""Repository session that stages writes until commit."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Protocol

from .repository_contracts import (
    PRIMARY_TYPE_PROPERTY,
    ContentNode,
    PersistenceFailure,
    RepositorySession,
)
from .repository_paths import join_path, node_name, normalize_path, parent_path

LOGGER = logging.getLogger(__name__)


@dataclass
class StoredNode:
    """Storage record behind one repository node."""

    primary_type: str
    properties: dict[str, Any] = field(default_factory=dict)
    child_names: list[str] = field(default_factory=list)

    def copy(self) -> StoredNode:
        return replace(self, properties=dict(self.properties), child_names=list(self.child_names))


class NodeStore(Protocol):
    """Backing storage used by staged sessions."""

    def load(self, path: str) -> StoredNode | None: ...

    def load_text(self, path: str) -> str | None: ...

    def apply(self, changes: Mapping[str, StoredNode]) -> None: ...


class StagedRepositorySession:
    """Session reading through to a node store and publishing staged writes on commit."""

    def __init__(self, store: NodeStore, *, on_close: Callable[[], None] | None = None) -> None:
        self._store = store
        self._on_close = on_close
        self._changes: dict[str, StoredNode] = {}
        self._closed = False

    def __enter__(self) -> StagedRepositorySession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def has_pending_changes(self) -> bool:
        return bool(self._changes)

    def resolve(self, path: str) -> ContentNode | None:
        self._ensure_open()
        normalized = normalize_path(path)
        stored = self._lookup(normalized)
        if stored is None:
            return None
        return _to_content_node(normalized, stored)

    def list_children(self, node: ContentNode) -> list[ContentNode]:
        self._ensure_open()
        stored = self._lookup(node.path)
        if stored is None:
            return []
        children = []
        for name in stored.child_names:
            child = self.resolve(join_path(node.path, name))
            if child is not None:
                children.append(child)
        return children

    def get_property(self, node: ContentNode, key: str, default: Any = None) -> Any:
        if key == PRIMARY_TYPE_PROPERTY:
            return node.primary_type
        return node.properties.get(key, default)

    def read_text(self, node: ContentNode) -> str:
        self._ensure_open()
        text = self._store.load_text(node.path)
        if text is None:
            raise PersistenceFailure(f"Node has no text content: {node.path}")
        return text

    def add_node(
        self,
        parent_path: str,
        name: str,
        primary_type: str,
        properties: Mapping[str, Any] | None = None,
    ) -> ContentNode:
        self._ensure_open()
        parent = normalize_path(parent_path)
        path = join_path(parent, name)
        if not name or "/" in name:
            raise PersistenceFailure(f"Invalid node name: {name!r}")
        parent_node = self._lookup(parent)
        if parent_node is None:
            raise PersistenceFailure(f"Parent node not found: {parent}")
        if name in parent_node.child_names:
            raise PersistenceFailure(f"Node already exists: {path}")
        staged_parent = self._stage(parent, parent_node)
        staged_parent.child_names.append(name)
        created = StoredNode(primary_type=primary_type, properties=dict(properties or {}))
        self._changes[path] = created
        LOGGER.debug("Staged new node %s (%s)", path, primary_type)
        return _to_content_node(path, created)

    def set_properties(self, path: str, properties: Mapping[str, Any]) -> ContentNode:
        self._ensure_open()
        normalized = normalize_path(path)
        stored = self._lookup(normalized)
        if stored is None:
            raise PersistenceFailure(f"Node not found: {normalized}")
        staged = self._stage(normalized, stored)
        staged.properties.update(properties)
        return _to_content_node(normalized, staged)

    def commit(self) -> None:
        self._ensure_open()
        if not self._changes:
            return
        changes = dict(self._changes)
        self._store.apply(changes)
        self._changes.clear()
        LOGGER.debug("Committed %d staged node(s)", len(changes))

    def close(self) -> None:
        if self._closed:
            return
        if self._changes:
            LOGGER.debug("Discarding %d uncommitted node change(s)", len(self._changes))
        self._changes.clear()
        self._closed = True
        if self._on_close is not None:
            self._on_close()

    def _lookup(self, path: str) -> StoredNode | None:
        staged = self._changes.get(path)
        if staged is not None:
            return staged
        return self._store.load(path)

    def _stage(self, path: str, stored: StoredNode) -> StoredNode:
        staged = self._changes.get(path)
        if staged is None:
            staged = stored.copy()
            self._changes[path] = staged
        return staged

    def _ensure_open(self) -> None:
        if self._closed:
            raise PersistenceFailure("Repository session is closed.")


def ensure_folder(session: RepositorySession, path: str, primary_type: str) -> ContentNode:
    """Resolve `path`, creating missing folders of `primary_type` along the way."""
    normalized = normalize_path(path)
    existing = session.resolve(normalized)
    if existing is not None:
        return existing
    ensure_folder(session, parent_path(normalized), primary_type)
    return session.add_node(parent_path(normalized), node_name(normalized), primary_type)


def _to_content_node(path: str, stored: StoredNode) -> ContentNode:
    return ContentNode(
        path=path,
        primary_type=stored.primary_type,
        properties=MappingProxyType(dict(stored.properties)),
    )
