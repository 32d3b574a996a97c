"""Content repository collaborator contracts."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from .repository_paths import node_name

PRIMARY_TYPE_PROPERTY = "jcr:primaryType"

NT_FOLDER = "nt:folder"
SLING_FOLDER = "sling:Folder"
SLING_ORDERED_FOLDER = "sling:OrderedFolder"
NT_FILE = "nt:file"
NT_UNSTRUCTURED = "nt:unstructured"
REP_ROOT = "rep:root"


class LoginFailure(Exception):
    """Raised when a repository session cannot be opened."""


class PersistenceFailure(Exception):
    """Raised when staged repository changes cannot be written."""


@dataclass(frozen=True)
class ContentNode:
    """Read-only view of one repository node."""

    path: str
    primary_type: str
    properties: Mapping[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return node_name(self.path)


class RepositorySession(Protocol):
    """Scoped unit of work against a content repository."""

    def resolve(self, path: str) -> ContentNode | None: ...

    def list_children(self, node: ContentNode) -> Sequence[ContentNode]: ...

    def get_property(self, node: ContentNode, key: str, default: Any = None) -> Any: ...

    def read_text(self, node: ContentNode) -> str: ...

    def add_node(
        self,
        parent_path: str,
        name: str,
        primary_type: str,
        properties: Mapping[str, Any] | None = None,
    ) -> ContentNode: ...

    def set_properties(self, path: str, properties: Mapping[str, Any]) -> ContentNode: ...

    def commit(self) -> None: ...

    def close(self) -> None: ...

    def __enter__(self) -> RepositorySession: ...

    def __exit__(self, *exc_info: object) -> None: ...


class ContentRepository(Protocol):  # pylint: disable=too-few-public-methods
    """Factory for repository sessions."""

    def login(self) -> RepositorySession: ...
