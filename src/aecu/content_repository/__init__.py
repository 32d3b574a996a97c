"""Content repository collaborator exports."""

from .filesystem_repository import FileSystemContentRepository
from .in_memory_repository import InMemoryContentRepository
from .repository_contracts import (
    NT_FILE,
    NT_FOLDER,
    NT_UNSTRUCTURED,
    PRIMARY_TYPE_PROPERTY,
    SLING_FOLDER,
    SLING_ORDERED_FOLDER,
    ContentNode,
    ContentRepository,
    LoginFailure,
    PersistenceFailure,
    RepositorySession,
)
from .repository_paths import join_path, node_name, normalize_path, parent_path
from .staged_session import StagedRepositorySession, ensure_folder

__all__ = [
    "ContentNode",
    "ContentRepository",
    "RepositorySession",
    "LoginFailure",
    "PersistenceFailure",
    "InMemoryContentRepository",
    "FileSystemContentRepository",
    "StagedRepositorySession",
    "ensure_folder",
    "PRIMARY_TYPE_PROPERTY",
    "NT_FILE",
    "NT_FOLDER",
    "NT_UNSTRUCTURED",
    "SLING_FOLDER",
    "SLING_ORDERED_FOLDER",
    "join_path",
    "node_name",
    "normalize_path",
    "parent_path",
]
