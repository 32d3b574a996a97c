"""Content repository backed by a directory tree."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .repository_contracts import (
    NT_FILE,
    PRIMARY_TYPE_PROPERTY,
    SLING_FOLDER,
    LoginFailure,
    PersistenceFailure,
)
from .repository_paths import path_segments
from .staged_session import StagedRepositorySession, StoredNode

LOGGER = logging.getLogger(__name__)

PROPERTIES_FILENAME = ".content.yaml"


class FileSystemContentRepository:
    """Map repository paths onto files and directories below `root`.

    Directories are folders unless their `.content.yaml` sidecar declares another
    `jcr:primaryType`; regular files are `nt:file` leaves. Hidden entries are not part of
    the tree and children are listed in name order.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def login(self) -> StagedRepositorySession:
        if not self._root.is_dir():
            raise LoginFailure(f"Repository root is not a directory: {self._root}")
        return StagedRepositorySession(self)

    def load(self, path: str) -> StoredNode | None:
        location = self._location(path)
        if location is None or not location.exists():
            return None
        if location.is_file():
            return StoredNode(primary_type=NT_FILE)
        properties = _read_properties(location / PROPERTIES_FILENAME)
        primary_type = str(properties.pop(PRIMARY_TYPE_PROPERTY, SLING_FOLDER))
        try:
            entries = [entry.name for entry in location.iterdir()]
        except OSError as exc:
            raise PersistenceFailure(f"Failed to list node {path}: {exc}") from exc
        children = sorted(name for name in entries if not _is_hidden(name))
        return StoredNode(primary_type=primary_type, properties=properties, child_names=children)

    def load_text(self, path: str) -> str | None:
        location = self._location(path)
        if location is None or not location.is_file():
            return None
        try:
            return location.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceFailure(f"Failed to read node {path}: {exc}") from exc

    def apply(self, changes: Mapping[str, StoredNode]) -> None:
        for path in sorted(changes, key=lambda item: len(path_segments(item))):
            stored = changes[path]
            location = self._location(path)
            if location is None:
                raise PersistenceFailure(f"Path cannot be stored: {path}")
            if location.is_file():
                raise PersistenceFailure(f"Cannot store properties on a file node: {path}")
            document = {PRIMARY_TYPE_PROPERTY: stored.primary_type, **stored.properties}
            try:
                location.mkdir(parents=True, exist_ok=True)
                (location / PROPERTIES_FILENAME).write_text(
                    yaml.safe_dump(document, sort_keys=False, allow_unicode=True),
                    encoding="utf-8",
                )
            except OSError as exc:
                raise PersistenceFailure(f"Failed to write node {path}: {exc}") from exc
            LOGGER.debug("Wrote node %s to %s", path, location)

    def _location(self, path: str) -> Path | None:
        segments = path_segments(path)
        if any(_is_hidden(segment) for segment in segments):
            return None
        return self._root.joinpath(*segments)


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _read_properties(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise PersistenceFailure(f"Failed to read node properties {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise PersistenceFailure(f"Failed to parse node properties {path}: {exc}") from exc
    if parsed is None:
        return {}
    if not isinstance(parsed, Mapping):
        raise PersistenceFailure(f"Node properties must be a mapping: {path}")
    return dict(parsed)
