"""Helpers for normalized, `/`-separated repository paths."""

from __future__ import annotations

import posixpath

ROOT_PATH = "/"


def normalize_path(path: str) -> str:
    """Return an absolute repository path without duplicate or trailing separators."""
    normalized = posixpath.normpath("/" + path.strip().lstrip("/"))
    # normpath keeps a leading "//" as-is
    return "/" + normalized.lstrip("/")


def node_name(path: str) -> str:
    return posixpath.basename(normalize_path(path))


def parent_path(path: str) -> str:
    return posixpath.dirname(normalize_path(path))


def join_path(parent: str, name: str) -> str:
    return normalize_path(posixpath.join(normalize_path(parent), name))


def path_segments(path: str) -> tuple[str, ...]:
    return tuple(segment for segment in normalize_path(path).split("/") if segment)
