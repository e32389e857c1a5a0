"""The single-owner working document and structured path navigation.

A WorkingDocument is created from a template snapshot, mutated by one
pipeline stage at a time, then frozen before it is handed to the renderer
client. Paths are tuples of keys (str) and list indices (int); a numeric
string segment is treated as an index.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import Any

PathSegment = str | int
DocPath = tuple[PathSegment, ...]

SUMMARY_CONTENT_PATH: DocPath = ("data", "summary", "content")


class DocumentFrozenError(RuntimeError):
    """Raised when a frozen WorkingDocument is mutated."""


def is_index(segment: PathSegment | None) -> bool:
    """Whether a path segment addresses a list element."""
    if isinstance(segment, bool):
        return False
    if isinstance(segment, int):
        return True
    return isinstance(segment, str) and segment.isdigit()


def normalize_path(path: Iterable[PathSegment]) -> DocPath:
    """Convert numeric string segments to ints."""
    return tuple(
        int(segment) if isinstance(segment, str) and segment.isdigit() else segment
        for segment in path
    )


def get_path(root: Any, path: Iterable[PathSegment], default: Any = None) -> Any:
    """Read the value at path, or default if any segment is missing."""
    current = root
    for segment in normalize_path(path):
        if isinstance(current, dict) and not isinstance(segment, int):
            if segment not in current:
                return default
            current = current[segment]
        elif isinstance(current, list) and isinstance(segment, int):
            if segment >= len(current):
                return default
            current = current[segment]
        else:
            return default
    return current


def ensure_parent(root: dict, path: Iterable[PathSegment]) -> Any:
    """Return the container holding the last segment of path, creating it.

    Missing or non-container intermediates are replaced by a list when the
    following segment is an index, otherwise by a dict. Lists are padded
    with empty containers up to the requested index.

    Returns:
        The parent container, or None if a segment cannot address it (a key
        on a list, or an index on a dict).
    """
    segments = normalize_path(path)
    current: Any = root
    for position, segment in enumerate(segments[:-1]):
        following = segments[position + 1]
        wanted: type = list if isinstance(following, int) else dict

        if isinstance(segment, int):
            if not isinstance(current, list):
                return None
            while len(current) <= segment:
                current.append(wanted())
            if not isinstance(current[segment], wanted):
                current[segment] = wanted()
            current = current[segment]
        else:
            if not isinstance(current, dict):
                return None
            if not isinstance(current.get(segment), wanted):
                current[segment] = wanted()
            current = current[segment]
    return current


def set_path(root: dict, path: Iterable[PathSegment], value: Any) -> bool:
    """Write value at path, creating intermediate containers.

    Returns:
        True if the value was written.
    """
    segments = normalize_path(path)
    if not segments:
        return False
    parent = ensure_parent(root, segments)
    leaf = segments[-1]
    if isinstance(parent, dict) and not isinstance(leaf, int):
        parent[leaf] = value
        return True
    if isinstance(parent, list) and isinstance(leaf, int):
        while len(parent) <= leaf:
            parent.append(None)
        parent[leaf] = value
        return True
    return False


class WorkingDocument:
    """Mutable document tree owned by exactly one pipeline invocation.

    Attributes:
        protected: Paths whose text may only be whitespace-collapsed.
    """

    def __init__(
        self,
        root: dict,
        protected: Iterable[Iterable[PathSegment]] = (SUMMARY_CONTENT_PATH,),
    ):
        """Wrap a document tree.

        Args:
            root: Document tree. Ownership passes to the WorkingDocument.
            protected: Initial protected-verbatim paths.
        """
        self._root = root
        self._frozen = False
        self.protected: set[DocPath] = {normalize_path(p) for p in protected}

    @property
    def root(self) -> dict:
        """The mutable tree.

        Raises:
            DocumentFrozenError: If the document has been frozen.
        """
        self.require_mutable()
        return self._root

    @property
    def data(self) -> dict:
        """The mutable ``data`` subtree, created if missing."""
        root = self.root
        if not isinstance(root.get("data"), dict):
            root["data"] = {}
        return root["data"]

    @property
    def frozen(self) -> bool:
        return self._frozen

    def require_mutable(self) -> None:
        if self._frozen:
            raise DocumentFrozenError("WorkingDocument is frozen and cannot be modified")

    def get(self, path: Iterable[PathSegment], default: Any = None) -> Any:
        """Read a value; frozen documents return a copy."""
        value = get_path(self._root, path, default)
        return copy.deepcopy(value) if self._frozen else value

    def set(self, path: Iterable[PathSegment], value: Any) -> bool:
        """Write a value, creating intermediate containers."""
        return set_path(self.root, path, value)

    def protect(self, path: Iterable[PathSegment]) -> None:
        """Mark a field as protected-verbatim."""
        self.require_mutable()
        self.protected.add(normalize_path(path))

    def is_protected(self, path: Iterable[PathSegment]) -> bool:
        return normalize_path(path) in self.protected

    def freeze(self) -> WorkingDocument:
        """Make the document read-only and return it."""
        self._frozen = True
        return self

    def copy(self) -> WorkingDocument:
        """An unfrozen deep copy with the same protected fields."""
        return WorkingDocument(copy.deepcopy(self._root), protected=self.protected)

    def to_payload(self) -> dict:
        """A deep copy of the tree, safe to serialize or hand to a caller."""
        return copy.deepcopy(self._root)
