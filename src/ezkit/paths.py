"""Read and write values at slash-delimited paths inside nested mappings.

``"/menu/starters/soup"`` addresses ``root["menu"]["starters"]["soup"]``.
Empty segments are ignored, so leading, trailing and repeated slashes are
tolerated. A path without any non-empty segment addresses the ``""`` key.
When reading, a decimal segment also indexes into a list
(``"menu/starters/0"``).
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any, NamedTuple

SEPARATOR = "/"


class PathRef(NamedTuple):
    """The container that received a value and the key it was stored under."""

    parent: MutableMapping[str, Any]
    key: str


@dataclass(frozen=True, slots=True)
class Lookup:
    """Result of :func:`lookup_path`.

    ``found`` tells a stored falsy value (``0``, ``""``, ``None``) apart from a
    missing path.
    """

    found: bool
    value: Any = None

    def __bool__(self) -> bool:
        return self.found


NOT_FOUND = Lookup(found=False)


def split_path(path: str) -> list[str]:
    """Return the non-empty segments of ``path`` (``[""]`` when there are none)."""

    parts = [part for part in path.split(SEPARATOR) if part]
    return parts or [""]


def set_path(root: MutableMapping[str, Any] | None, path: str, value: Any) -> PathRef | None:
    """Store ``value`` at ``path``, creating intermediate dicts as needed.

    Intermediate values that are missing or are not mappings are replaced by a
    new ``dict``. Returns ``None`` without touching anything when ``root`` is
    ``None``.
    """

    if root is None:
        return None

    keys = split_path(path)
    current = root
    for key in keys[:-1]:
        child = current.get(key)
        if not isinstance(child, MutableMapping):
            child = {}
            current[key] = child
        current = child

    last = keys[-1]
    current[last] = value
    return PathRef(parent=current, key=last)


def _is_indexable(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def lookup_path(root: Mapping[str, Any] | None, path: str) -> Lookup:
    """Walk ``path`` without creating anything and report what was found.

    Mappings are indexed by key. Lists and other non-string sequences are
    indexed when the segment is a non-negative decimal index in range.
    """

    if root is None:
        return NOT_FOUND

    current: Any = root
    for key in split_path(path):
        if isinstance(current, Mapping):
            if key not in current:
                return NOT_FOUND
            current = current[key]
        elif _is_indexable(current) and key.isdecimal() and int(key) < len(current):
            current = current[int(key)]
        else:
            return NOT_FOUND
    return Lookup(found=True, value=current)


def get_path(root: Mapping[str, Any] | None, path: str, default: Any = None) -> Any:
    """Return the value at ``path`` or ``default`` when the path does not exist."""

    result = lookup_path(root, path)
    return result.value if result.found else default


class PathAccessor:
    """Namespace bundling the path helpers as ``PathAccessor.get`` / ``.set``."""

    get = staticmethod(get_path)
    set = staticmethod(set_path)
    lookup = staticmethod(lookup_path)
    split = staticmethod(split_path)


__all__ = [
    "NOT_FOUND",
    "Lookup",
    "PathAccessor",
    "PathRef",
    "get_path",
    "lookup_path",
    "set_path",
    "split_path",
]
