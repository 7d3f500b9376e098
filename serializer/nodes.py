"""Node types making up a form tree.

The walker handles exactly four shapes:

    Scalar        a terminal value (bool, number, string, date, or None)
    OrderedList   a sequence of nodes sharing the list's path
    KeyedMap      string keys each contributing one path segment
    TaggedGroup   a typed form node whose tag selects a traversal behavior

Plain Python data (dicts, lists, scalars) is converted with from_plain().
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from typing import Any, Union

from serializer.errors import MalformedNode, MaxDepthExceeded
from serializer.options import DEFAULT_MAX_DEPTH
from serializer.path import Path

SCALAR_TYPES = (str, bool, int, float, Decimal, date, time)


@dataclass(frozen=True)
class Scalar:
    value: Any = None


@dataclass(frozen=True)
class OrderedList:
    items: tuple[Node, ...] = ()


@dataclass(frozen=True)
class KeyedMap:
    entries: tuple[tuple[str, Node], ...] = ()

    def keys(self) -> list[str]:
        return [key for key, _ in self.entries]


@dataclass(frozen=True)
class TaggedGroup:
    """A typed node from a form AST.

    ``value`` is only meaningful for leaf field types. For ``many`` groups
    each entry of ``children`` is one repetition: a single node, or an
    OrderedList holding that repetition's member nodes.
    """

    tag: str
    name: str | None = None
    value: Any = None
    children: tuple[Node, ...] = field(default_factory=tuple)


Node = Union[Scalar, OrderedList, KeyedMap, TaggedGroup]
NODE_TYPES = (Scalar, OrderedList, KeyedMap, TaggedGroup)


def from_plain(
    value: Any,
    path: Path = (),
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Node:
    """Convert a plain nested Python value into nodes.

    Mappings become KeyedMaps (insertion order kept), lists and tuples
    become OrderedLists, scalars and None become Scalars. Values that are
    already nodes are returned unchanged.

    Raises:
        MalformedNode: For keys that aren't strings or values of any
            other type (sets, arbitrary objects).
        MaxDepthExceeded: If the value nests deeper than ``max_depth``,
            which is also how a self-referencing dict or list ends.
    """
    return _convert(value, tuple(path), 0, max_depth)


def _convert(value: Any, path: Path, depth: int, max_depth: int) -> Node:
    if depth > max_depth:
        raise MaxDepthExceeded(path, max_depth)

    if isinstance(value, NODE_TYPES):
        return value

    if value is None or isinstance(value, SCALAR_TYPES):
        return Scalar(value)

    if isinstance(value, Mapping):
        entries = []
        for key, item in value.items():
            if not isinstance(key, (str, int)) or isinstance(key, bool):
                raise MalformedNode(path, f"map key {key!r} is not a string")
            key = str(key)
            entries.append((key, _convert(item, path + (key,), depth + 1, max_depth)))
        return KeyedMap(tuple(entries))

    if isinstance(value, (list, tuple)):
        return OrderedList(tuple(
            _convert(item, path + (i,), depth + 1, max_depth)
            for i, item in enumerate(value)
        ))

    raise MalformedNode(path, f"unsupported value type {type(value).__name__}")
