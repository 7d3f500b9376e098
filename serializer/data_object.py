"""Reduce a typed form AST to a plain nested data object.

The data object holds only names and values:

    leaf   -> {name: value}
    attr   -> {name: {...children}}
    many   -> {name: [{...repetition}, ...]}
    group/section/compound -> children merged into the parent

Merging is a plain dict update: when two leaves reachable through
pass-through wrappers share a name, the later one wins and the earlier
value is dropped.

It can then be serialized like any other plain structure, which is how the
data-object serializer works (see serialize.serialize with mode="data").
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from serializer.errors import MalformedNode, MaxDepthExceeded
from serializer.nodes import OrderedList, TaggedGroup
from serializer.options import DEFAULT_MAX_DEPTH
from serializer.path import Path, extend
from serializer.registry import Behavior, FieldTypeRegistry


def to_data_object(
    nodes: Iterable[Any],
    registry: FieldTypeRegistry,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict[str, Any]:
    """Convert a sequence of AST nodes into a nested dict of values.

    Raises:
        UnknownFieldType: A node's tag isn't registered.
        MalformedNode: A node isn't a TaggedGroup or lacks a name.
        MaxDepthExceeded: Nesting goes past ``max_depth``.
    """
    result: dict[str, Any] = {}
    _collect(nodes, registry, (), 0, max_depth, result)
    return result


def _collect(
    nodes: Iterable[Any],
    registry: FieldTypeRegistry,
    path: Path,
    depth: int,
    max_depth: int,
    result: dict[str, Any],
) -> None:
    if depth > max_depth:
        raise MaxDepthExceeded(path, max_depth)

    for node in nodes:
        if not isinstance(node, TaggedGroup):
            raise MalformedNode(path, f"expected a typed node, got {type(node).__name__}")

        behavior = registry.resolve(node.tag, path)

        if behavior is Behavior.PASS_THROUGH:
            _collect(node.children, registry, path, depth + 1, max_depth, result)
            continue

        if not node.name:
            raise MalformedNode(path, f"{node.tag!r} node has no name")
        named_path = extend(path, node.name)

        if behavior is Behavior.EMIT_LEAF:
            result[node.name] = node.value

        elif behavior is Behavior.ATTR_GROUP:
            attrs: dict[str, Any] = {}
            _collect(node.children, registry, named_path, depth + 1, max_depth, attrs)
            result[node.name] = attrs

        elif behavior is Behavior.MANY_GROUP:
            repetitions = []
            for i, repetition in enumerate(node.children):
                members = repetition.items if isinstance(repetition, OrderedList) else [repetition]
                data: dict[str, Any] = {}
                _collect(members, registry, extend(named_path, index=i), depth + 1, max_depth, data)
                repetitions.append(data)
            result[node.name] = repetitions
