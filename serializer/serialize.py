"""Entry points: turn a form AST or a plain data object into field pairs."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from serializer.data_object import to_data_object
from serializer.emitter import FieldPair
from serializer.errors import MalformedNode
from serializer.nodes import KeyedMap, TaggedGroup, from_plain
from serializer.options import SerializerOptions
from serializer.path import seed
from serializer.registry import FieldTypeRegistry, default_registry
from serializer.walker import TreeWalker

logger = logging.getLogger(__name__)

MODE_AST = "ast"
MODE_DATA = "data"


def serialize_ast(
    ast: Any,
    options: SerializerOptions | None = None,
    registry: FieldTypeRegistry | None = None,
) -> list[FieldPair]:
    """Serialize a typed form AST into an ordered list of field pairs.

    Args:
        ast: A TaggedGroup, or a list/tuple of nodes forming the form body.
        options: Prefix, extra leaf types, indexing mode and so on.
        registry: Field type registry. Defaults to default_registry().
            Extra leaf types from ``options`` are applied to a copy.

    Returns:
        List of FieldPair(name, value) in document order.

    Raises:
        SerializationError: On unknown tags, malformed nodes or runaway
            nesting. Nothing is returned in that case.
    """
    options = options or SerializerOptions()
    registry = (registry or default_registry()).with_leaf_types(
        options.additional_field_types
    )

    if isinstance(ast, (list, tuple)):
        nodes = list(ast)
    elif isinstance(ast, TaggedGroup):
        nodes = [ast]
    else:
        raise MalformedNode((), f"AST must be a node or a list of nodes, got {type(ast).__name__}")

    walker = TreeWalker(registry, options)
    path = seed(options.prefix)
    pairs: list[FieldPair] = []
    # Top-level nodes share the root path; they are not list items
    for node in nodes:
        pairs.extend(walker.walk(node, path))

    logger.debug("Serialized AST into %d fields: %s", len(pairs), describe_pairs(pairs))
    return pairs


def serialize_data(
    data: Mapping[str, Any],
    options: SerializerOptions | None = None,
    registry: FieldTypeRegistry | None = None,
) -> list[FieldPair]:
    """Serialize a plain nested data object into an ordered list of pairs.

    Each top-level key becomes the first name segment (or the second when
    a prefix is set):

        {"title": "Hi", "tags": ["a", "b"]}
        -> [("title", "Hi"), ("tags[0]", "a"), ("tags[1]", "b")]

    ``registry`` resolves any typed nodes embedded in the data. Defaults
    to default_registry(), extended with options.additional_field_types.

    Raises:
        MalformedNode: If ``data`` is not a mapping or holds unsupported
            values.
        MaxDepthExceeded: If the data nests deeper than options.max_depth.
    """
    options = options or SerializerOptions()

    if not isinstance(data, (Mapping, KeyedMap)):
        raise MalformedNode((), f"data object must be a mapping, got {type(data).__name__}")

    root = from_plain(data, max_depth=options.max_depth)
    registry = (registry or default_registry()).with_leaf_types(options.additional_field_types)
    walker = TreeWalker(registry, options)
    pairs = walker.walk(root, seed(options.prefix))

    logger.debug("Serialized data object into %d fields: %s", len(pairs), describe_pairs(pairs))
    return pairs


def serialize(
    ast: Any,
    options: SerializerOptions | None = None,
    registry: FieldTypeRegistry | None = None,
    mode: str = MODE_AST,
) -> list[FieldPair]:
    """Serialize a form AST with either the schema or data-object strategy.

    ``mode="ast"`` walks the typed nodes directly. ``mode="data"`` first
    reduces the AST to a plain data object (dropping all structure that
    carries no name) and serializes that.
    """
    if mode == MODE_AST:
        return serialize_ast(ast, options, registry)

    if mode == MODE_DATA:
        options = options or SerializerOptions()
        registry = registry or default_registry()
        nodes = ast if isinstance(ast, (list, tuple)) else [ast]
        data = to_data_object(
            nodes, registry.with_leaf_types(options.additional_field_types), options.max_depth
        )
        return serialize_data(data, options, registry)

    raise ValueError(f"Unknown serialization mode {mode!r}, expected {MODE_AST!r} or {MODE_DATA!r}")


def describe_pairs(pairs: list[FieldPair], limit: int = 5) -> str:
    """One-line summary of emitted names for debug logging."""
    names = ", ".join(pair.name for pair in pairs[:limit])
    if len(pairs) > limit:
        names += f" (+{len(pairs) - limit} more)"
    return names
