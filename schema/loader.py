"""Load form ASTs exported by the form composer (JSON or YAML)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from serializer.errors import MalformedNode, MaxDepthExceeded
from serializer.nodes import Node, OrderedList, TaggedGroup
from serializer.options import DEFAULT_MAX_DEPTH
from serializer.path import Path as FieldPath, extend

logger = logging.getLogger(__name__)

# Keys understood on each node dict; anything else is ignored with a warning
NODE_KEYS = frozenset({"type", "name", "value", "children"})

# Editor-only metadata the composer attaches to nodes, never serialized
IGNORED_KEYS = frozenset({"label", "hint", "rules", "errors", "attributes", "template"})


def load_ast(filepath: str | Path, max_depth: int = DEFAULT_MAX_DEPTH) -> list[TaggedGroup]:
    """Load and parse an AST file.

    ``.yaml`` / ``.yml`` files are read with yaml.safe_load, anything else
    as JSON. The document is either a list of nodes or a mapping with an
    ``ast`` key holding that list.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file isn't valid JSON/YAML.
        MalformedNode: If a node has the wrong shape.
        MaxDepthExceeded: If nodes nest deeper than ``max_depth``.
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"AST file not found: {filepath}")

    with filepath.open("r", encoding="utf-8") as f:
        if filepath.suffix.lower() in (".yaml", ".yml"):
            try:
                raw = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {filepath}: {e}") from e
        else:
            try:
                raw = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {filepath}: {e}") from e

    if isinstance(raw, dict) and "ast" in raw:
        raw = raw["ast"]

    nodes = parse_ast(raw, max_depth)
    logger.debug("Loaded %d top-level nodes from %s", len(nodes), filepath)
    return nodes


def parse_ast(raw: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> list[TaggedGroup]:
    """Build TaggedGroup trees from a list of raw node dicts.

    Node dict shape:

        {"type": "string", "name": "title", "value": "Hello"}
        {"type": "attr", "name": "address", "children": [...]}
        {"type": "many", "name": "links", "children": [[...], [...]]}
        {"type": "section", "children": [...]}

    A ``many`` repetition may be a list of member nodes or a single node.

    Raises:
        MalformedNode: If the input isn't a list of node dicts.
        MaxDepthExceeded: If nodes nest deeper than ``max_depth``.
    """
    if not isinstance(raw, list):
        raise MalformedNode((), f"AST must be a list of nodes, got {type(raw).__name__}")
    return [_parse_node(item, (), 0, max_depth) for item in raw]


def _parse_node(raw: Any, path: FieldPath, depth: int, max_depth: int) -> TaggedGroup:
    if depth > max_depth:
        raise MaxDepthExceeded(path, max_depth)

    if not isinstance(raw, dict):
        raise MalformedNode(path, f"node must be an object, got {type(raw).__name__}")

    tag = raw.get("type")
    if not isinstance(tag, str) or not tag:
        raise MalformedNode(path, "node is missing its 'type'")

    name = raw.get("name")
    if name is not None and not isinstance(name, str):
        raise MalformedNode(path, f"{tag!r} node name must be a string, got {name!r}")

    unknown = set(raw) - NODE_KEYS - IGNORED_KEYS
    if unknown:
        logger.warning(
            "Ignoring unknown keys %s on %r node at %s",
            sorted(unknown), tag, list(path),
        )

    child_path = extend(path, name) if name else path
    raw_children = raw.get("children") or []
    if not isinstance(raw_children, list):
        raise MalformedNode(child_path, f"{tag!r} node children must be a list")

    children: list[Node] = []
    for i, child in enumerate(raw_children):
        if isinstance(child, list):
            # One repetition of a many group
            member_path = extend(child_path, index=i)
            children.append(
                OrderedList(tuple(
                    _parse_node(member, member_path, depth + 1, max_depth)
                    for member in child
                ))
            )
        else:
            children.append(_parse_node(child, child_path, depth + 1, max_depth))

    return TaggedGroup(
        tag=tag,
        name=name,
        value=raw.get("value"),
        children=tuple(children),
    )
