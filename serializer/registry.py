"""Map form node type tags onto traversal behaviors.

Every tag in a form AST resolves to one of four behaviors:

    EMIT_LEAF     the node is a field; emit its value at path + name
    PASS_THROUGH  organisational wrapper; children keep the current path
    ATTR_GROUP    adds its name to the path once, shared by all children
    MANY_GROUP    adds its name, then an index per repetition

Registries are configuration. Build and register everything at start-up,
then share the registry read-only between serialization calls. Per-call
extra leaf types are applied to a copy (see with_leaf_types) so a shared
registry is never mutated while other calls read it.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from pathlib import Path as FilePath
from typing import Any

import yaml

from serializer.errors import UnknownFieldType
from serializer.path import Path

logger = logging.getLogger(__name__)


class Behavior(enum.Enum):
    EMIT_LEAF = "leaf"
    PASS_THROUGH = "pass_through"
    ATTR_GROUP = "attr"
    MANY_GROUP = "many"


# Field types shipped by the form builder, all emitted as single values
DEFAULT_LEAF_TYPES = frozenset({
    "bool", "boolean", "check_box",
    "int", "number", "float", "decimal",
    "date", "date_time", "time",
    "string", "text", "text_area", "rich_text_area", "hidden", "color",
    "select", "selection", "select_box", "radio_buttons",
    "multi_selection", "search_selection", "search_multi_selection", "tags",
    "upload", "multi_upload",
})

DEFAULT_STRUCTURAL_TYPES: dict[str, Behavior] = {
    "group": Behavior.PASS_THROUGH,
    "section": Behavior.PASS_THROUGH,
    "compound": Behavior.PASS_THROUGH,
    "compound_field": Behavior.PASS_THROUGH,
    "attr": Behavior.ATTR_GROUP,
    "many": Behavior.MANY_GROUP,
}


class FieldTypeRegistry:
    """Lookup table from node type tag to Behavior."""

    def __init__(self, behaviors: dict[str, Behavior] | None = None):
        self._behaviors: dict[str, Behavior] = dict(behaviors or {})

    def register(self, tag: str, behavior: Behavior) -> None:
        if not tag or not isinstance(tag, str):
            raise ValueError(f"Field type tag must be a non-empty string, got {tag!r}")
        if not isinstance(behavior, Behavior):
            raise ValueError(f"Unknown behavior {behavior!r} for field type {tag!r}")

        previous = self._behaviors.get(tag)
        if previous is not None and previous is not behavior:
            logger.info(
                "Field type %r re-registered: %s -> %s",
                tag, previous.name, behavior.name,
            )
        self._behaviors[tag] = behavior

    def register_leaf_types(self, tags: Iterable[str]) -> None:
        """Register caller-supplied field types as plain leaves."""
        for tag in tags:
            self.register(tag, Behavior.EMIT_LEAF)

    def resolve(self, tag: str, path: Path = ()) -> Behavior:
        """Return the behavior for ``tag``.

        Raises:
            UnknownFieldType: If the tag was never registered. ``path`` is
                reported on the error so the caller can find the node.
        """
        try:
            return self._behaviors[tag]
        except (KeyError, TypeError):
            raise UnknownFieldType(tag, path) from None

    def copy(self) -> FieldTypeRegistry:
        return FieldTypeRegistry(self._behaviors)

    def with_leaf_types(self, tags: Iterable[str] | None) -> FieldTypeRegistry:
        """Return this registry, or a copy extended with extra leaf types."""
        tags = list(tags or [])
        if not tags:
            return self
        extended = self.copy()
        extended.register_leaf_types(tags)
        return extended

    def tags(self, behavior: Behavior | None = None) -> list[str]:
        """Sorted registered tags, optionally only those with ``behavior``."""
        return sorted(
            tag for tag, b in self._behaviors.items()
            if behavior is None or b is behavior
        )

    def __contains__(self, tag: object) -> bool:
        return tag in self._behaviors

    def __len__(self) -> int:
        return len(self._behaviors)


def default_registry() -> FieldTypeRegistry:
    """Build a registry with the built-in leaf and structural types."""
    registry = FieldTypeRegistry(dict(DEFAULT_STRUCTURAL_TYPES))
    registry.register_leaf_types(sorted(DEFAULT_LEAF_TYPES))
    logger.debug("Built default registry with %d field types", len(registry))
    return registry


def load_field_types(
    filepath: str | FilePath,
    base: FieldTypeRegistry | None = None,
) -> FieldTypeRegistry:
    """Load extra field types from a YAML file on top of a base registry.

    The file looks like:

        leaf_types:
          - slug
          - money
        structural:
          fieldset: pass_through
          nested: attr

    Args:
        filepath: Path to the YAML file.
        base: Registry to extend. Defaults to default_registry().

    Returns:
        A new registry; ``base`` is left untouched.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file has the wrong structure or an unknown
            behavior name.
    """
    filepath = FilePath(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Field types file not found: {filepath}")

    with filepath.open("r", encoding="utf-8") as f:
        data: Any = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Field types file {filepath} must contain a mapping")

    registry = (base or default_registry()).copy()

    leaf_types = data.get("leaf_types") or []
    if not isinstance(leaf_types, list):
        raise ValueError(f"'leaf_types' in {filepath} must be a list")
    registry.register_leaf_types(str(tag) for tag in leaf_types)

    structural = data.get("structural") or {}
    if not isinstance(structural, dict):
        raise ValueError(f"'structural' in {filepath} must be a mapping")
    for tag, behavior_name in structural.items():
        try:
            behavior = Behavior(behavior_name)
        except ValueError:
            raise ValueError(
                f"Unknown behavior {behavior_name!r} for field type {tag!r} in {filepath}"
            ) from None
        registry.register(str(tag), behavior)

    logger.info(
        "Loaded %d leaf and %d structural field types from %s",
        len(leaf_types), len(structural), filepath,
    )
    return registry
