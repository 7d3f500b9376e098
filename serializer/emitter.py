"""Emit a single (name, value) pair for a terminal node."""

from __future__ import annotations

from typing import Any, NamedTuple

from serializer.path import Path, serialize_name


class FieldPair(NamedTuple):
    """One hidden form field: a bracketed name and its raw value."""

    name: str
    value: Any


def emit_leaf(path: Path, value: Any) -> FieldPair:
    """Build the pair for a leaf at ``path``.

    ``None`` becomes an empty string so the field is still submitted.
    Booleans and numbers pass through untouched; turning them into wire
    strings is left to the renderer.
    """
    return FieldPair(serialize_name(path), "" if value is None else value)
