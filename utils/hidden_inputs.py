"""Render serialized field pairs as hidden HTML inputs."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from markupsafe import Markup, escape


def format_value(value: Any) -> str:
    """Stringify a field value for the ``value`` attribute.

    Booleans become "true"/"false", None becomes "" and integral floats
    drop their ".0" (1.0 -> "1"), as a browser would submit them.
    Everything else goes through str().
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def render_hidden_input(name: str, value: Any) -> Markup:
    """Render one ``<input type="hidden">`` with escaped name and value."""
    return Markup('<input type="hidden" name="{}" value="{}">').format(
        name, format_value(value)
    )


def render_hidden_inputs(pairs: Iterable[tuple[str, Any]], separator: str = "\n") -> Markup:
    """Render field pairs as hidden inputs, one per pair, in order."""
    return escape(separator).join(
        render_hidden_input(name, value) for name, value in pairs
    )
