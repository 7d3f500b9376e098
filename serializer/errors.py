"""Errors raised while serializing a form tree into field pairs."""

from __future__ import annotations

from typing import Any, Sequence

from serializer.path import serialize_name


def _format_path(path: Sequence[Any]) -> str:
    return serialize_name(path) or "<root>"


class SerializationError(Exception):
    """Base class for errors that abort a serialization call."""

    def __init__(self, message: str, path: Sequence[Any] = ()):
        super().__init__(message)
        self.path = tuple(path)


class UnknownFieldType(SerializationError):
    """Raised when a node's type tag has no registered behavior."""

    def __init__(self, tag: str, path: Sequence[Any] = ()):
        super().__init__(
            f"Unknown field type {tag!r} at {_format_path(path)}", path
        )
        self.tag = tag


class MalformedNode(SerializationError):
    """Raised when a node does not match the shape its type requires."""

    def __init__(self, path: Sequence[Any], reason: str):
        super().__init__(f"Malformed node at {_format_path(path)}: {reason}", path)
        self.reason = reason


class MaxDepthExceeded(SerializationError):
    """Raised when traversal nests deeper than the configured limit.

    Input trees are assumed to be acyclic; the limit turns an accidental
    cycle into an error instead of a RecursionError.
    """

    def __init__(self, path: Sequence[Any], max_depth: int):
        super().__init__(
            f"Maximum depth {max_depth} exceeded at {_format_path(path)}", path
        )
        self.max_depth = max_depth
