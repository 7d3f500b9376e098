"""Build and serialize bracketed field-name paths.

A path is a tuple of segments. The first segment renders bare and every
following segment renders wrapped in brackets, the convention used by
backend parameter parsers to rebuild nested structures:

    ("user", "items", 0, "title")  ->  "user[items][0][title]"
    ("tags", "")                    ->  "tags[]"
"""

from __future__ import annotations

from typing import Union

Segment = Union[str, int]
Path = tuple[Segment, ...]

# Empty index segment: the backend appends to the list itself
IMPLICIT_INDEX = ""


def seed(prefix: str | None = None) -> Path:
    """Return the root path for a serialization call.

    Args:
        prefix: Optional namespace that every emitted name is nested under.

    Returns:
        ``(prefix,)`` when prefix is a non-empty string, otherwise ``()``.
    """
    if isinstance(prefix, str) and prefix:
        return (prefix,)
    return ()


def extend(
    path: Path,
    name: Segment | None = None,
    index: Segment | None = None,
) -> Path:
    """Return a new path with an optional index and name appended.

    The index goes in *before* the name, so a repeated member's position
    sits between the group name and its own field name:

        extend(("many",), "title", 0)  ->  ("many", 0, "title")

    The input path is never modified.
    """
    appended: list[Segment] = []
    if index is not None:
        appended.append(index)
    if name is not None:
        appended.append(name)
    return tuple(path) + tuple(appended)


def serialize_name(path: Path) -> str:
    """Join a path into its bracketed string form.

    An empty path gives an empty string rather than raising.
    """
    return "".join(
        str(segment) if i == 0 else f"[{segment}]"
        for i, segment in enumerate(path)
    )
