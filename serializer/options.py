"""Per-call serialization options."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

INDEXING_EXPLICIT = "explicit"
INDEXING_IMPLICIT = "implicit"
INDEXING_MODES = (INDEXING_EXPLICIT, INDEXING_IMPLICIT)

DEFAULT_MAX_DEPTH = 64

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class SerializerOptions:
    """Options threaded through one serialization call.

    Attributes:
        prefix: Namespace that every emitted name is nested under.
        additional_field_types: Extra tags treated as leaf fields.
        indexing: "explicit" writes zero-based indexes (``items[0][x]``),
            "implicit" writes empty brackets (``items[][x]``) and lets the
            backend number repetitions.
        list_of_maps_placeholder: Emit an empty ``[__rack_workaround]``
            field ahead of every map inside a list. Some parameter parsers
            can't otherwise tell a list of maps from a map when indexes are
            implicit.
        max_depth: Nesting limit before MaxDepthExceeded is raised.
    """

    prefix: str | None = None
    additional_field_types: tuple[str, ...] = field(default_factory=tuple)
    indexing: str = INDEXING_EXPLICIT
    list_of_maps_placeholder: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if self.prefix is not None and not isinstance(self.prefix, str):
            raise ValueError(f"prefix must be a string, got {self.prefix!r}")
        if self.indexing not in INDEXING_MODES:
            raise ValueError(
                f"indexing must be one of {', '.join(INDEXING_MODES)}, "
                f"got {self.indexing!r}"
            )
        if not isinstance(self.max_depth, int) or self.max_depth < 1:
            raise ValueError(f"max_depth must be a positive integer, got {self.max_depth!r}")
        # Accept any iterable of tags but store an immutable tuple
        object.__setattr__(
            self, "additional_field_types", tuple(self.additional_field_types or ())
        )

    @property
    def implicit_indexing(self) -> bool:
        return self.indexing == INDEXING_IMPLICIT

    @classmethod
    def from_env(cls) -> SerializerOptions:
        """Load defaults from environment variables.

        Reads: FORM_SERIALIZER_PREFIX, FORM_SERIALIZER_FIELD_TYPES
        (comma separated), FORM_SERIALIZER_INDEXING,
        FORM_SERIALIZER_LIST_PLACEHOLDER, FORM_SERIALIZER_MAX_DEPTH.
        """
        field_types = os.environ.get("FORM_SERIALIZER_FIELD_TYPES", "")
        return cls(
            prefix=os.environ.get("FORM_SERIALIZER_PREFIX") or None,
            additional_field_types=tuple(
                t.strip() for t in field_types.split(",") if t.strip()
            ),
            indexing=os.environ.get("FORM_SERIALIZER_INDEXING", INDEXING_EXPLICIT),
            list_of_maps_placeholder=(
                os.environ.get("FORM_SERIALIZER_LIST_PLACEHOLDER", "").lower() in _TRUTHY
            ),
            max_depth=int(os.environ.get("FORM_SERIALIZER_MAX_DEPTH", str(DEFAULT_MAX_DEPTH))),
        )

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        defaults: SerializerOptions | None = None,
    ) -> SerializerOptions:
        """Build options from a request body, falling back to ``defaults``.

        Raises:
            ValueError: If a value has the wrong type.
        """
        base = defaults or cls()

        field_types = data.get("additional_field_types", base.additional_field_types)
        if not isinstance(field_types, (list, tuple)) or not all(
            isinstance(t, str) for t in field_types
        ):
            raise ValueError("'additional_field_types' must be a list of strings")

        placeholder = data.get("list_of_maps_placeholder", base.list_of_maps_placeholder)
        if not isinstance(placeholder, bool):
            raise ValueError("'list_of_maps_placeholder' must be a boolean")

        max_depth = data.get("max_depth", base.max_depth)
        if isinstance(max_depth, bool):
            raise ValueError("'max_depth' must be an integer")

        return cls(
            prefix=data.get("prefix", base.prefix),
            additional_field_types=tuple(field_types),
            indexing=data.get("indexing", base.indexing),
            list_of_maps_placeholder=placeholder,
            max_depth=max_depth,
        )

    @classmethod
    def data_object_defaults(cls, prefix: str | None = None) -> SerializerOptions:
        """Options matching the data-object serializer: implicit indexes
        with the list-of-maps placeholder switched on."""
        return cls(
            prefix=prefix,
            indexing=INDEXING_IMPLICIT,
            list_of_maps_placeholder=True,
        )
