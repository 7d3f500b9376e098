"""Walk a form tree and emit its leaves as bracketed (name, value) pairs."""

from __future__ import annotations

from typing import Any

from serializer.emitter import FieldPair, emit_leaf
from serializer.errors import MalformedNode, MaxDepthExceeded
from serializer.nodes import KeyedMap, Node, OrderedList, Scalar, TaggedGroup, from_plain
from serializer.options import SerializerOptions
from serializer.path import IMPLICIT_INDEX, Path, extend
from serializer.registry import Behavior, FieldTypeRegistry

# Key of the empty field emitted ahead of each map in a list when
# SerializerOptions.list_of_maps_placeholder is on (rack/rack#951)
PLACEHOLDER_KEY = "__rack_workaround"


class TreeWalker:
    """Recursive traversal from nodes to an ordered list of FieldPairs.

    Output order always follows input order: list items in sequence, map
    keys in insertion order, AST children as given. Submitted fields are
    mapped back onto editor state by position, so this must not change.

    A walker keeps no state between calls and can be shared freely as long
    as its registry is not modified.
    """

    def __init__(
        self,
        registry: FieldTypeRegistry,
        options: SerializerOptions | None = None,
    ):
        self.registry = registry
        self.options = options or SerializerOptions()

    def walk(self, node: Node, path: Path = ()) -> list[FieldPair]:
        """Serialize ``node`` (and everything beneath it) at ``path``.

        Raises:
            UnknownFieldType: A TaggedGroup's tag isn't registered.
            MalformedNode: A node is missing a required name or children.
            MaxDepthExceeded: Nesting goes past options.max_depth.
        """
        pairs: list[FieldPair] = []
        self._walk(node, tuple(path), 0, pairs)
        return pairs

    def _walk(self, node: Any, path: Path, depth: int, out: list[FieldPair]) -> None:
        if depth > self.options.max_depth:
            raise MaxDepthExceeded(path, self.options.max_depth)

        if isinstance(node, Scalar):
            out.append(emit_leaf(path, node.value))
        elif isinstance(node, OrderedList):
            self._walk_list(node, path, depth, out)
        elif isinstance(node, KeyedMap):
            for key, child in node.entries:
                self._walk(child, extend(path, key), depth + 1, out)
        elif isinstance(node, TaggedGroup):
            self._walk_tagged(node, path, depth, out)
        else:
            raise MalformedNode(path, f"not a form node: {type(node).__name__}")

    def _walk_list(self, node: OrderedList, path: Path, depth: int, out: list[FieldPair]) -> None:
        if not node.items:
            # An emptied list still has to clear the value on the backend
            out.append(emit_leaf(path, ""))
            return

        for i, item in enumerate(node.items):
            item_path = extend(path, index=self._index(i))
            if self.options.list_of_maps_placeholder and isinstance(item, KeyedMap):
                out.append(emit_leaf(extend(item_path, PLACEHOLDER_KEY), ""))
            self._walk(item, item_path, depth + 1, out)

    def _walk_tagged(self, node: TaggedGroup, path: Path, depth: int, out: list[FieldPair]) -> None:
        behavior = self.registry.resolve(node.tag, path)

        if behavior is Behavior.PASS_THROUGH:
            for child in self._children(node, path):
                self._walk(child, path, depth + 1, out)
            return

        if not node.name:
            raise MalformedNode(path, f"{node.tag!r} node has no name")
        named_path = extend(path, node.name)

        if behavior is Behavior.EMIT_LEAF:
            value = from_plain(node.value, named_path, self.options.max_depth)
            self._walk(value, named_path, depth + 1, out)

        elif behavior is Behavior.ATTR_GROUP:
            for child in self._children(node, named_path):
                self._walk(child, named_path, depth + 1, out)

        elif behavior is Behavior.MANY_GROUP:
            repetitions = self._children(node, named_path)
            if not repetitions:
                out.append(emit_leaf(named_path, ""))
                return
            for i, repetition in enumerate(repetitions):
                member_path = extend(named_path, index=self._index(i))
                if isinstance(repetition, OrderedList):
                    for member in repetition.items:
                        self._walk(member, member_path, depth + 1, out)
                else:
                    self._walk(repetition, member_path, depth + 1, out)

    def _index(self, position: int) -> int | str:
        return IMPLICIT_INDEX if self.options.implicit_indexing else position

    @staticmethod
    def _children(node: TaggedGroup, path: Path) -> tuple[Node, ...]:
        if not isinstance(node.children, (tuple, list)):
            raise MalformedNode(path, f"{node.tag!r} node children must be a list")
        return tuple(node.children)

