"""Tests for reducing a typed AST to a plain data object."""

import pytest

from serializer.data_object import to_data_object
from serializer.errors import MalformedNode, MaxDepthExceeded, UnknownFieldType
from serializer.nodes import OrderedList, Scalar, TaggedGroup
from serializer.registry import default_registry


@pytest.fixture
def registry():
    return default_registry()


class TestToDataObject:
    def test_leaves(self, registry):
        nodes = [TaggedGroup("string", "title", "Hi"), TaggedGroup("int", "count", 2)]
        assert to_data_object(nodes, registry) == {"title": "Hi", "count": 2}

    def test_keeps_order(self, registry):
        nodes = [TaggedGroup("string", name, name) for name in ("c", "a", "b")]
        assert list(to_data_object(nodes, registry)) == ["c", "a", "b"]

    def test_attr(self, registry):
        nodes = [
            TaggedGroup("attr", "address", children=(
                TaggedGroup("string", "street", "Main St"),
                TaggedGroup("string", "city", None),
            )),
        ]
        assert to_data_object(nodes, registry) == {
            "address": {"street": "Main St", "city": None},
        }

    def test_many(self, registry):
        nodes = [
            TaggedGroup("many", "links", children=(
                OrderedList((TaggedGroup("string", "url", "/"),)),
                TaggedGroup("string", "url", "/about"),
            )),
        ]
        assert to_data_object(nodes, registry) == {
            "links": [{"url": "/"}, {"url": "/about"}],
        }

    def test_empty_many(self, registry):
        nodes = [TaggedGroup("many", "links")]
        assert to_data_object(nodes, registry) == {"links": []}

    def test_pass_through_merges(self, registry):
        nodes = [
            TaggedGroup("section", "main", children=(
                TaggedGroup("group", children=(TaggedGroup("bool", "on", True),)),
                TaggedGroup("string", "title", "T"),
            )),
        ]
        assert to_data_object(nodes, registry) == {"on": True, "title": "T"}

    def test_pass_through_duplicate_names_keep_last(self, registry):
        nodes = [
            TaggedGroup("section", children=(TaggedGroup("string", "title", "first"),)),
            TaggedGroup("group", children=(TaggedGroup("string", "title", "second"),)),
        ]
        assert to_data_object(nodes, registry) == {"title": "second"}

    def test_unknown_tag(self, registry):
        nodes = [TaggedGroup("attr", "a", children=(TaggedGroup("bogus", "x"),))]
        with pytest.raises(UnknownFieldType) as exc_info:
            to_data_object(nodes, registry)
        assert exc_info.value.path == ("a",)

    def test_untyped_node(self, registry):
        with pytest.raises(MalformedNode):
            to_data_object([Scalar("x")], registry)

    def test_missing_name(self, registry):
        with pytest.raises(MalformedNode):
            to_data_object([TaggedGroup("attr")], registry)

    def test_max_depth(self, registry):
        node = TaggedGroup("string", "x", 1)
        for _ in range(5):
            node = TaggedGroup("attr", "a", children=(node,))
        with pytest.raises(MaxDepthExceeded):
            to_data_object([node], registry, max_depth=2)
