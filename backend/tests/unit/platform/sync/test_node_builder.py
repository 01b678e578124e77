"""Tests for node construction."""

from unittest.mock import MagicMock

import pytest

from payload_source.core.exceptions import NodeSubmissionError
from payload_source.platform.storage import InMemoryNodeStore
from payload_source.platform.sync.node_builder import NodeBuilder, node_type_name


@pytest.mark.parametrize(
    "slug, prefix, expected",
    [
        ("posts", "Payload", "PayloadPosts"),
        ("blog-posts", "Payload", "PayloadBlogPosts"),
        ("site_settings", "Cms", "CmsSiteSettings"),
        ("posts", "", "Posts"),
        ("posts", None, "Posts"),
    ],
)
def test_node_type_name(slug, prefix, expected):
    """Test node type names derived from slugs."""
    assert node_type_name(slug, prefix) == expected


def test_node_shape(store):
    """Test that the node keeps the entity fields and adds the reserved ones."""
    entity = {"id": 42, "title": "Hello", "parent": "ignored"}

    node = NodeBuilder(store).create("PayloadPosts", entity)

    assert node["id"] == store.create_node_id("PayloadPosts-42")
    assert node["_id"] == 42
    assert node["title"] == "Hello"
    assert node["parent"] is None
    assert node["children"] == []
    assert node["internal"] == {
        "type": "PayloadPosts",
        "contentDigest": store.create_content_digest(entity),
    }
    assert store.get_node(node["id"])["title"] == "Hello"


def test_locale_is_part_of_the_id(store):
    """Test that the same document in two locales yields two nodes."""
    builder = NodeBuilder(store)

    english = builder.create("PayloadPages", {"id": 1, "locale": "en"})
    german = builder.create("PayloadPages", {"id": 1, "locale": "de"})

    assert english["id"] == store.create_node_id("PayloadPages-1-en")
    assert english["id"] != german["id"]
    assert len(store.get_nodes_by_type("PayloadPages")) == 2


def test_ids_and_digests_are_deterministic(store):
    """Test that identical input gives identical ids and digests, and changes alter the digest."""
    builder = NodeBuilder(store)
    entity = {"id": "abc", "title": "Hello", "tags": ["a", "b"]}

    first = builder.build("PayloadPosts", dict(entity))
    second = builder.build("PayloadPosts", {"tags": ["a", "b"], "title": "Hello", "id": "abc"})
    changed = builder.build("PayloadPosts", {**entity, "title": "Hello!"})

    assert first["id"] == second["id"] == changed["id"]
    assert first["internal"]["contentDigest"] == second["internal"]["contentDigest"]
    assert first["internal"]["contentDigest"] != changed["internal"]["contentDigest"]


def test_ids_are_stable_across_store_instances_with_the_same_namespace():
    """Test that a reloaded store derives the same ids."""
    entity = {"id": 7}

    first = NodeBuilder(InMemoryNodeStore()).build("PayloadPosts", entity)
    second = NodeBuilder(InMemoryNodeStore()).build("PayloadPosts", entity)

    assert first["id"] == second["id"]


def test_extra_fields_are_merged_and_digested(store):
    """Test that extra fields land on the node and change its digest."""
    builder = NodeBuilder(store)
    entity = {"id": 3, "url": "/media/a.jpg"}

    plain = builder.build("PayloadMedia", entity)
    linked = builder.build("PayloadMedia", entity, extra={"gatsbyImageCdn": "asset-id"})

    assert linked["gatsbyImageCdn"] == "asset-id"
    assert plain["id"] == linked["id"]
    assert plain["internal"]["contentDigest"] != linked["internal"]["contentDigest"]
    assert linked["internal"]["contentDigest"] == store.create_content_digest(
        {**entity, "gatsbyImageCdn": "asset-id"}
    )


def test_entity_without_id_is_rejected(store):
    """Test that an entity without an id cannot become a node."""
    with pytest.raises(NodeSubmissionError):
        NodeBuilder(store).create("PayloadPosts", {"title": "no id"})


def test_sink_failures_become_submission_errors():
    """Test that errors raised by the host store are translated."""
    sink = MagicMock()
    sink.create_node_id.return_value = "node-1"
    sink.create_content_digest.return_value = "digest"
    sink.create_node.side_effect = RuntimeError("store is read-only")

    with pytest.raises(NodeSubmissionError) as exc_info:
        NodeBuilder(sink).create("PayloadPosts", {"id": 1})

    assert exc_info.value.node_id == "node-1"
