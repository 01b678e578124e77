"""Tests for the relationship index."""

from payload_source.platform.sync.relationships import (
    AssetKey,
    RelationshipIndex,
    RelationshipIndexer,
    collection_document_id,
    is_populated_upload,
)

IMAGE = {"id": "img-1", "mimeType": "image/jpeg", "url": "/media/one.jpg"}
OTHER_IMAGE = {"id": "img-2", "mimeType": "image/png", "url": "/media/two.png"}


def test_index_insert_if_absent():
    """Test that the first owner recorded for a key is kept."""
    index = RelationshipIndex()
    key = AssetKey(asset_id="img-1", owner_id="posts.1", path="hero")

    assert index.add(key, "posts.1") is True
    assert index.add(key, "posts.1") is False
    assert index.owner(key) == "posts.1"
    assert len(index) == 1


def test_finds_nested_references_in_dicts_and_lists():
    """Test that uploads are found at any depth, with their field path."""
    indexer = RelationshipIndexer()
    entity = {
        "id": 1,
        "title": "Hello",
        "hero": IMAGE,
        "layout": [
            {"blockType": "text", "body": "..."},
            {"blockType": "gallery", "images": [{"image": OTHER_IMAGE}]},
        ],
    }

    inserted = indexer.index_collection_entity("posts", entity)

    assert inserted == 2
    assert indexer.index.owner(AssetKey("img-1", "posts.1", "hero")) == "posts.1"
    assert (
        indexer.index.owner(AssetKey("img-2", "posts.1", "layout.1.images.0.image"))
        == "posts.1"
    )


def test_unpopulated_ids_are_not_references():
    """Test that plain ids and non-upload objects are ignored by the default rule."""
    indexer = RelationshipIndexer()

    inserted = indexer.index_collection_entity(
        "posts", {"id": 1, "hero": "img-1", "author": {"id": "a-1", "name": "Ada"}}
    )

    assert inserted == 0
    assert not is_populated_upload({"id": "a-1", "name": "Ada"})


def test_repeated_document_keeps_its_first_entries():
    """Test that indexing the same document again (another locale) adds nothing."""
    indexer = RelationshipIndexer()

    assert indexer.index_collection_entity("posts", {"id": 1, "locale": "en", "hero": IMAGE}) == 1
    assert indexer.index_collection_entity("posts", {"id": 1, "locale": "de", "hero": IMAGE}) == 0

    assert len(indexer.index) == 1
    assert indexer.index.owners_of("img-1") == ["posts.1"]


def test_same_field_name_in_other_documents_keeps_every_owner():
    """Test that owners do not depend on how other documents name their fields."""
    same_field = RelationshipIndexer()
    same_field.index_collection_entity("posts", {"id": 1, "hero": IMAGE})
    same_field.index_collection_entity("pages", {"id": 7, "hero": IMAGE})

    other_field = RelationshipIndexer()
    other_field.index_collection_entity("posts", {"id": 1, "hero": IMAGE})
    other_field.index_collection_entity("pages", {"id": 7, "cover": IMAGE})

    assert same_field.index.owners_of("img-1") == ["posts.1", "pages.7"]
    assert other_field.index.owners_of("img-1") == ["posts.1", "pages.7"]


def test_owners_follow_indexing_order():
    """Test that collections indexed first come first, globals last."""
    indexer = RelationshipIndexer()

    indexer.index_collection_entity("posts", {"id": 1, "hero": IMAGE, "thumb": IMAGE})
    indexer.index_collection_entity("pages", {"id": 7, "cover": IMAGE})
    indexer.index_global_entity("settings", {"id": "s", "logo": IMAGE, "icon": OTHER_IMAGE})

    assert indexer.index.owners_of("img-1") == ["posts.1", "pages.7", "settings"]
    assert indexer.index.owners_of("img-2") == ["settings"]
    assert indexer.index.owners_of("img-3") == []


def test_custom_reference_rule():
    """Test that callers can supply their own upload reference rule."""
    indexer = RelationshipIndexer(
        is_upload_reference=lambda value: (
            isinstance(value, dict) and value.get("relationTo") == "media"
        )
    )

    indexer.index_document({"id": 1, "hero": {"relationTo": "media", "id": 5}}, "posts.1")

    assert indexer.index.owners_of(5) == ["posts.1"]


def test_collection_document_id():
    """Test the owning document id format."""
    assert collection_document_id("posts", {"id": 12}) == "posts.12"
