"""Index of which documents reference which uploads.

Payload populates upload fields in place (``depth`` > 0), so a document holds a
nested upload object wherever it references an image. Walking fetched documents
for those objects gives, for each upload, the documents that point at it. Keys
are scoped to the referencing document: the referenced upload, the owning
document and the field path. The first write for a key is kept, so a document
indexed twice (one copy per locale) contributes one entry per field, while every
distinct document referencing an upload is listed regardless of field names.
"""

from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional, Tuple

from payload_source.core.constants import DOCUMENT_KEY_DELIMITER
from payload_source.platform.entities._base import Entity

UploadReferenceRule = Callable[[Any], bool]


class AssetKey(NamedTuple):
    """Composite key for one reference to an upload from one document field."""

    asset_id: str
    owner_id: str
    path: str


def is_populated_upload(value: Any) -> bool:
    """Default rule: a populated Payload upload has an ``id`` and a ``mimeType``."""
    return isinstance(value, dict) and "id" in value and bool(value.get("mimeType"))


def collection_document_id(slug: str, entity: Entity) -> str:
    """Owning document id for a collection entity, e.g. ``posts.42``."""
    return DOCUMENT_KEY_DELIMITER.join([slug, str(entity["id"])])


def global_document_id(slug: str) -> str:
    """Owning document id for a global; a global has exactly one document."""
    return slug


class RelationshipIndex:
    """Insert-if-absent mapping from ``AssetKey`` to the owning document id."""

    def __init__(self):
        """Create an empty index."""
        self._entries: Dict[AssetKey, str] = {}

    def add(self, key: AssetKey, owner_id: str) -> bool:
        """Record ``key -> owner_id`` unless the key is already owned.

        Returns:
            True if the entry was inserted, False if an earlier owner kept it
        """
        if key in self._entries:
            return False
        self._entries[key] = owner_id
        return True

    def owner(self, key: AssetKey) -> Optional[str]:
        """Return the owner recorded for ``key``."""
        return self._entries.get(key)

    def owners_of(self, asset_id: Any) -> List[str]:
        """Return the documents referencing an upload, in discovery order, without repeats."""
        asset_id = str(asset_id)
        owners: List[str] = []
        for key, owner_id in self._entries.items():
            if key.asset_id == asset_id and owner_id not in owners:
                owners.append(owner_id)
        return owners

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class RelationshipIndexer:
    """Builds a ``RelationshipIndex`` from fetched collection and global documents."""

    def __init__(
        self,
        is_upload_reference: UploadReferenceRule = is_populated_upload,
        index: Optional[RelationshipIndex] = None,
    ):
        """Create the indexer.

        Args:
            is_upload_reference: Decides whether a nested value references an upload
            index: Index to fill; a new one is created when omitted
        """
        self.is_upload_reference = is_upload_reference
        self.index = index if index is not None else RelationshipIndex()

    def index_collection_entity(self, slug: str, entity: Entity) -> int:
        """Index references of a collection document. Returns the number inserted."""
        return self.index_document(entity, collection_document_id(slug, entity))

    def index_global_entity(self, slug: str, entity: Entity) -> int:
        """Index references of a global document. Returns the number inserted."""
        return self.index_document(entity, global_document_id(slug))

    def index_document(self, entity: Entity, owner_id: str) -> int:
        """Walk every field of ``entity`` and record the uploads it references."""
        inserted = 0
        for name, value in entity.items():
            for asset_id, path in self._find_references(value, name):
                key = AssetKey(asset_id=asset_id, owner_id=owner_id, path=path)
                if self.index.add(key, owner_id):
                    inserted += 1
        return inserted

    def _find_references(self, value: Any, path: str) -> Iterator[Tuple[str, str]]:
        if self.is_upload_reference(value):
            yield str(value["id"]), path
            return
        if isinstance(value, dict):
            for name, nested in value.items():
                yield from self._find_references(nested, f"{path}.{name}")
        elif isinstance(value, list):
            for position, nested in enumerate(value):
                yield from self._find_references(nested, f"{path}.{position}")
