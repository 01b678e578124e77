"""Materialize upload entities as local files and/or remote asset nodes.

Two independent modes:

- local files: download the upload and register a ``File`` node whose id is
  ``upload-<id>``, so repeated passes update the same node;
- image CDN: create an ``Asset`` node describing the remote image, whose id is
  derived from the upload's url, and hand the id back so the upload node can
  link to it.

Both attach the documents referencing the upload, read from the relationship
index built earlier in the pass.
"""

import math
from typing import Any, Dict, List, Optional

from payload_source.core.constants import NODE_ID_DELIMITER, NodeTypes
from payload_source.core.exceptions import MaterializationError
from payload_source.core.logging import ContextualLogger
from payload_source.core.logging import logger as default_logger
from payload_source.platform.contexts.protocol import FileMaterializer, NodeSink
from payload_source.platform.entities._base import (
    AssetNode,
    Entity,
    NodeInternal,
    entity_image,
)
from payload_source.platform.sync.node_builder import NodeBuilder
from payload_source.platform.sync.relationships import RelationshipIndex


def round_half_up(value: Optional[float]) -> Optional[int]:
    """Round to the nearest integer, halves away from zero for positive sizes.

    Image dimensions are never negative, so ``floor(x + 0.5)`` matches the
    rounding the Payload admin shows.
    """
    if value is None:
        return None
    return int(math.floor(float(value) + 0.5))


def resolve_url(entity: Entity, base_url: str = "") -> str:
    """Return the fully qualified url of an upload.

    Uses the named image size when ``payloadImageSize`` selects one. Relative
    urls (Payload returns ``/media/file.jpg`` by default) are joined with
    ``base_url``.

    Raises:
        MaterializationError: If the entity has no url at all
    """
    url = entity_image(entity)["url"]
    if not url:
        raise MaterializationError(f"Upload {entity.get('id')} has no url")
    if url.startswith(("http://", "https://", "//")):
        return url
    return f"{base_url.rstrip('/')}/{url.lstrip('/')}"


def local_file_node_id(entity: Entity) -> str:
    """Id of the local file node for an upload."""
    return f"upload-{entity['id']}"


class AssetResolver:
    """Creates local file nodes and CDN asset nodes for upload entities."""

    def __init__(
        self,
        sink: NodeSink,
        relationships: RelationshipIndex,
        base_url: str = "",
        materializer: Optional[FileMaterializer] = None,
        logger: Optional[ContextualLogger] = None,
    ):
        """Create the resolver.

        Args:
            sink: Host store
            relationships: Index built from collections and globals this pass
            base_url: Base used for relative upload urls
            materializer: Required for local file mode
            logger: Optional contextual logger
        """
        self.sink = sink
        self.relationships = relationships
        self.base_url = base_url.rstrip("/")
        self.materializer = materializer
        self.logger = logger or default_logger
        self._nodes = NodeBuilder(sink, logger=self.logger)

    def relationships_for(self, entity: Entity) -> List[str]:
        """Documents referencing this upload."""
        return self.relationships.owners_of(entity["id"])

    async def create_local_file_node(self, entity: Entity) -> Dict[str, Any]:
        """Download the upload and register it as a file node.

        Returns:
            The file node returned by the materializer

        Raises:
            MaterializationError: If the download or the registration fails
        """
        if self.materializer is None:
            raise MaterializationError("Local files are enabled but no file materializer is set")

        url = resolve_url(entity, self.base_url)
        node_id = local_file_node_id(entity)
        try:
            file_node = await self.materializer.materialize(
                url, create_node_id=lambda: node_id, sink=self.sink
            )
        except MaterializationError:
            raise
        except Exception as e:
            raise MaterializationError(f"Failed to materialize {url}: {e}", url=url) from e

        # written even when empty so references removed upstream are cleared
        relationships = self.relationships_for(entity)
        await self.sink.create_node_field(file_node, "relationships", relationships)
        self.logger.debug(
            f"Materialized upload {entity['id']} as {node_id} "
            f"({len(relationships)} relationships)"
        )
        return file_node

    def create_asset_node(self, entity: Entity) -> str:
        """Create the remote image node for an upload.

        Returns:
            The id of the asset node
        """
        image = entity_image(entity)
        url = resolve_url(entity, self.base_url)
        node_id = self.sink.create_node_id(
            NODE_ID_DELIMITER.join([NodeTypes.ASSET, str(entity.get("url"))])
        )
        relationships = self.relationships_for(entity)
        asset = AssetNode(
            id=node_id,
            url=url,
            mime_type=image["mimeType"],
            filename=url,
            width=round_half_up(image["width"]),
            height=round_half_up(image["height"]),
            relationships=relationships,
            alt=entity.get("alt") or "",
            internal=NodeInternal(
                type=NodeTypes.ASSET,
                # back-references change without the upload changing
                content_digest=self.sink.create_content_digest(
                    {**entity, "relationships": relationships}
                ),
            ),
        )
        self._nodes.submit(asset.to_node())
        return node_id
