"""Turn fetched entities into graph nodes."""

import re
from typing import Any, Dict, Mapping, Optional

from payload_source.core.constants import DEFAULT_NODE_PREFIX, NODE_ID_DELIMITER
from payload_source.core.exceptions import NodeSubmissionError
from payload_source.core.logging import ContextualLogger
from payload_source.core.logging import logger as default_logger
from payload_source.platform.contexts.protocol import NodeSink
from payload_source.platform.entities._base import Entity, entity_locale

_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")


def node_type_name(slug: str, prefix: Optional[str] = DEFAULT_NODE_PREFIX) -> str:
    """Derive the node type for a Payload slug.

    ``blog-posts`` becomes ``PayloadBlogPosts`` with the default prefix and
    ``BlogPosts`` with an empty one.
    """
    words = [word for word in _WORD_SPLIT.split(slug) if word]
    pascal = "".join(word[0].upper() + word[1:] for word in words)
    return f"{prefix or ''}{pascal}"


class NodeBuilder:
    """Builds nodes with deterministic ids and content digests and submits them."""

    def __init__(self, sink: NodeSink, logger: Optional[ContextualLogger] = None):
        """Create the builder.

        Args:
            sink: Host store used for ids, digests and node creation
            logger: Optional contextual logger
        """
        self.sink = sink
        self.logger = logger or default_logger

    def node_id(self, type_name: str, data: Entity) -> str:
        """Derive the node id from the type, the entity id and its locale."""
        fragments = [type_name, str(data["id"])]
        locale = entity_locale(data)
        if locale:
            fragments.append(str(locale))
        return self.sink.create_node_id(NODE_ID_DELIMITER.join(fragments))

    def build(
        self,
        type_name: str,
        data: Entity,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Build a node without submitting it.

        Args:
            type_name: Node type, already prefix-qualified
            data: Raw entity as fetched
            extra: Extra fields merged into the node and covered by the digest

        Returns:
            The node mapping
        """
        if "id" not in data:
            raise NodeSubmissionError(f"Entity of type {type_name} has no 'id'")

        content = {**data, **(extra or {})}
        return {
            **content,
            "id": self.node_id(type_name, data),
            # "id" is reserved by the host store, the Payload id is kept as "_id"
            "_id": data["id"],
            "parent": None,
            "children": [],
            "internal": {
                "type": type_name,
                "contentDigest": self.sink.create_content_digest(content),
            },
        }

    def create(
        self,
        type_name: str,
        data: Entity,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Build a node and submit it to the sink.

        Raises:
            NodeSubmissionError: If the sink rejects the node
        """
        node = self.build(type_name, data, extra)
        self.submit(node)
        return node

    def submit(self, node: Dict[str, Any]) -> None:
        """Submit a prepared node, translating sink failures."""
        try:
            self.sink.create_node(node)
        except NodeSubmissionError:
            raise
        except Exception as e:
            raise NodeSubmissionError(
                f"Host store rejected node {node.get('id')}: {e}", node_id=node.get("id")
            ) from e
        self.logger.debug(f"Created {node['internal']['type']} node {node['id']}")
