"""In-memory host graph store.

Implements the ``NodeSink`` protocol the way a content-graph host does:
nodes are created or replaced by id, every node records the plugin that owns
it, and ``collect_garbage`` drops owned nodes that were neither created nor
touched since ``begin_run``.
"""

import hashlib
import json
from typing import Any, Dict, List, Optional, Set
from uuid import NAMESPACE_URL, uuid5

from payload_source.core.constants import PLUGIN_NAME
from payload_source.core.exceptions import NodeSubmissionError
from payload_source.core.logging import ContextualLogger
from payload_source.core.logging import logger as default_logger


class InMemoryNodeStore:
    """Node store kept in a dict, keyed by node id."""

    def __init__(
        self,
        owner: str = PLUGIN_NAME,
        namespace: str = "payload-source",
        logger: Optional[ContextualLogger] = None,
    ):
        """Create an empty store.

        Args:
            owner: Owner name recorded on nodes created through this store
            namespace: Seed namespace for ``create_node_id``; one per store instance
            logger: Optional contextual logger
        """
        self.owner = owner
        self.namespace = uuid5(NAMESPACE_URL, namespace)
        self.logger = logger or default_logger
        self.nodes: Dict[str, Dict[str, Any]] = {}
        self.touched: Set[str] = set()
        self.created: Set[str] = set()
        self.writes = 0

    def create_node_id(self, seed: str) -> str:
        """Deterministic uuid5 of ``seed`` within this store's namespace."""
        return str(uuid5(self.namespace, seed))

    def create_content_digest(self, payload: Any) -> str:
        """md5 of the canonical JSON of ``payload`` (sorted keys)."""
        if isinstance(payload, str):
            encoded = payload
        else:
            encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
        return hashlib.md5(encoded.encode("utf-8")).hexdigest()

    def create_node(self, node: Dict[str, Any]) -> None:
        """Create or replace a node.

        Replacing a node with the same content digest is a no-op apart from
        marking it as created this run.

        Raises:
            NodeSubmissionError: If the node has no id, type or content digest
        """
        node_id = node.get("id")
        internal = node.get("internal")
        if not node_id or not isinstance(node_id, str):
            raise NodeSubmissionError("Node has no string 'id'")
        if not isinstance(internal, dict) or not internal.get("type"):
            raise NodeSubmissionError(f"Node {node_id} has no internal.type", node_id=node_id)
        if not internal.get("contentDigest"):
            raise NodeSubmissionError(
                f"Node {node_id} has no internal.contentDigest", node_id=node_id
            )

        self.created.add(node_id)
        existing = self.nodes.get(node_id)
        if existing and existing["internal"]["contentDigest"] == internal["contentDigest"]:
            return

        stored = {**node, "internal": {**internal, "owner": self.owner}}
        if existing and "fields" in existing:
            stored.setdefault("fields", dict(existing["fields"]))
        self.nodes[node_id] = stored
        self.writes += 1

    def touch_node(self, node: Dict[str, Any]) -> None:
        """Mark a node as still valid for this run."""
        self.touched.add(node["id"])

    def get_all_nodes(self) -> List[Dict[str, Any]]:
        """Return every stored node."""
        return list(self.nodes.values())

    def get_node(self, node_id: str) -> Optional[Dict[str, Any]]:
        """Return a node by id."""
        return self.nodes.get(node_id)

    def get_nodes_by_type(self, type_name: str) -> List[Dict[str, Any]]:
        """Return every node of a type."""
        return [node for node in self.nodes.values() if node["internal"]["type"] == type_name]

    async def create_node_field(self, node: Dict[str, Any], name: str, value: Any) -> None:
        """Attach ``value`` under ``node["fields"][name]``.

        Raises:
            NodeSubmissionError: If the node does not exist
        """
        stored = self.nodes.get(node["id"])
        if stored is None:
            raise NodeSubmissionError(f"Unknown node {node['id']}", node_id=node["id"])
        stored.setdefault("fields", {})[name] = value

    def begin_run(self) -> None:
        """Start tracking created and touched nodes for a new run."""
        self.touched.clear()
        self.created.clear()

    def collect_garbage(self) -> List[str]:
        """Delete owned nodes that were neither created nor touched since ``begin_run``.

        Returns:
            Ids of the deleted nodes
        """
        stale = [
            node_id
            for node_id, node in self.nodes.items()
            if node["internal"].get("owner") == self.owner
            and node_id not in self.created
            and node_id not in self.touched
        ]
        for node_id in stale:
            del self.nodes[node_id]
        if stale:
            self.logger.debug(f"Garbage collected {len(stale)} stale nodes")
        return stale
