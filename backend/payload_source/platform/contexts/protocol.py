"""Protocols for the collaborators of a sync pass.

The engine never reaches for ambient state: the host store, cache, transport and
file materializer are passed in explicitly and only need to satisfy these
protocols. ``payload_source.platform.storage`` ships in-memory and filesystem
implementations used by tests and local runs.
"""

from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable

from payload_source.platform.entities._base import Entity, TypeDescriptor


@runtime_checkable
class NodeSink(Protocol):
    """The host content-graph store.

    Node creation is update-by-id: creating a node whose id already exists
    replaces it, and an unchanged ``contentDigest`` lets the host skip the write.
    """

    def create_node(self, node: Dict[str, Any]) -> None:
        """Create or replace a node. Raises on a malformed node."""
        ...

    def create_node_id(self, seed: str) -> str:
        """Derive a deterministic node id from a seed string."""
        ...

    def create_content_digest(self, payload: Any) -> str:
        """Derive a deterministic digest from a JSON-compatible payload."""
        ...

    def touch_node(self, node: Dict[str, Any]) -> None:
        """Mark a previously created node as still valid."""
        ...

    def get_all_nodes(self) -> List[Dict[str, Any]]:
        """Return every node currently in the store."""
        ...

    async def create_node_field(self, node: Dict[str, Any], name: str, value: Any) -> None:
        """Attach an extra field to an existing node."""
        ...


@runtime_checkable
class TransportClient(Protocol):
    """Client for the Payload REST API."""

    async def fetch_collection_list(self, descriptor: TypeDescriptor) -> List[Entity]:
        """Fetch every document of a collection (or upload collection)."""
        ...

    async def fetch_singleton(self, descriptor: TypeDescriptor) -> List[Entity]:
        """Fetch a global; returns a list of at most one document."""
        ...


@runtime_checkable
class CacheStore(Protocol):
    """Key/value store that persists between passes."""

    async def get(self, key: str) -> Optional[Any]:
        """Return the value for ``key`` or None when absent."""
        ...

    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-compatible value under ``key``."""
        ...


@runtime_checkable
class FileMaterializer(Protocol):
    """Downloads a remote file and registers it as a node."""

    async def materialize(
        self, url: str, create_node_id: Callable[[], str], sink: NodeSink
    ) -> Dict[str, Any]:
        """Download ``url`` and create a file node whose id is ``create_node_id()``."""
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """Advisory progress hooks; no behavior depends on them."""

    def start(self) -> None:
        """Mark the start of a pass."""
        ...

    def end(self) -> None:
        """Mark the end of a pass."""
        ...

    def set_status(self, status: str) -> None:
        """Update the one-line status of the running pass."""
        ...

    def verbose(self, message: str) -> None:
        """Emit a detail message, only visible with verbose output."""
        ...
