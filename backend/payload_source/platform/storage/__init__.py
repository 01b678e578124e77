"""Reference host store and cache implementations."""

from .cache import FilesystemCache, MemoryCache
from .node_store import InMemoryNodeStore

__all__ = ["FilesystemCache", "InMemoryNodeStore", "MemoryCache"]
