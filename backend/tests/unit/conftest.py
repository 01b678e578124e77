"""Unit test conftest: environment defaults and shared fakes."""

import os
from typing import Dict, List
from unittest.mock import MagicMock

# Set before importing payload_source so Settings picks them up
os.environ.setdefault("PAYLOAD_SOURCE_LOG_LEVEL", "DEBUG")
os.environ.setdefault("PAYLOAD_SOURCE_CACHE_DIR", "/tmp/payload-source-tests")

import pytest  # noqa: E402

from payload_source.core.exceptions import TransportError  # noqa: E402
from payload_source.platform.entities._base import Entity, TypeDescriptor  # noqa: E402
from payload_source.platform.storage import InMemoryNodeStore, MemoryCache  # noqa: E402
from payload_source.platform.sync.config import PluginOptions  # noqa: E402
from payload_source.platform.sync.context import SyncContext, SyncSession  # noqa: E402


class FakeTransport:
    """Transport client serving canned documents per slug."""

    def __init__(
        self,
        collections: Dict[str, List[Entity]] = None,
        globals_: Dict[str, Entity] = None,
        failures: Dict[str, Exception] = None,
    ):
        self.collections = collections or {}
        self.globals = globals_ or {}
        self.failures = failures or {}
        self.calls: List[str] = []

    async def fetch_collection_list(self, descriptor: TypeDescriptor) -> List[Entity]:
        self.calls.append(descriptor.slug)
        if descriptor.slug in self.failures:
            raise self.failures[descriptor.slug]
        return [dict(doc) for doc in self.collections.get(descriptor.slug, [])]

    async def fetch_singleton(self, descriptor: TypeDescriptor) -> List[Entity]:
        self.calls.append(descriptor.slug)
        if descriptor.slug in self.failures:
            raise self.failures[descriptor.slug]
        doc = self.globals.get(descriptor.slug)
        return [dict(doc)] if doc else []


class FakeMaterializer:
    """File materializer that registers a file node without downloading anything."""

    def __init__(self, fail_for: str = None):
        self.fail_for = fail_for
        self.urls: List[str] = []

    async def materialize(self, url, create_node_id, sink):
        self.urls.append(url)
        if self.fail_for and self.fail_for in url:
            raise TransportError(f"404 for {url}")
        node = {
            "id": create_node_id(),
            "url": url,
            "parent": None,
            "children": [],
            "internal": {"type": "File", "contentDigest": sink.create_content_digest(url)},
        }
        sink.create_node(node)
        return node


@pytest.fixture
def store():
    """Create an empty in-memory node store."""
    return InMemoryNodeStore()


@pytest.fixture
def cache():
    """Create an empty in-memory cache."""
    return MemoryCache()


@pytest.fixture
def session():
    """Create a fresh process-lifetime session."""
    return SyncSession()


@pytest.fixture
def reporter():
    """Create a mock progress reporter."""
    return MagicMock()


@pytest.fixture
def make_context(store, cache, session, reporter):
    """Build a SyncContext from option overrides."""

    def _make(**options) -> SyncContext:
        options.setdefault("endpoint", "https://cms.example.com/api")
        return SyncContext(
            options=PluginOptions(**options),
            session=session,
            sink=store,
            cache=cache,
            reporter=reporter,
        )

    return _make


@pytest.fixture
def make_transport():
    """Return the fake transport class."""
    return FakeTransport


@pytest.fixture
def make_materializer():
    """Return the fake file materializer class."""
    return FakeMaterializer
