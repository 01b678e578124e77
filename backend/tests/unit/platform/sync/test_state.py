"""Tests for the persisted sync state."""

import pytest

from payload_source.platform.sync.state import SyncStateStore


@pytest.mark.asyncio
async def test_load_without_state(cache):
    """Test that the first run has no state."""
    assert await SyncStateStore(cache).load() is None


@pytest.mark.asyncio
async def test_save_then_load(cache):
    """Test that the saved timestamp is stored under the fixed key."""
    store = SyncStateStore(cache)

    await store.save(1700000000000)
    state = await store.load()

    assert state.last_fetched_timestamp == 1700000000000
    assert await cache.get("timestamp") == 1700000000000


@pytest.mark.asyncio
async def test_unreadable_state_is_ignored(cache):
    """Test that garbage in the cache is treated as no state."""
    await cache.set("timestamp", {"not": "a timestamp"})

    assert await SyncStateStore(cache).load() is None
