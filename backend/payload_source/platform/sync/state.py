"""Timestamp of the last successful pass.

Nothing reads it yet; it is kept so a delta fetch (only documents updated since
the last pass) can be added without a migration.
"""

from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from payload_source.core.constants import CacheKeys
from payload_source.core.logging import ContextualLogger
from payload_source.core.logging import logger as default_logger
from payload_source.platform.contexts.protocol import CacheStore


class SyncState(BaseModel):
    """Persisted sync state."""

    last_fetched_timestamp: int = Field(..., description="Unix time in milliseconds")


class SyncStateStore:
    """Reads and writes ``SyncState`` through a cache store."""

    def __init__(
        self,
        cache: CacheStore,
        key: str = CacheKeys.TIMESTAMP,
        logger: Optional[ContextualLogger] = None,
    ):
        """Create the store.

        Args:
            cache: Persistent cache
            key: Cache key the timestamp is stored under
            logger: Optional contextual logger
        """
        self.cache = cache
        self.key = key
        self.logger = logger or default_logger

    async def load(self) -> Optional[SyncState]:
        """Return the stored state, or None on the first run or for unreadable values."""
        raw = await self.cache.get(self.key)
        if raw is None:
            return None
        try:
            return SyncState(last_fetched_timestamp=raw)
        except ValidationError:
            self.logger.warning(f"Ignoring unreadable sync state under '{self.key}': {raw!r}")
            return None

    async def save(self, timestamp_ms: int) -> SyncState:
        """Overwrite the stored timestamp."""
        state = SyncState(last_fetched_timestamp=timestamp_ms)
        await self.cache.set(self.key, state.last_fetched_timestamp)
        return state
