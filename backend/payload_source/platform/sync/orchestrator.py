"""Concurrent fetch of every configured type."""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence

from payload_source.core.exceptions import TransportError
from payload_source.core.logging import ContextualLogger
from payload_source.core.logging import logger as default_logger
from payload_source.platform.contexts.protocol import TransportClient
from payload_source.platform.entities._base import (
    Entity,
    FetchResult,
    TypeCategory,
    TypeDescriptor,
)


@dataclass
class FetchPlanResult:
    """Per-descriptor results for the three categories, in descriptor order."""

    collections: List[FetchResult] = field(default_factory=list)
    globals: List[FetchResult] = field(default_factory=list)
    uploads: List[FetchResult] = field(default_factory=list)

    @property
    def entity_count(self) -> int:
        """Total number of fetched entities across all categories."""
        return sum(
            len(result.entities)
            for results in (self.collections, self.globals, self.uploads)
            for result in results
        )


class FetchOrchestrator:
    """Fans out one fetch per descriptor and joins them at a single barrier.

    Collections and uploads are listed, globals are fetched as singletons. The
    first failing fetch cancels the ones still in flight and aborts the pass, so
    no partial result ever reaches node creation.
    """

    def __init__(self, client: TransportClient, logger: Optional[ContextualLogger] = None):
        """Create the orchestrator.

        Args:
            client: Transport used for every fetch
            logger: Optional contextual logger
        """
        self.client = client
        self.logger = logger or default_logger

    async def fetch_all(
        self,
        collections: Sequence[TypeDescriptor],
        globals_: Sequence[TypeDescriptor],
        uploads: Sequence[TypeDescriptor],
    ) -> FetchPlanResult:
        """Fetch every descriptor of every category concurrently.

        Args:
            collections: Collection descriptors
            globals_: Global (singleton) descriptors
            uploads: Upload collection descriptors

        Returns:
            FetchPlanResult with one FetchResult per descriptor

        Raises:
            TransportError: For the first fetch that failed, tagged with its type
        """
        plan = (
            [(d, TypeCategory.COLLECTION, self.client.fetch_collection_list) for d in collections]
            + [(d, TypeCategory.GLOBAL, self.client.fetch_singleton) for d in globals_]
            + [(d, TypeCategory.UPLOAD, self.client.fetch_collection_list) for d in uploads]
        )
        self.logger.debug(
            f"Fetching {len(collections)} collections, {len(globals_)} globals "
            f"and {len(uploads)} upload types"
        )

        tasks = [
            asyncio.create_task(self._fetch_one(descriptor, category, fetch))
            for descriptor, category, fetch in plan
        ]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            # Let cancelled tasks unwind before propagating
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        n_collections = len(collections)
        n_globals = len(globals_)
        return FetchPlanResult(
            collections=list(results[:n_collections]),
            globals=list(results[n_collections : n_collections + n_globals]),
            uploads=list(results[n_collections + n_globals :]),
        )

    async def _fetch_one(
        self,
        descriptor: TypeDescriptor,
        category: TypeCategory,
        fetch: Callable[[TypeDescriptor], Awaitable[List[Entity]]],
    ) -> FetchResult:
        """Run a single fetch and tag any failure with the descriptor it belongs to."""
        try:
            entities = await fetch(descriptor)
        except TransportError as e:
            if e.type_name is None:
                e.type_name = descriptor.slug
                e.category = category.value
            self.logger.error(f"Fetching {category.value} '{descriptor.slug}' failed: {e}")
            raise
        except Exception as e:
            # httpx errors and anything a custom transport raises
            self.logger.error(f"Fetching {category.value} '{descriptor.slug}' failed: {e}")
            raise TransportError(
                str(e) or type(e).__name__, type_name=descriptor.slug, category=category.value
            ) from e

        self.logger.debug(
            f"Fetched {len(entities)} entities for {category.value} '{descriptor.slug}'"
        )
        return FetchResult(descriptor=descriptor, entities=list(entities))
