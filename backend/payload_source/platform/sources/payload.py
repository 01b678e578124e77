"""Payload CMS source: owns the session and the transport across passes."""

from typing import Any, Dict, Optional, Union

import httpx

from payload_source.core.constants import PLUGIN_NAME
from payload_source.core.logging import ContextualLogger
from payload_source.core.logging import logger as default_logger
from payload_source.platform.contexts.protocol import (
    CacheStore,
    FileMaterializer,
    NodeSink,
    ProgressReporter,
    TransportClient,
)
from payload_source.platform.downloader.service import RemoteFileMaterializer
from payload_source.platform.http_client.payload_client import PayloadHttpClient
from payload_source.platform.sync.config import PluginOptions
from payload_source.platform.sync.context import LoggingReporter, SyncContext, SyncSession
from payload_source.platform.sync.orchestrator import FetchPlanResult
from payload_source.platform.sync.relationships import UploadReferenceRule, is_populated_upload
from payload_source.platform.sync.source_nodes import source_nodes


class PayloadSource:
    """Syncs one Payload site into a host graph store.

    Keep one instance for the lifetime of the process: the first call to
    ``source_nodes`` touches nodes left from earlier runs, later calls don't.
    """

    def __init__(
        self,
        options: PluginOptions,
        client: TransportClient,
        materializer: Optional[FileMaterializer] = None,
        session: Optional[SyncSession] = None,
        is_upload_reference: UploadReferenceRule = is_populated_upload,
        logger: Optional[ContextualLogger] = None,
    ):
        """Create the source from already built collaborators.

        Args:
            options: Plugin options
            client: Transport for the Payload API
            materializer: File materializer, needed when ``local_files`` is set
            session: Process-lifetime session (a new one by default)
            is_upload_reference: Rule that recognises upload references
            logger: Optional contextual logger
        """
        self.options = options
        self.client = client
        self.materializer = materializer
        self.session = session or SyncSession()
        self.is_upload_reference = is_upload_reference
        self.logger = (logger or default_logger).with_context(plugin=PLUGIN_NAME)

    @classmethod
    def create(
        cls,
        options: Union[PluginOptions, Dict[str, Any]],
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[ContextualLogger] = None,
    ) -> "PayloadSource":
        """Create a source with the default httpx transport and file materializer.

        Args:
            options: Plugin options, or a raw mapping using the camelCase keys
            transport: Optional httpx transport shared by API and file requests
            logger: Optional contextual logger

        Returns:
            Configured PayloadSource instance
        """
        if not isinstance(options, PluginOptions):
            options = PluginOptions.model_validate(options)

        client = PayloadHttpClient.from_options(options, transport=transport, logger=logger)
        materializer = None
        if options.local_files:
            materializer = RemoteFileMaterializer(
                httpx.AsyncClient(timeout=httpx.Timeout(options.timeout), transport=transport),
                max_retries=options.max_retries,
                logger=logger,
            )
        return cls(options, client, materializer=materializer, logger=logger)

    async def source_nodes(
        self,
        sink: NodeSink,
        cache: CacheStore,
        reporter: Optional[ProgressReporter] = None,
    ) -> FetchPlanResult:
        """Run one sync pass into ``sink``.

        Raises:
            PayloadSourceError: Any fatal error of the pass
        """
        context = SyncContext(
            options=self.options,
            session=self.session,
            sink=sink,
            cache=cache,
            reporter=reporter or LoggingReporter(f"Sourcing from {PLUGIN_NAME} API", self.logger),
            logger=self.logger,
        )
        return await source_nodes(
            context,
            self.client,
            materializer=self.materializer,
            is_upload_reference=self.is_upload_reference,
        )

    async def aclose(self) -> None:
        """Close the HTTP clients this source created."""
        close = getattr(self.client, "aclose", None)
        if close is not None:
            await close()
        if isinstance(self.materializer, RemoteFileMaterializer):
            await self.materializer.client.aclose()
