"""One sync pass: fetch everything from Payload and turn it into nodes."""

from typing import List, Optional

from payload_source.core.exceptions import PayloadSourceError
from payload_source.platform.contexts.protocol import FileMaterializer, TransportClient
from payload_source.platform.entities._base import FetchResult
from payload_source.platform.sync.asset_resolver import AssetResolver
from payload_source.platform.sync.context import SyncContext
from payload_source.platform.sync.node_builder import NodeBuilder, node_type_name
from payload_source.platform.sync.orchestrator import FetchOrchestrator, FetchPlanResult
from payload_source.platform.sync.reconciler import StaleNodeReconciler
from payload_source.platform.sync.relationships import (
    RelationshipIndexer,
    UploadReferenceRule,
    is_populated_upload,
)
from payload_source.platform.sync.state import SyncStateStore
from payload_source.platform.sync.type_normalizer import normalize_types


async def source_nodes(
    context: SyncContext,
    client: TransportClient,
    materializer: Optional[FileMaterializer] = None,
    is_upload_reference: UploadReferenceRule = is_populated_upload,
) -> FetchPlanResult:
    """Run one pass.

    Order of work:
    1. touch nodes from earlier runs (first pass of the session only)
    2. normalize the configured types
    3. fetch every type concurrently and wait for all of them
    4. create collection nodes, then global nodes, indexing upload references
    5. create upload nodes, with local file and/or CDN asset nodes
    6. store the pass timestamp

    Any failure aborts the pass before the timestamp is stored. Nodes already
    submitted stay in the store; the next successful pass recreates them.

    Args:
        context: Pass context (options, session, sink, cache, reporter, logger)
        client: Transport used to reach Payload
        materializer: File materializer, required when ``local_files`` is set
        is_upload_reference: Rule that recognises upload references in documents

    Returns:
        The fetched entities, grouped per category and descriptor
    """
    options = context.options
    logger = context.logger.with_context(pass_id=context.pass_id)
    reporter = context.reporter
    reporter.start()

    try:
        touched = StaleNodeReconciler(logger=logger).reconcile(context.session, context.sink)
        if touched:
            reporter.verbose(f"Touched {touched} existing nodes")
        context.session.passes += 1

        state_store = SyncStateStore(context.cache, logger=logger)
        last_state = await state_store.load()
        reporter.verbose(
            "Last fetched date: "
            f"{last_state.last_fetched_timestamp if last_state else 'never'}"
        )

        collection_types = normalize_types(options.collection_types, options.endpoint)
        global_types = normalize_types(options.global_types, options.endpoint)
        upload_types = normalize_types(options.upload_types, options.endpoint)

        fetched = await FetchOrchestrator(client, logger=logger).fetch_all(
            collection_types, global_types, upload_types
        )
        reporter.set_status(f"Processing {fetched.entity_count} entities")

        await _create_nodes(context, fetched, materializer, is_upload_reference)

        await state_store.save(context.started_at_ms)
    except PayloadSourceError as e:
        logger.error(f"Sync pass failed: {e}")
        raise
    finally:
        reporter.end()

    return fetched


async def _create_nodes(
    context: SyncContext,
    fetched: FetchPlanResult,
    materializer: Optional[FileMaterializer],
    is_upload_reference: UploadReferenceRule,
) -> None:
    options = context.options
    logger = context.logger.with_context(pass_id=context.pass_id)
    nodes = NodeBuilder(context.sink, logger=logger)
    indexer = RelationshipIndexer(is_upload_reference)

    for result in fetched.collections:
        type_name = node_type_name(result.slug, options.node_prefix)
        for entity in result.entities:
            nodes.create(type_name, entity)
            if context.needs_relationships:
                indexer.index_collection_entity(result.slug, entity)

    for result in fetched.globals:
        type_name = node_type_name(result.slug, options.node_prefix)
        for entity in result.entities:
            nodes.create(type_name, entity)
            if context.needs_relationships:
                indexer.index_global_entity(result.slug, entity)

    logger.debug(f"Relationship index holds {len(indexer.index)} references")

    assets = AssetResolver(
        context.sink,
        indexer.index,
        base_url=options.base_url,
        materializer=materializer,
        logger=logger,
    )
    await _create_upload_nodes(context, fetched.uploads, nodes, assets)


async def _create_upload_nodes(
    context: SyncContext,
    uploads: List[FetchResult],
    nodes: NodeBuilder,
    assets: AssetResolver,
) -> None:
    options = context.options
    for result in uploads:
        type_name = node_type_name(result.slug, options.node_prefix)
        for entity in result.entities:
            extra = {}
            if options.local_files:
                await assets.create_local_file_node(entity)
            if options.image_cdn:
                extra["gatsbyImageCdn"] = assets.create_asset_node(entity)
            nodes.create(type_name, entity, extra=extra)
