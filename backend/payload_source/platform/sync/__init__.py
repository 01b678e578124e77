"""Sync engine for the Payload source.

Provides:
- source_nodes: Runs one pass, from type normalization to node creation
- FetchOrchestrator: Fetches every configured type concurrently
- RelationshipIndexer: Finds which documents reference which uploads
- NodeBuilder: Builds nodes with deterministic ids and digests
- AssetResolver: Creates local file and CDN asset nodes for uploads
- StaleNodeReconciler: Touches nodes from earlier runs once per session
"""

from .asset_resolver import AssetResolver
from .config import PluginOptions
from .context import LoggingReporter, SyncContext, SyncSession
from .node_builder import NodeBuilder, node_type_name
from .orchestrator import FetchOrchestrator, FetchPlanResult
from .reconciler import StaleNodeReconciler
from .relationships import AssetKey, RelationshipIndex, RelationshipIndexer
from .source_nodes import source_nodes
from .state import SyncState, SyncStateStore
from .type_normalizer import normalize_types

__all__ = [
    "AssetKey",
    "AssetResolver",
    "FetchOrchestrator",
    "FetchPlanResult",
    "LoggingReporter",
    "NodeBuilder",
    "PluginOptions",
    "RelationshipIndex",
    "RelationshipIndexer",
    "StaleNodeReconciler",
    "SyncContext",
    "SyncSession",
    "SyncState",
    "SyncStateStore",
    "node_type_name",
    "normalize_types",
    "source_nodes",
]
