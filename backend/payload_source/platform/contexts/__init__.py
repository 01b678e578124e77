"""Ports the sync engine talks to and the per-pass context."""

from .protocol import (
    CacheStore,
    FileMaterializer,
    NodeSink,
    ProgressReporter,
    TransportClient,
)

__all__ = [
    "CacheStore",
    "FileMaterializer",
    "NodeSink",
    "ProgressReporter",
    "TransportClient",
]
