"""Entity and node models."""

from ._base import (
    AssetNode,
    Entity,
    FetchResult,
    NodeInternal,
    SimpleType,
    TypeCategory,
    TypeDescriptor,
    TypeWithOverrides,
)

__all__ = [
    "AssetNode",
    "Entity",
    "FetchResult",
    "NodeInternal",
    "SimpleType",
    "TypeCategory",
    "TypeDescriptor",
    "TypeWithOverrides",
]
