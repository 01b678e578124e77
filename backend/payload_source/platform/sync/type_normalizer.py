"""Normalize loosely typed type configuration into fetch descriptors."""

from typing import Any, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from payload_source.core.exceptions import InvalidTypeConfig
from payload_source.platform.entities._base import (
    SimpleType,
    TypeConfig,
    TypeDescriptor,
    TypeWithOverrides,
)


def parse_type_config(entry: Any) -> TypeConfig:
    """Parse one configuration entry into its tagged variant.

    Args:
        entry: Either a bare slug (``"posts"``) or a mapping such as
            ``{"slug": "posts", "locale": "de", "params": {"depth": 2}}``.

    Returns:
        ``SimpleType`` for a string, ``TypeWithOverrides`` for a mapping

    Raises:
        InvalidTypeConfig: If the entry is neither, or the mapping is malformed
    """
    if isinstance(entry, (SimpleType, TypeWithOverrides)):
        return entry

    try:
        if isinstance(entry, str):
            return SimpleType(name=entry.strip())
        if isinstance(entry, Mapping):
            return TypeWithOverrides.model_validate(dict(entry))
    except ValidationError as e:
        raise InvalidTypeConfig(f"Invalid type configuration {entry!r}: {e}", entry) from e

    raise InvalidTypeConfig(
        f"Type configuration must be a slug or a mapping with a 'slug', "
        f"got {type(entry).__name__}: {entry!r}",
        entry,
    )


def to_descriptor(config: TypeConfig, endpoint: str) -> TypeDescriptor:
    """Build a descriptor from a parsed entry, defaulting the endpoint."""
    if isinstance(config, SimpleType):
        return TypeDescriptor(slug=config.name, endpoint=endpoint)
    return TypeDescriptor(
        slug=config.slug,
        endpoint=(config.endpoint or endpoint).rstrip("/"),
        locale=config.locale,
        params=dict(config.params),
    )


def normalize_types(types: Optional[Iterable[Any]], endpoint: str) -> List[TypeDescriptor]:
    """Convert a heterogeneous list of type entries into ordered descriptors.

    Args:
        types: Bare slugs and/or override mappings, or None
        endpoint: Base endpoint used where an entry does not override it

    Returns:
        One descriptor per entry, in input order

    Raises:
        InvalidTypeConfig: If any entry is malformed
    """
    if types is None:
        return []
    if isinstance(types, (str, Mapping)):
        raise InvalidTypeConfig(f"Type configuration must be a list, got {types!r}", types)

    base_endpoint = endpoint.rstrip("/")
    return [to_descriptor(parse_type_config(entry), base_endpoint) for entry in types]
