"""Models for type descriptors, fetched entities and produced nodes.

Fetched Payload documents are kept as plain JSON mappings (``Entity``); only the
handful of fields the engine reads get typed accessors below. The remote schema
is owned by the Payload project and is deliberately not modelled.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Entity = Dict[str, Any]


class TypeCategory(str, Enum):
    """Category of a Payload type, which decides how it is fetched."""

    COLLECTION = "collection"
    GLOBAL = "global"
    UPLOAD = "upload"


class SimpleType(BaseModel):
    """A type configured by its bare slug, e.g. ``"posts"``."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Payload slug of the type.")


class TypeWithOverrides(BaseModel):
    """A type configured as a mapping with per-type overrides."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    slug: str = Field(..., min_length=1, description="Payload slug of the type.")
    endpoint: Optional[str] = Field(None, description="Base endpoint for this type only.")
    locale: Optional[str] = Field(None, description="Locale requested for this type.")
    params: Dict[str, Any] = Field(
        default_factory=dict, description="Extra query parameters, e.g. depth or draft."
    )


TypeConfig = Union[SimpleType, TypeWithOverrides]


class TypeDescriptor(BaseModel):
    """Uniform fetch descriptor produced by the type normalizer."""

    model_config = ConfigDict(frozen=True)

    slug: str = Field(..., description="Payload slug of the type.")
    endpoint: str = Field(..., description="Base endpoint of the Payload REST API.")
    locale: Optional[str] = Field(None, description="Locale requested for this type.")
    params: Dict[str, Any] = Field(
        default_factory=dict, description="Extra query parameters, e.g. depth or draft."
    )


@dataclass
class FetchResult:
    """Entities fetched for a single descriptor."""

    descriptor: TypeDescriptor
    entities: List[Entity] = field(default_factory=list)

    @property
    def slug(self) -> str:
        """Slug of the descriptor these entities were fetched for."""
        return self.descriptor.slug


class NodeInternal(BaseModel):
    """The ``internal`` block every node carries."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    content_digest: str = Field(..., alias="contentDigest")


class AssetNode(BaseModel):
    """Remote image descriptor node used in CDN mode."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    url: str
    mime_type: Optional[str] = Field(None, alias="mimeType")
    filename: str
    width: Optional[int] = None
    height: Optional[int] = None
    relationships: List[str] = Field(default_factory=list)
    alt: str = ""
    parent: Optional[str] = None
    children: List[str] = Field(default_factory=list)
    internal: NodeInternal

    def to_node(self) -> Dict[str, Any]:
        """Dump to the node shape the host store expects (camelCase keys)."""
        return self.model_dump(by_alias=True)


def entity_locale(entity: Entity) -> Optional[str]:
    """Return the ``locale`` of an entity, or None when it has none."""
    return entity.get("locale") or None


def entity_image_size(entity: Entity) -> Optional[Dict[str, Any]]:
    """Return the named image size selected via ``payloadImageSize``, if any."""
    size_name = entity.get("payloadImageSize")
    sizes = entity.get("sizes")
    if not size_name or not isinstance(sizes, dict):
        return None
    size = sizes.get(size_name)
    if isinstance(size, dict) and size.get("url"):
        return size
    return None


def entity_image(entity: Entity) -> Dict[str, Any]:
    """Return the image metadata (url, mimeType, width, height) to use for an upload.

    When the entity selects a named size with ``payloadImageSize``, the size's
    metadata overrides the original's; missing keys fall back to the original.
    """
    size = entity_image_size(entity) or {}
    return {
        "url": size.get("url") or entity.get("url"),
        "mimeType": size.get("mimeType") or entity.get("mimeType"),
        "width": size.get("width", entity.get("width")),
        "height": size.get("height", entity.get("height")),
    }
