"""Plugin options for one Payload site."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from payload_source.core.config import settings
from payload_source.core.constants import DEFAULT_NODE_PREFIX


class PluginOptions(BaseModel):
    """Declarative options for a Payload source.

    Accepts the camelCase keys used in site configuration files
    (``collectionTypes``, ``imageCdn``...) as well as snake_case names.
    Type entries are kept raw here; the type normalizer validates them at the
    start of each pass.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    endpoint: str = Field(..., description="Base url of the Payload REST API, e.g. .../api")
    collection_types: Optional[List[Any]] = Field(None, alias="collectionTypes")
    global_types: Optional[List[Any]] = Field(None, alias="globalTypes")
    upload_types: Optional[List[Any]] = Field(None, alias="uploadTypes")

    node_prefix: Optional[str] = Field(
        DEFAULT_NODE_PREFIX, alias="nodePrefix", description="Prefix for every node type"
    )
    local_files: bool = Field(False, alias="localFiles", description="Download uploads locally")
    image_cdn: bool = Field(False, alias="imageCdn", description="Create remote Asset nodes")
    base_url: str = Field("", alias="baseUrl", description="Base for relative upload urls")

    # Transport
    api_key: Optional[str] = Field(None, alias="apiKey", description="Payload API key")
    api_key_collection: str = Field(
        "users", alias="apiKeyCollection", description="Auth collection the API key belongs to"
    )
    headers: Dict[str, str] = Field(default_factory=dict, description="Extra request headers")
    page_size: int = Field(settings.DEFAULT_PAGE_SIZE, alias="pageSize", gt=0)
    timeout: float = Field(settings.HTTP_TIMEOUT, gt=0)
    max_retries: int = Field(settings.HTTP_MAX_RETRIES, alias="maxRetries", ge=1)

    @field_validator("endpoint")
    @classmethod
    def _strip_endpoint(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("endpoint must not be empty")
        return value

    @field_validator("base_url")
    @classmethod
    def _strip_base_url(cls, value: str) -> str:
        return value.strip().rstrip("/")
