"""PayloadHttpClient - transport for the Payload REST API.

Wraps an ``httpx.AsyncClient`` configured from the plugin options (base url,
API key, headers, timeout) and exposes the two fetch shapes the sync engine
needs:

- ``fetch_collection_list``: ``GET {endpoint}/{slug}``, following pages until
  ``hasNextPage`` is false
- ``fetch_singleton``: ``GET {endpoint}/globals/{slug}``, returned as a list of
  one document

Rate limits and timeouts are retried with tenacity; any other HTTP failure is
raised as ``TransportError``.
"""

from typing import Any, Dict, List, Mapping, Optional

import httpx
from tenacity import AsyncRetrying, stop_after_attempt

from payload_source.core.config import settings
from payload_source.core.exceptions import TransportError
from payload_source.core.logging import ContextualLogger
from payload_source.core.logging import logger as default_logger
from payload_source.platform.entities._base import Entity, TypeDescriptor
from payload_source.platform.sources.retry_helpers import (
    retry_if_rate_limit_or_timeout,
    wait_rate_limit_with_backoff,
)
from payload_source.platform.sync.config import PluginOptions


def flatten_query_params(params: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested params into Payload's bracket syntax.

    ``{"where": {"status": {"equals": "published"}}}`` becomes
    ``{"where[status][equals]": "published"}``. Lists keep their index.
    """
    flat: Dict[str, Any] = {}
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten_query_params(value, name))
        elif isinstance(value, (list, tuple)):
            flat.update(flatten_query_params(dict(enumerate(value)), name))
        elif value is not None:
            flat[name] = value
    return flat


class PayloadHttpClient:
    """Async client for the Payload REST API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        page_size: int = settings.DEFAULT_PAGE_SIZE,
        max_retries: int = settings.HTTP_MAX_RETRIES,
        wait=wait_rate_limit_with_backoff,
        logger: Optional[ContextualLogger] = None,
    ):
        """Wrap an existing httpx client.

        Args:
            client: Client used for every request
            page_size: ``limit`` sent when listing collections
            max_retries: Attempts for retryable failures
            wait: tenacity wait strategy between attempts
            logger: Optional contextual logger
        """
        self._client = client
        self.page_size = page_size
        self.max_retries = max_retries
        self._wait = wait
        self.logger = logger or default_logger

    @classmethod
    def from_options(
        cls,
        options: PluginOptions,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[ContextualLogger] = None,
    ) -> "PayloadHttpClient":
        """Create a client from plugin options.

        Args:
            options: Plugin options (api key, headers, timeout, page size, retries)
            transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests
            logger: Optional contextual logger
        """
        headers = {"Accept": "application/json", **options.headers}
        if options.api_key:
            headers["Authorization"] = f"{options.api_key_collection} API-Key {options.api_key}"

        client = httpx.AsyncClient(
            headers=headers,
            timeout=httpx.Timeout(options.timeout),
            follow_redirects=True,
            transport=transport,
        )
        return cls(
            client,
            page_size=options.page_size,
            max_retries=options.max_retries,
            logger=logger,
        )

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a url and decode its JSON body, retrying rate limits and timeouts.

        Raises:
            TransportError: On any HTTP error left after retries, or a non-JSON body
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                retry=retry_if_rate_limit_or_timeout,
                wait=self._wait,
                reraise=True,
            ):
                with attempt:
                    response = await self._client.get(url, params=params)
                    if response.status_code == 429:
                        retry_after = response.headers.get("Retry-After", "unknown")
                        self.logger.warning(
                            f"Rate limit hit (429) for {url} (will retry after {retry_after}s)"
                        )
                    response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"HTTP {e.response.status_code} for {url}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {url} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from {url}: {e}") from e

    def _query(self, descriptor: TypeDescriptor) -> Dict[str, Any]:
        params = dict(descriptor.params)
        if settings.DEFAULT_DEPTH is not None:
            params.setdefault("depth", settings.DEFAULT_DEPTH)
        if descriptor.locale:
            params["locale"] = descriptor.locale
        return flatten_query_params(params)

    def _stamp_locale(self, descriptor: TypeDescriptor, entity: Entity) -> Entity:
        # Payload does not echo the requested locale; keep it so node ids differ per locale
        if descriptor.locale and not entity.get("locale"):
            return {**entity, "locale": descriptor.locale}
        return entity

    async def fetch_collection_list(self, descriptor: TypeDescriptor) -> List[Entity]:
        """Fetch every document of a collection, page by page.

        Args:
            descriptor: Collection or upload descriptor

        Returns:
            All documents, in the order Payload returned them
        """
        url = f"{descriptor.endpoint}/{descriptor.slug}"
        query = self._query(descriptor)
        page_size = query.pop("limit", self.page_size)
        page = 1
        entities: List[Entity] = []

        while True:
            body = await self._get_json(url, params={**query, "limit": page_size, "page": page})
            if not isinstance(body, dict) or not isinstance(body.get("docs"), list):
                raise TransportError(f"Unexpected list response from {url}")

            entities.extend(self._stamp_locale(descriptor, doc) for doc in body["docs"])
            self.logger.debug(
                f"Fetched page {page} of '{descriptor.slug}' ({len(body['docs'])} documents)"
            )

            if not body.get("hasNextPage"):
                break
            page = body.get("nextPage") or page + 1

        return entities

    async def fetch_singleton(self, descriptor: TypeDescriptor) -> List[Entity]:
        """Fetch a global.

        Returns:
            A list with the global document, or an empty list when Payload has none
        """
        url = f"{descriptor.endpoint}/globals/{descriptor.slug}"
        body = await self._get_json(url, params=self._query(descriptor))
        if not body:
            return []
        if not isinstance(body, dict):
            raise TransportError(f"Unexpected global response from {url}")
        if "id" not in body:
            body = {"id": descriptor.slug, **body}
        return [self._stamp_locale(descriptor, body)]

    async def __aenter__(self) -> "PayloadHttpClient":
        """Enter async context manager."""
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *args) -> None:
        """Exit async context manager."""
        await self._client.__aexit__(*args)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    @property
    def is_closed(self) -> bool:
        """Check if client is closed."""
        return self._client.is_closed
