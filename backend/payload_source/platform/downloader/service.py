"""Download remote uploads to local disk and register them as file nodes."""

import hashlib
import os
from typing import Any, Callable, Dict, Optional
from urllib.parse import unquote, urlparse

import httpx
from tenacity import AsyncRetrying, stop_after_attempt

from payload_source.core.config import settings
from payload_source.core.constants import NodeTypes
from payload_source.core.exceptions import MaterializationError
from payload_source.core.logging import ContextualLogger
from payload_source.core.logging import logger as default_logger
from payload_source.platform.contexts.protocol import NodeSink
from payload_source.platform.sources.retry_helpers import (
    retry_if_rate_limit_or_timeout,
    wait_rate_limit_with_backoff,
)


class RemoteFileMaterializer:
    """File materializer that writes uploads under a cache directory.

    Responsibilities:
    - Download a url to a stable path derived from the url (re-downloads overwrite)
    - Register a ``File`` node for it through the host store
    - Translate any failure into ``MaterializationError``
    """

    # Maximum file size we'll download (1GB)
    MAX_FILE_SIZE_BYTES = 1073741824

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_dir: Optional[str] = None,
        max_retries: int = settings.HTTP_MAX_RETRIES,
        wait=wait_rate_limit_with_backoff,
        logger: Optional[ContextualLogger] = None,
    ):
        """Create the materializer.

        Args:
            client: HTTP client used for downloads
            base_dir: Directory files are written to (defaults under CACHE_DIR)
            max_retries: Attempts for rate limits and timeouts
            wait: tenacity wait strategy between attempts
            logger: Optional contextual logger
        """
        self.client = client
        self.base_dir = base_dir or os.path.join(settings.CACHE_DIR, "files")
        self.max_retries = max_retries
        self._wait = wait
        self.logger = logger or default_logger

    def local_path(self, url: str) -> str:
        """Stable local path for a url: ``<base_dir>/<sha1(url)>/<filename>``."""
        filename = os.path.basename(unquote(urlparse(url).path)) or "file"
        digest = hashlib.sha1(url.encode("utf-8")).hexdigest()
        return os.path.join(self.base_dir, digest, filename)

    async def _download_with_retry(self, url: str, path: str) -> int:
        """Stream ``url`` to ``path`` with retries for rate limits and timeouts.

        Returns:
            Number of bytes written
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            retry=retry_if_rate_limit_or_timeout,
            wait=self._wait,
            reraise=True,
        ):
            with attempt:
                async with self.client.stream("GET", url, follow_redirects=True) as response:
                    response.raise_for_status()

                    os.makedirs(os.path.dirname(path), exist_ok=True)
                    size = 0
                    with open(path, "wb") as f:
                        async for chunk in response.aiter_bytes():
                            size += len(chunk)
                            if size > self.MAX_FILE_SIZE_BYTES:
                                raise MaterializationError(
                                    f"File too large (max 1GB): {url}", url=url
                                )
                            f.write(chunk)
        return size

    async def materialize(
        self, url: str, create_node_id: Callable[[], str], sink: NodeSink
    ) -> Dict[str, Any]:
        """Download ``url`` and create a ``File`` node for it.

        Args:
            url: Fully qualified url of the file
            create_node_id: Returns the id of the file node
            sink: Host store the node is created in

        Returns:
            The created file node

        Raises:
            MaterializationError: If the download or the node creation fails
        """
        path = self.local_path(url)
        try:
            size = await self._download_with_retry(url, path)
        except MaterializationError:
            self._remove_partial(path)
            raise
        except (httpx.HTTPError, OSError) as e:
            self._remove_partial(path)
            raise MaterializationError(f"Failed to download {url}: {e}", url=url) from e

        name, ext = os.path.splitext(os.path.basename(path))
        node = {
            "id": create_node_id(),
            "url": url,
            "absolutePath": os.path.abspath(path),
            "base": os.path.basename(path),
            "name": name,
            "ext": ext,
            "size": size,
            "parent": None,
            "children": [],
            "internal": {
                "type": NodeTypes.FILE,
                "contentDigest": sink.create_content_digest({"url": url, "size": size}),
            },
        }
        try:
            sink.create_node(node)
        except Exception as e:
            raise MaterializationError(
                f"Failed to register file node for {url}: {e}", url=url
            ) from e

        self.logger.debug(f"Downloaded {url} to {path} ({size} bytes)")
        return node

    def _remove_partial(self, path: str) -> None:
        if os.path.exists(path):
            os.remove(path)
