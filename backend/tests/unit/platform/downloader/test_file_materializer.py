"""Tests for the remote file materializer."""

import os

import httpx
import pytest
from tenacity import wait_none

from payload_source.core.exceptions import MaterializationError
from payload_source.platform.downloader.service import RemoteFileMaterializer


def _materializer(handler, tmp_path, **kwargs) -> RemoteFileMaterializer:
    return RemoteFileMaterializer(
        httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        base_dir=str(tmp_path),
        wait=wait_none(),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_downloads_and_registers_file_node(tmp_path, store):
    """Test that the file is written and a File node with the given id is created."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"jpeg-bytes")

    materializer = _materializer(handler, tmp_path)
    url = "https://cms.example.com/media/photo%20one.jpg"

    node = await materializer.materialize(url, create_node_id=lambda: "upload-1", sink=store)

    assert node["id"] == "upload-1"
    assert node["base"] == "photo one.jpg"
    assert node["ext"] == ".jpg"
    assert node["size"] == len(b"jpeg-bytes")
    assert node["internal"]["type"] == "File"
    with open(node["absolutePath"], "rb") as f:
        assert f.read() == b"jpeg-bytes"
    assert store.get_node("upload-1")["url"] == url


@pytest.mark.asyncio
async def test_repeated_downloads_reuse_the_same_path_and_node(tmp_path, store):
    """Test that a second pass overwrites the same file and node."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"bytes")

    materializer = _materializer(handler, tmp_path)
    url = "https://cms.example.com/media/a.png"

    first = await materializer.materialize(url, lambda: "upload-a", store)
    second = await materializer.materialize(url, lambda: "upload-a", store)

    assert first["absolutePath"] == second["absolutePath"]
    assert len(store.get_nodes_by_type("File")) == 1


@pytest.mark.asyncio
async def test_http_errors_become_materialization_errors(tmp_path, store):
    """Test that a 404 fails without leaving a node or a partial file."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    materializer = _materializer(handler, tmp_path)
    url = "https://cms.example.com/media/missing.png"

    with pytest.raises(MaterializationError) as exc_info:
        await materializer.materialize(url, lambda: "upload-x", store)

    assert exc_info.value.url == url
    assert store.get_all_nodes() == []
    assert not os.path.exists(materializer.local_path(url))


@pytest.mark.asyncio
async def test_rate_limited_download_is_retried(tmp_path, store):
    """Test that a 429 is retried before the download succeeds."""
    responses = iter([httpx.Response(429), httpx.Response(200, content=b"ok")])

    materializer = _materializer(lambda request: next(responses), tmp_path, max_retries=2)

    node = await materializer.materialize(
        "https://cms.example.com/media/b.png", lambda: "upload-b", store
    )

    assert node["size"] == 2
