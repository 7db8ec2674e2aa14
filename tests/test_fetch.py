"""Tests for the HTTP asset fetcher against a local aiohttp server."""

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from dom_snapshot.core.errors import NetworkFailure
from dom_snapshot.resolvers.fetch import AssetFetcher, FetchedAsset


async def image_handler(request):
    return web.Response(
        body=b"\x89PNG-bytes",
        content_type="image/png",
        headers={"Access-Control-Allow-Origin": "*"},
    )


async def missing_handler(request):
    return web.Response(status=404, text="missing")


async def agent_handler(request):
    return web.Response(text=request.headers.get("User-Agent", ""))


@pytest_asyncio.fixture
async def server():
    app = web.Application()
    app.router.add_get("/a.png", image_handler)
    app.router.add_get("/missing.png", missing_handler)
    app.router.add_get("/agent", agent_handler)
    test_server = TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


@pytest.mark.asyncio
async def test_fetch_returns_body_and_headers(server):
    async with AssetFetcher() as fetcher:
        asset = await fetcher.fetch(str(server.make_url("/a.png")))
    
    assert asset.status == 200
    assert asset.body == b"\x89PNG-bytes"
    assert asset.content_type.startswith("image/png")
    assert asset.header("access-control-allow-origin") == "*"


@pytest.mark.asyncio
async def test_non_success_status_raises(server):
    async with AssetFetcher() as fetcher:
        with pytest.raises(NetworkFailure) as excinfo:
            await fetcher.fetch(str(server.make_url("/missing.png")), credentials=True)
    
    assert "404" in str(excinfo.value)


@pytest.mark.asyncio
async def test_connection_error_raises():
    async with AssetFetcher(timeout=5) as fetcher:
        with pytest.raises(NetworkFailure):
            await fetcher.fetch("http://127.0.0.1:1/a.png")


@pytest.mark.asyncio
async def test_user_agent_is_sent(server):
    async with AssetFetcher(user_agent="snapshot-test/1.0") as fetcher:
        asset = await fetcher.fetch(str(server.make_url("/agent")))
    
    assert asset.text() == "snapshot-test/1.0"


@pytest.mark.asyncio
async def test_close_releases_sessions(server):
    fetcher = AssetFetcher()
    await fetcher.fetch(str(server.make_url("/a.png")), credentials=True)
    await fetcher.fetch(str(server.make_url("/a.png")), credentials=False)
    
    assert len(fetcher._sessions) == 2
    await fetcher.close()
    assert fetcher._sessions == {}


def test_fetched_asset_header_lookup_is_case_insensitive():
    asset = FetchedAsset(
        url="https://x.test/a",
        status=200,
        content_type="text/plain",
        body=b"caf\xc3\xa9",
        headers={"Content-Type": "text/plain"},
    )
    
    assert asset.header("content-type") == "text/plain"
    assert asset.header("X-Missing") is None
    assert asset.text() == "café"
