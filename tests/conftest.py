"""Shared fixtures: an in-memory fetcher and generated image payloads."""

import asyncio
import io

import pytest
from bs4 import BeautifulSoup
from PIL import Image

from dom_snapshot.core.cache import ResourceCache
from dom_snapshot.core.errors import NetworkFailure
from dom_snapshot.core.plugins import PluginRegistry
from dom_snapshot.resolvers.fetch import FetchedAsset


HANG = object()


class FakeFetcher:
    """Serves canned responses by URL and records every request."""

    def __init__(self):
        self.responses = {}
        self.calls = []

    def add(self, url, body, content_type="image/png", headers=None):
        self.responses[url] = FetchedAsset(
            url=url,
            status=200,
            content_type=content_type,
            body=body,
            headers=dict(headers or {}),
        )

    def fail(self, url, error):
        self.responses[url] = error

    def hang(self, url):
        self.responses[url] = HANG

    @property
    def urls(self):
        return [url for url, _ in self.calls]

    async def fetch(self, url, credentials=False):
        self.calls.append((url, credentials))
        await asyncio.sleep(0)
        response = self.responses.get(url)
        if response is None:
            raise NetworkFailure(f"HTTP 404 for {url}", url)
        if response is HANG:
            await asyncio.sleep(3600)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self):
        pass


def make_image_bytes(fmt="PNG", size=(2, 3), color="red"):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def cache():
    return ResourceCache()


@pytest.fixture
def registry():
    return PluginRegistry()


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG", color="blue")


@pytest.fixture
def card_document():
    html = """
    <html><head><title>t</title></head><body>
      <div id="card" style="width:200px;height:100px;color:red">
        <img src="https://app.test/pic.png" alt="pic">
        <div class="bg" style="background-image:url(https://cdn.test/bg.png)"></div>
      </div>
    </body></html>
    """
    return BeautifulSoup(html, "html.parser")
