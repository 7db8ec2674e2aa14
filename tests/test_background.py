"""Tests for background-image layer resolution."""

import pytest

from dom_snapshot.core.context import CaptureOptions
from dom_snapshot.core.errors import NetworkFailure
from dom_snapshot.resolvers.background import BackgroundResolver, is_gradient
from dom_snapshot.resolvers.image import ImageResolver


BASE_URL = "https://app.test/"


@pytest.fixture
def backgrounds(cache, fetcher):
    return BackgroundResolver(cache, ImageResolver(cache, fetcher))


@pytest.mark.parametrize("entry", [
    "none",
    "linear-gradient(red, blue)",
    "repeating-radial-gradient(circle, red 0, blue 10px)",
    "image-set(a 1x)",
])
@pytest.mark.asyncio
async def test_non_url_entries_pass_through(backgrounds, cache, fetcher, entry):
    assert await backgrounds.resolve_entry(entry) == entry
    assert fetcher.calls == []
    assert len(cache.background) == 0
    assert len(cache.image) == 0


def test_is_gradient():
    assert is_gradient("linear-gradient(red, blue)")
    assert is_gradient("  CONIC-GRADIENT(red, blue)")
    assert not is_gradient('url("a.png")')


@pytest.mark.asyncio
async def test_url_entry_is_inlined(backgrounds, cache, fetcher, jpeg_bytes):
    fetcher.add("https://app.test/bg.jpg", jpeg_bytes, content_type="image/jpeg")
    
    value = await backgrounds.resolve_entry(
        'url("https://app.test/bg.jpg")', CaptureOptions(base_url=BASE_URL)
    )
    
    assert value.startswith('url("data:image/png;base64,')
    assert value.endswith('")')
    assert cache.background.has("https://app.test/bg.jpg")
    assert cache.image.has("https://app.test/bg.jpg")


@pytest.mark.asyncio
async def test_cached_background_needs_no_io(backgrounds, cache, fetcher):
    cache.background.set("https://app.test/bg.png", "data:image/png;base64,AAAA")
    
    value = await backgrounds.resolve_entry("url(https://app.test/bg.png)")
    
    assert value == 'url("data:image/png;base64,AAAA")'
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_skip_inline_only_warms_cache(backgrounds, cache, fetcher, png_bytes):
    fetcher.add("https://app.test/bg.png", png_bytes)
    
    value = await backgrounds.resolve_entry(
        "url('https://app.test/bg.png')",
        CaptureOptions(base_url=BASE_URL, skip_inline=True),
    )
    
    assert value is None
    assert cache.background.has("https://app.test/bg.png")


@pytest.mark.asyncio
async def test_url_is_encoded_before_lookup(backgrounds, cache, fetcher, png_bytes):
    fetcher.add("https://cdn.test/my%20bg.png", png_bytes, content_type="image/png")
    
    await backgrounds.resolve_entry("url(https://cdn.test/my bg.png)")
    
    assert fetcher.urls[0] == "https://cdn.test/my%20bg.png"
    assert cache.background.get("https://cdn.test/my%20bg.png").startswith("data:image/png;base64,")


@pytest.mark.asyncio
async def test_failed_image_propagates_and_is_not_cached(backgrounds, cache):
    with pytest.raises(NetworkFailure):
        await backgrounds.resolve_entry("url(https://cdn.test/missing.png)")
    
    assert len(cache.background) == 0


@pytest.mark.asyncio
async def test_malformed_url_raises_resolution_error(backgrounds, cache):
    with pytest.raises(NetworkFailure):
        await backgrounds.resolve_entry(
            "url(http://[bad/x.png)", CaptureOptions(base_url=BASE_URL)
        )
    
    assert len(cache.background) == 0
