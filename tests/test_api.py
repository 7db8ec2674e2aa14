"""Tests for the public API, options and capture results."""

import pytest
import pytest_asyncio

import dom_snapshot
from dom_snapshot import CaptureOptions, Plugin, ResourceCache, clear_plugins, pre_cache, snapdom, use
from dom_snapshot.core.errors import InvalidInputError, InvalidPluginError
from dom_snapshot.core.plugins import HookName, PluginRegistry
from dom_snapshot.export.result import CaptureResult


BASE_URL = "https://app.test/index.html"


class FakeRenderer:
    """Records rasterize calls instead of starting a browser."""

    def __init__(self):
        self.calls = []

    async def rasterize(self, svg_url, width, height, **kwargs):
        self.calls.append((width, height, kwargs))
        return b"RASTER-" + kwargs["image_type"].encode()


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest_asyncio.fixture
async def card_result(card_document, cache, registry, fetcher, renderer, png_bytes):
    fetcher.add("https://app.test/pic.png", png_bytes)
    return await snapdom(
        card_document.find(id="card"),
        cache=cache,
        registry=registry,
        fetcher=fetcher,
        renderer=renderer,
        base_url=BASE_URL,
    )


class TestOptions:
    """Test option validation"""
    
    @pytest.mark.parametrize("kwargs", [
        {"scale": 0},
        {"width": -5},
        {"timeout_ms": 0},
        {"dpr": 0},
        {"scale": True},
        {"width": True},
        {"height": False},
        {"timeout_ms": True},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(InvalidInputError):
            CaptureOptions(**kwargs)
    
    def test_unknown_option(self):
        with pytest.raises(InvalidInputError):
            CaptureOptions.from_kwargs(colour="red")
    
    def test_format_is_normalized(self):
        assert CaptureOptions(format="JPEG").format == "jpg"
        assert CaptureOptions(format=".png").format == "png"
    
    def test_merged_returns_copy(self):
        options = CaptureOptions(scale=2)
        merged = options.merged(quality=0.8)
        assert (merged.scale, merged.quality) == (2, 0.8)
        assert options.quality is None


class TestSnapdom:
    """Test the capture entry point"""
    
    @pytest.mark.asyncio
    async def test_none_element(self):
        with pytest.raises(InvalidInputError):
            await snapdom(None)
    
    @pytest.mark.asyncio
    async def test_unknown_option(self, card_document, fetcher):
        with pytest.raises(InvalidInputError):
            await snapdom(card_document.find(id="card"), fetcher=fetcher, zoom=2)
    
    @pytest.mark.asyncio
    async def test_returns_result(self, card_result, cache):
        assert isinstance(card_result, CaptureResult)
        assert card_result.to_raw().startswith("data:image/svg+xml;charset=utf-8,")
        assert card_result.natural_size() == (200.0, 100.0)
        assert cache.image.has("https://app.test/pic.png")
    
    @pytest.mark.asyncio
    async def test_local_plugins(self, card_document, cache, registry, fetcher):
        seen = []
        plugin = {"name": "tracker", "post_export": lambda context: seen.append(context.url)}
        
        result = await snapdom(
            card_document.find(id="card"),
            cache=cache,
            registry=registry,
            fetcher=fetcher,
            plugins=[plugin],
        )
        
        assert seen == [result.url]


class TestCaptureResult:
    """Test result conversion and export"""
    
    @pytest.mark.asyncio
    async def test_svg_export(self, card_result):
        svg = card_result.to_svg()
        
        assert svg.startswith("<svg")
        assert await card_result.to_blob("svg") == svg.encode("utf-8")
    
    @pytest.mark.asyncio
    async def test_raster_export_uses_renderer(self, card_result, renderer):
        data = await card_result.to_png(scale=2, dpr=1.5)
        
        assert data == b"RASTER-png"
        width, height, kwargs = renderer.calls[0]
        assert (width, height) == (200.0, 100.0)
        assert kwargs["scale"] == 2
        assert kwargs["dpr"] == 1.5
    
    @pytest.mark.asyncio
    async def test_jpeg_alias(self, card_result, renderer):
        assert await card_result.to_blob("jpeg", quality=0.7) == b"RASTER-jpg"
        assert renderer.calls[0][2]["quality"] == 0.7
    
    @pytest.mark.asyncio
    async def test_unsupported_format(self, card_result):
        with pytest.raises(InvalidInputError):
            await card_result.to_blob("gif")
    
    def test_non_svg_url_is_rejected(self):
        with pytest.raises(InvalidInputError):
            CaptureResult("data:image/png;base64,AA").to_svg()
    
    @pytest.mark.asyncio
    async def test_save_infers_format_from_extension(self, card_result, tmp_path):
        target = tmp_path / "out" / "card.svg"
        
        path = await card_result.save(str(target))
        
        assert path == str(target)
        assert target.read_text(encoding="utf-8") == card_result.to_svg()
    
    @pytest.mark.asyncio
    async def test_save_default_filename(self, card_result, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        
        path = await card_result.save(format="webp")
        
        assert path == "snapshot.webp"
        assert (tmp_path / "snapshot.webp").read_bytes() == b"RASTER-webp"


class TestPreCache:
    """Test the cache warming entry point"""
    
    @pytest.mark.asyncio
    async def test_reset(self, cache, fetcher):
        cache.image.set("a", "b")
        
        await pre_cache(cache=cache, fetcher=fetcher, reset=True)
        
        assert len(cache.image) == 0
    
    @pytest.mark.asyncio
    async def test_warm_then_capture_reuses_nothing_stale(self, card_document, cache, fetcher, png_bytes):
        fetcher.add("https://app.test/pic.png", png_bytes)
        
        await pre_cache(card_document, cache=cache, fetcher=fetcher, base_url=BASE_URL)
        
        assert cache.image.has("https://app.test/pic.png")


class TestGlobalPlugins:
    """Test plugin registration through the API"""
    
    def test_use_and_clear(self):
        registry = PluginRegistry()
        
        use(Plugin(name="a", hooks={HookName.PRE_CLONE: lambda c: None}), registry)
        use({"name": "b"}, registry)
        assert [p.name for p in registry.global_plugins()] == ["a", "b"]
        
        clear_plugins(registry)
        assert registry.global_plugins() == []
    
    def test_use_without_name(self):
        with pytest.raises(InvalidPluginError):
            use({}, PluginRegistry())
    
    def test_package_exports(self):
        assert dom_snapshot.__version__ == "1.0.0"
        assert isinstance(dom_snapshot.ResourceCache(), ResourceCache)
