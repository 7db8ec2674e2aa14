"""
Image resolver: turns an image reference into an embeddable data URL.

Raster images are loaded with a cross-origin check and re-encoded as PNG.
When that fails the resolver falls back to a plain fetch, then to the
configured proxy. SVG files are embedded as text so they stay vectors.
"""

import asyncio
import io
from typing import Dict, Optional

from PIL import Image, UnidentifiedImageError

from .fetch import AssetFetcher, FetchedAsset
from ..core.cache import ResourceCache
from ..core.context import CaptureOptions
from ..core.errors import (
    CorsBlockedError,
    DecodeFailure,
    ImageTimeoutError,
    NetworkFailure,
    ResolutionError,
)
from ..utils.log import get_logger
from ..utils.urls import (
    ANONYMOUS,
    USE_CREDENTIALS,
    encode_uri_component,
    get_cross_origin_mode,
    get_origin,
    is_data_image,
    is_svg_url,
    resolve_url,
    svg_to_data_url,
    to_data_url,
)


# Modes Pillow can write to PNG without conversion
PNG_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}


def reencode_png(body: bytes, source: str = "") -> bytes:
    """
    Decode image bytes and re-encode them as PNG at natural size.
    
    Args:
        body: Encoded image
        source: Reference used in error messages
        
    Returns:
        PNG bytes
        
    Raises:
        DecodeFailure: If the bytes are not a decodable image
    """
    try:
        with Image.open(io.BytesIO(body)) as image:
            image.load()
            if image.mode not in PNG_MODES:
                image = image.convert("RGBA")
            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
            return buffer.getvalue()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeFailure(f"Could not decode image {source}: {e}", source) from e


def resolve_reference(src: str, base_url: Optional[str] = None) -> str:
    """
    Resolve a reference against the document URL.
    
    Raises:
        NetworkFailure: If the reference is not a parseable URL
    """
    try:
        return resolve_url(src, base_url)
    except ValueError as e:
        raise NetworkFailure(f"Malformed URL {src}: {e}", src) from e


def request_mode(url: str, base_url: Optional[str] = None) -> str:
    """
    Get the credentials mode for a resolved URL.
    
    Raises:
        NetworkFailure: If the URL is not parseable
    """
    try:
        return get_cross_origin_mode(url, base_url)
    except ValueError as e:
        raise NetworkFailure(f"Malformed URL {url}: {e}", url) from e


def sniff_image_type(body: bytes) -> Optional[str]:
    """Get the media type of image bytes, or None if they are not an image."""
    try:
        with Image.open(io.BytesIO(body)) as image:
            return Image.MIME.get(image.format)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
        return None


class ImageResolver:
    """
    Resolves image references to data URLs, once per reference.
    
    Successful results are stored in the cache's image namespace under the
    raw reference. Failures are never cached. Concurrent requests for the
    same uncached reference share one underlying resolution.
    """
    
    def __init__(self, cache: ResourceCache, fetcher: AssetFetcher):
        """
        Initialize the image resolver.
        
        Args:
            cache: Cache receiving resolved images
            fetcher: HTTP fetcher used for every network access
        """
        self.cache = cache
        self.fetcher = fetcher
        self.logger = get_logger("image")
        self._inflight: Dict[str, asyncio.Future] = {}
    
    async def resolve(self, src: str, options: Optional[CaptureOptions] = None) -> str:
        """
        Resolve an image reference to a data URL.
        
        Args:
            src: Image reference (URL, data URL or SVG URL)
            options: Capture options (base_url, use_proxy, timeout_ms)
            
        Returns:
            Embeddable data URL
            
        Raises:
            ResolutionError: If every strategy failed
        """
        options = options or CaptureOptions()
        
        cached = self.cache.image.get(src)
        if cached is not None:
            return cached
        
        if is_data_image(src):
            self.cache.image.set(src, src)
            return src
        
        pending = self._inflight.get(src)
        if pending is None:
            pending = asyncio.ensure_future(self._resolve_uncached(src, options))
            self._inflight[src] = pending
            pending.add_done_callback(lambda done: self._forget(src, done))
        return await asyncio.shield(pending)
    
    def _forget(self, src: str, done: asyncio.Future) -> None:
        if self._inflight.get(src) is done:
            del self._inflight[src]
        # Mark the error as retrieved when every waiter went away
        if not done.cancelled():
            done.exception()
    
    async def _resolve_uncached(self, src: str, options: CaptureOptions) -> str:
        url = resolve_reference(src, options.base_url)
        mode = request_mode(url, options.base_url)
        
        if is_svg_url(url):
            try:
                asset = await self.fetcher.fetch(url, credentials=mode == USE_CREDENTIALS)
                data_url = svg_to_data_url(asset.text())
            except ResolutionError as e:
                self.logger.debug(f"SVG fetch failed for {src}: {e}")
                data_url = await self._fetch_with_fallback(url, options)
            self.cache.image.set(src, data_url)
            return data_url
        
        try:
            data_url = await asyncio.wait_for(
                self._load_raster(url, mode, options),
                timeout=options.timeout_ms / 1000
            )
        except asyncio.TimeoutError as e:
            raise ImageTimeoutError(
                f"Image load timed out after {options.timeout_ms} ms: {src}", src
            ) from e
        except ResolutionError as e:
            self.logger.debug(f"Image failed to load: {src} ({e})")
            data_url = await self._fetch_with_fallback(url, options)
        
        self.cache.image.set(src, data_url)
        return data_url
    
    async def _load_raster(self, url: str, mode: str, options: CaptureOptions) -> str:
        """Load, CORS-check, decode and re-encode a raster image as PNG."""
        asset = await self.fetcher.fetch(url, credentials=mode == USE_CREDENTIALS)
        if mode == ANONYMOUS and options.base_url and not self._cors_allows(asset, options.base_url):
            raise CorsBlockedError(f"Cross-origin image without CORS approval: {url}", url)
        png = await asyncio.to_thread(reencode_png, asset.body, url)
        return to_data_url(png, "image/png")
    
    @staticmethod
    def _cors_allows(asset: FetchedAsset, base_url: str) -> bool:
        allowed = asset.header("Access-Control-Allow-Origin")
        if allowed is None:
            return False
        allowed = allowed.strip()
        return allowed == "*" or allowed == get_origin(base_url)
    
    async def _fetch_with_fallback(self, url: str, options: CaptureOptions) -> str:
        """
        Fetch the raw bytes directly, then through the proxy if configured.
        
        Raises:
            NetworkFailure: Direct fetch failed and no proxy is configured
            CorsBlockedError: Direct and proxied fetches both failed
        """
        try:
            return await self._fetch_as_data_url(url, options)
        except ResolutionError as e:
            if not options.use_proxy:
                raise NetworkFailure(
                    f"Fetch fallback failed and no proxy provided: {url}", url
                ) from e
            self.logger.debug(f"Direct fetch failed for {url}, retrying via proxy")
        
        proxied = options.use_proxy.removesuffix("/") + encode_uri_component(url)
        try:
            return await self._fetch_as_data_url(proxied, options)
        except ResolutionError as e:
            raise CorsBlockedError(
                f"CORS restrictions prevented image capture (even via proxy): {url}", url
            ) from e
    
    async def _fetch_as_data_url(self, url: str, options: CaptureOptions) -> str:
        mode = request_mode(url, options.base_url)
        asset = await self.fetcher.fetch(url, credentials=mode == USE_CREDENTIALS)
        
        mime_type = asset.content_type.split(";")[0].strip().lower()
        if not mime_type.startswith("image/"):
            mime_type = await asyncio.to_thread(sniff_image_type, asset.body)
            if not mime_type:
                raise DecodeFailure(f"Invalid image data from {url}", url)
        return to_data_url(asset.body, mime_type)
