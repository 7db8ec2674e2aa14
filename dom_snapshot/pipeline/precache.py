"""
Pre-cache orchestrator.

Warms the resource cache for a subtree ahead of a capture, using the same
resolvers a capture uses.
"""

import asyncio
from typing import Callable, Dict, Optional

from bs4 import BeautifulSoup, Tag

from ..core.cache import ResourceCache, shared_cache
from ..core.context import CaptureOptions
from ..dom.clone import owner_document
from ..dom.css import precache_common_tags
from ..dom.fonts import FontEmbedder
from ..dom.styles import get_style, split_background_image
from ..resolvers.background import BackgroundResolver
from ..resolvers.fetch import AssetFetcher
from ..resolvers.image import ImageResolver
from ..resolvers.outcome import Resolution, settle
from ..utils.log import get_logger


class PreCacheOrchestrator:
    """
    Resolves the images, background layers and fonts of a subtree into
    the cache without producing a snapshot.
    """
    
    def __init__(
        self,
        cache: Optional[ResourceCache] = None,
        fetcher: Optional[AssetFetcher] = None,
        style_accessor: Callable[[Tag], Dict[str, str]] = get_style,
        fonts: Optional[FontEmbedder] = None
    ):
        self.cache = cache if cache is not None else shared_cache
        self.fetcher = fetcher if fetcher is not None else AssetFetcher()
        self.style_accessor = style_accessor
        self.images = ImageResolver(self.cache, self.fetcher)
        self.backgrounds = BackgroundResolver(self.cache, self.images)
        self.fonts = fonts if fonts is not None else FontEmbedder(self.cache, self.fetcher)
        self.logger = get_logger("precache")
    
    async def pre_cache(self, root: Optional[Tag], options: Optional[CaptureOptions] = None) -> None:
        """
        Warm the cache for every asset under root.
        
        With options.reset the cache is cleared and nothing else happens.
        Individual asset failures are logged and ignored.
        
        Args:
            root: Document or element to scan
            options: Capture options (reset, embed_fonts, base_url, use_proxy)
        """
        options = options or CaptureOptions()
        if options.reset:
            self.cache.reset_all()
            self.logger.debug("Resource cache reset")
            return
        
        await self.fonts.ready()
        precache_common_tags(self.cache)
        
        warm_options = options.merged(skip_inline=True)
        image_tags, all_tags = [], []
        if root is not None:
            image_tags = root.find_all("img", src=True)
            all_tags = root.find_all(True)
            if not isinstance(root, BeautifulSoup):
                all_tags.insert(0, root)
                if root.name == "img" and root.get("src"):
                    image_tags.insert(0, root)
        
        tasks = []
        for img in image_tags:
            src = img["src"]
            if not self.cache.image.has(src):
                tasks.append(settle(src, self.images.resolve(src, options)))
        
        for tag in all_tags:
            value = self.style_accessor(tag).get("background-image", "none")
            if not value or value.strip() == "none":
                continue
            for entry in split_background_image(value):
                if entry.startswith("url("):
                    tasks.append(settle(entry, self.backgrounds.resolve_entry(entry, warm_options)))
        
        if options.embed_fonts:
            document = owner_document(root) if root is not None else None
            tasks.append(
                self.fonts.embed_custom_fonts(document, options, pre_cached=True)
            )
        
        results = await asyncio.gather(*tasks)
        failed = [r for r in results if isinstance(r, Resolution) and not r.ok]
        for outcome in failed:
            self.logger.debug(f"Pre-cache skipped {outcome.source}: {outcome.error}")
        self.logger.debug(
            f"Pre-cached {len(tasks) - len(failed)} assets, {len(failed)} failed"
        )
