"""
Font embedding for captured trees.

Finds @font-face rules in the owning document's <style> blocks and inlines
their font sources as base64 data URLs.
"""

import asyncio
import re
from typing import Dict, List, Optional, Set

from bs4 import BeautifulSoup, NavigableString

from ..core.cache import ResourceCache
from ..core.context import CaptureOptions
from ..resolvers.fetch import AssetFetcher
from ..resolvers.image import request_mode, resolve_reference
from ..resolvers.outcome import settle
from ..utils.constants import SANDBOX_ID
from ..utils.log import get_logger
from ..utils.urls import (
    CSS_URL_PATTERN,
    USE_CREDENTIALS,
    guess_mime_type,
    to_data_url,
)


FONT_FACE_PATTERN = re.compile(r'@font-face\s*\{[^}]*\}', re.IGNORECASE)


class FontEmbedder:
    """
    Inlines web fonts declared in a document.
    
    Font data URLs are cached in the cache's font namespace by absolute
    source URL.
    """
    
    def __init__(self, cache: ResourceCache, fetcher: AssetFetcher):
        self.cache = cache
        self.fetcher = fetcher
        self.logger = get_logger("fonts")
        self._pending: Set[asyncio.Future] = set()
    
    async def ready(self) -> None:
        """Wait for font fetches started by other calls to settle."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
    
    async def embed_custom_fonts(
        self,
        document: Optional[BeautifulSoup],
        options: Optional[CaptureOptions] = None,
        pre_cached: bool = False
    ) -> Optional[str]:
        """
        Inline the fonts of a document.
        
        Args:
            document: Document whose <style> blocks declare fonts
            options: Capture options (base_url)
            pre_cached: Only warm the cache and return nothing
            
        Returns:
            @font-face rules with inlined sources, or None when pre_cached
        """
        options = options or CaptureOptions()
        rules = self._collect_font_faces(document)
        
        sources: List[str] = []
        for rule in rules:
            for match in CSS_URL_PATTERN.finditer(rule):
                source = match.group(2).strip()
                if source and not source.startswith("data:") and source not in sources:
                    sources.append(source)
        
        inlined: Dict[str, str] = {}
        if sources:
            futures = [
                asyncio.ensure_future(settle(source, self._inline_font(source, options)))
                for source in sources
            ]
            self._pending.update(futures)
            try:
                outcomes = await asyncio.gather(*futures)
            finally:
                self._pending.difference_update(futures)
            for outcome in outcomes:
                if outcome.ok:
                    inlined[outcome.source] = outcome.value
                else:
                    self.logger.debug(f"Font left as remote reference: {outcome.error}")
        
        if pre_cached:
            return None
        
        def replace_url(match):
            source = match.group(2).strip()
            if source in inlined:
                return f'url("{inlined[source]}")'
            return match.group(0)
        
        return "".join(CSS_URL_PATTERN.sub(replace_url, rule) for rule in rules)
    
    def _collect_font_faces(self, document: Optional[BeautifulSoup]) -> List[str]:
        if document is None:
            return []
        rules = []
        for style in document.find_all("style"):
            if style.find_parent(id=SANDBOX_ID) is not None:
                continue
            css = "".join(str(s) for s in style.contents if isinstance(s, NavigableString))
            rules.extend(FONT_FACE_PATTERN.findall(css))
        return rules
    
    async def _inline_font(self, source: str, options: CaptureOptions) -> str:
        url = resolve_reference(source, options.base_url)
        cached = self.cache.font.get(url)
        if cached is not None:
            return cached
        
        mode = request_mode(url, options.base_url)
        asset = await self.fetcher.fetch(url, credentials=mode == USE_CREDENTIALS)
        mime_type = asset.content_type.split(";")[0].strip().lower()
        if not mime_type.startswith(("font/", "application/font", "application/x-font")):
            mime_type = guess_mime_type(url, default="font/woff2")
        data_url = to_data_url(asset.body, mime_type)
        self.cache.font.set(url, data_url)
        return data_url
