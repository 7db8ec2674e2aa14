"""
Background entry resolver for single CSS background-image layers.
"""

import re
from typing import Optional

from .image import ImageResolver
from ..core.cache import ResourceCache
from ..core.context import CaptureOptions
from ..utils.log import get_logger
from ..utils.urls import extract_url, safe_encode_uri


GRADIENT_PATTERN = re.compile(r'^((repeating-)?(linear|radial|conic)-gradient)\(', re.IGNORECASE)


def is_gradient(entry: str) -> bool:
    """Check whether a layer is a gradient function call."""
    return bool(GRADIENT_PATTERN.match(entry.strip()))


class BackgroundResolver:
    """
    Inlines url(...) layers of background-image values.
    
    Layers must already be split; see dom.styles.split_background_image.
    Gradients, 'none' and anything unrecognized pass through unchanged.
    """
    
    def __init__(self, cache: ResourceCache, images: ImageResolver):
        self.cache = cache
        self.images = images
        self.logger = get_logger("background")
    
    async def resolve_entry(
        self,
        entry: str,
        options: Optional[CaptureOptions] = None
    ) -> Optional[str]:
        """
        Resolve one background-image layer.
        
        Args:
            entry: A single layer, e.g. 'url("bg.png")'
            options: Capture options; skip_inline only warms the cache
            
        Returns:
            'url("<data URL>")' for URL layers, the entry itself for other
            layers, or None for URL layers in skip_inline mode
            
        Raises:
            ResolutionError: If the image behind a URL layer fails
        """
        options = options or CaptureOptions()
        raw_url = extract_url(entry)
        
        if raw_url:
            encoded = safe_encode_uri(raw_url)
            data_url = self.cache.background.get(encoded)
            if data_url is None:
                data_url = await self.images.resolve(encoded, options)
                self.cache.background.set(encoded, data_url)
            else:
                self.logger.debug(f"Background cache hit: {encoded}")
            return None if options.skip_inline else f'url("{data_url}")'
        
        if is_gradient(entry) or entry.strip() == "none":
            return entry
        
        return entry
