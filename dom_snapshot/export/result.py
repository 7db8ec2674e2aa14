"""
Capture result and export helpers.

Wraps the SVG data URL of a capture and converts it into SVG text, raster
bytes or files on disk.
"""

import os
import re
from typing import Optional, Tuple
from urllib.parse import unquote

from ..core.context import CaptureOptions
from ..core.errors import InvalidInputError
from ..utils.constants import SVG_DATA_PREFIX
from ..utils.log import get_logger


SVG_SIZE_PATTERN = re.compile(r'<svg[^>]*\swidth="([\d.]+)"[^>]*\sheight="([\d.]+)"')

RASTER_FORMATS = ("png", "jpg", "webp")


class CaptureResult:
    """
    The outcome of a capture, with conversion helpers.
    
    Raster conversions need a BrowserRenderer; one is started on demand
    when none was given.
    """
    
    def __init__(self, url: str, options: Optional[CaptureOptions] = None, renderer=None):
        self.url = url
        self.options = options or CaptureOptions()
        self.renderer = renderer
        self.logger = get_logger("export")
    
    def to_raw(self) -> str:
        """Get the SVG data URL."""
        return self.url
    
    def to_svg(self) -> str:
        """Get the decoded SVG markup."""
        if not self.url.startswith(SVG_DATA_PREFIX):
            raise InvalidInputError("Capture result is not an SVG data URL")
        return unquote(self.url[len(SVG_DATA_PREFIX):])
    
    def natural_size(self) -> Tuple[float, float]:
        """Get the width and height declared on the SVG root."""
        match = SVG_SIZE_PATTERN.search(self.to_svg())
        if not match:
            return 0.0, 0.0
        return float(match.group(1)), float(match.group(2))
    
    async def to_blob(self, type: Optional[str] = None, **overrides) -> bytes:
        """
        Encode the snapshot.
        
        Args:
            type: 'svg', 'png', 'jpg'/'jpeg' or 'webp'; options.format by default
            **overrides: Export option overrides (scale, dpr, quality, background_color)
            
        Returns:
            Encoded bytes
        """
        options = self.options.merged(**overrides) if overrides else self.options
        image_type = (type or options.format).lower()
        if image_type == "jpeg":
            image_type = "jpg"
        
        if image_type == "svg":
            return self.to_svg().encode("utf-8")
        if image_type not in RASTER_FORMATS:
            raise InvalidInputError(f"Unsupported export format: {image_type}")
        
        width, height = self.natural_size()
        if self.renderer is not None:
            return await self._rasterize(self.renderer, width, height, image_type, options)
        
        from .renderer import BrowserRenderer
        async with BrowserRenderer() as renderer:
            return await self._rasterize(renderer, width, height, image_type, options)
    
    async def _rasterize(self, renderer, width, height, image_type, options) -> bytes:
        return await renderer.rasterize(
            self.url,
            width,
            height,
            scale=options.scale,
            dpr=options.dpr,
            image_type=image_type,
            quality=options.quality,
            background_color=options.background_color,
        )
    
    async def to_png(self, **overrides) -> bytes:
        return await self.to_blob("png", **overrides)
    
    async def to_jpg(self, **overrides) -> bytes:
        return await self.to_blob("jpg", **overrides)
    
    async def to_webp(self, **overrides) -> bytes:
        return await self.to_blob("webp", **overrides)
    
    async def save(self, path: Optional[str] = None, format: Optional[str] = None, **overrides) -> str:
        """
        Write the snapshot to a file.
        
        The format comes from the argument, then the file extension, then
        options.format.
        
        Args:
            path: Target file; options.filename plus extension by default
            format: Export format
            **overrides: Export option overrides
            
        Returns:
            Path of the written file
        """
        if format is None and path:
            extension = os.path.splitext(path)[1].lstrip(".").lower()
            format = extension or None
        format = (format or self.options.format).lower()
        if format == "jpeg":
            format = "jpg"
        if not path:
            path = f"{self.options.filename}.{format}"
        
        data = await self.to_blob(format, **overrides)
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        
        self.logger.debug(f"Saved {len(data)} bytes to {path}")
        return path
