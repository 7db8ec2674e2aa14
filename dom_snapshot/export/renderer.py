"""
Browser renderer using Playwright.

Loads live pages to obtain element trees with their computed background
images and sizes, and rasterizes SVG snapshots into PNG or JPEG bytes.
"""

import io
import math
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup, Tag
from PIL import Image
from playwright.async_api import async_playwright, Browser, Page, Error as PlaywrightError

from ..core.errors import InvalidInputError, NetworkFailure
from ..utils.constants import (
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_USER_AGENT,
    STAMP_BACKGROUND_ATTR,
    STAMP_HEIGHT_ATTR,
    STAMP_WIDTH_ATTR,
)
from ..utils.log import get_logger


# Stamps computed background images, resolved image sources and the
# root's bounding size onto the subtree before its HTML is read.
STAMP_SCRIPT = f"""
(selector) => {{
  const root = document.querySelector(selector);
  if (!root) return false;
  const rect = root.getBoundingClientRect();
  root.setAttribute('{STAMP_WIDTH_ATTR}', String(rect.width));
  root.setAttribute('{STAMP_HEIGHT_ATTR}', String(rect.height));
  for (const el of [root, ...root.querySelectorAll('*')]) {{
    const bg = getComputedStyle(el).backgroundImage;
    if (bg && bg !== 'none') el.setAttribute('{STAMP_BACKGROUND_ATTR}', bg);
    if (el.tagName === 'IMG' && el.currentSrc) el.setAttribute('src', el.currentSrc);
  }}
  return true;
}}
"""


@dataclass
class LoadedElement:
    """An element read from a rendered page."""

    document: BeautifulSoup
    element: Tag
    url: str


def parse_html(html: str) -> BeautifulSoup:
    """Parse HTML with lxml, falling back to the built-in parser."""
    try:
        return BeautifulSoup(html, 'lxml')
    except Exception:
        return BeautifulSoup(html, 'html.parser')


class BrowserRenderer:
    """
    Headless Chromium used as the live element source and rasterizer.
    """
    
    def __init__(
        self,
        timeout: int = DEFAULT_PAGE_TIMEOUT,
        wait_until: str = "networkidle",
        headless: bool = True
    ):
        """
        Initialize the browser renderer.
        
        Args:
            timeout: Page load timeout in milliseconds
            wait_until: Event to wait for ('load', 'domcontentloaded', 'networkidle')
            headless: Run browser in headless mode
        """
        self.timeout = timeout
        self.wait_until = wait_until
        self.headless = headless
        self.logger = get_logger("renderer")
        
        self._playwright = None
        self._browser: Optional[Browser] = None
    
    async def start(self) -> None:
        """Start the Playwright browser instance."""
        self.logger.debug("Starting Playwright browser...")
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=[
                '--no-sandbox',
                '--disable-setuid-sandbox',
                '--disable-dev-shm-usage',
            ]
        )
    
    async def stop(self) -> None:
        """Stop the Playwright browser instance."""
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        self.logger.debug("Browser stopped")
    
    async def load_element(
        self,
        url: str,
        selector: str,
        user_agent: Optional[str] = None
    ) -> LoadedElement:
        """
        Render a page and read one element with its computed state.
        
        Args:
            url: Page URL
            selector: CSS selector of the element to capture
            user_agent: Optional custom user agent
            
        Returns:
            LoadedElement with the parsed document and element
            
        Raises:
            NetworkFailure: If the page cannot be loaded
            InvalidInputError: If no element matches the selector
        """
        if not self._browser:
            await self.start()
        
        context = await self._browser.new_context(
            user_agent=user_agent or DEFAULT_USER_AGENT,
            viewport={"width": 1920, "height": 1080},
            ignore_https_errors=True,
        )
        page: Optional[Page] = None
        try:
            page = await context.new_page()
            self.logger.debug(f"Rendering: {url}")
            try:
                response = await page.goto(url, wait_until=self.wait_until, timeout=self.timeout)
            except PlaywrightError as e:
                raise NetworkFailure(f"Error rendering {url}: {e}", url) from e
            
            if response is not None and response.status >= 400:
                raise NetworkFailure(f"HTTP {response.status} for {url}", url)
            
            if not await page.evaluate(STAMP_SCRIPT, selector):
                raise InvalidInputError(f"No element matches selector {selector!r} on {url}")
            
            final_url = page.url
            document = parse_html(await page.content())
            element = document.select_one(selector)
            if element is None:
                raise InvalidInputError(f"No element matches selector {selector!r} on {url}")
            return LoadedElement(document=document, element=element, url=final_url)
        finally:
            await context.close()
    
    async def rasterize(
        self,
        svg_url: str,
        width: float,
        height: float,
        scale: float = 1.0,
        dpr: float = 1.0,
        image_type: str = "png",
        quality: Optional[float] = None,
        background_color: Optional[str] = None
    ) -> bytes:
        """
        Draw an SVG data URL and encode it as a raster image.
        
        Args:
            svg_url: SVG snapshot data URL
            width: Natural width of the snapshot
            height: Natural height of the snapshot
            scale: Output scale multiplier
            dpr: Device pixel ratio
            image_type: 'png', 'jpg' or 'webp'
            quality: Lossy quality between 0 and 1
            background_color: CSS color painted behind the snapshot
            
        Returns:
            Encoded image bytes
        """
        if not self._browser:
            await self.start()
        
        out_w = max(1, math.ceil(width * scale))
        out_h = max(1, math.ceil(height * scale))
        if image_type == "jpg" and not background_color:
            background_color = "#ffffff"
        
        context = await self._browser.new_context(
            viewport={"width": out_w, "height": out_h},
            device_scale_factor=dpr,
        )
        try:
            page = await context.new_page()
            await page.set_content(
                f'<html><body style="margin:0;background:{background_color or "transparent"}">'
                f'<img id="snapshot" src="{svg_url}" '
                f'style="display:block;width:{out_w}px;height:{out_h}px"></body></html>'
            )
            await page.wait_for_function(
                "() => { const img = document.getElementById('snapshot'); "
                "return img.complete && img.naturalWidth > 0; }",
                timeout=self.timeout,
            )
            
            screenshot_args = {"type": "jpeg" if image_type == "jpg" else "png"}
            if image_type == "jpg" and quality is not None:
                screenshot_args["quality"] = _quality_percent(quality)
            if image_type != "jpg" and not background_color:
                screenshot_args["omit_background"] = True
            data = await page.locator("#snapshot").screenshot(**screenshot_args)
        finally:
            await context.close()
        
        if image_type == "webp":
            data = to_webp(data, quality)
        return data
    
    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.stop()


def _quality_percent(quality: float) -> int:
    if quality <= 1:
        quality *= 100
    return max(0, min(100, int(round(quality))))


def to_webp(png: bytes, quality: Optional[float] = None) -> bytes:
    """Re-encode PNG bytes as WebP with Pillow."""
    with Image.open(io.BytesIO(png)) as image:
        buffer = io.BytesIO()
        image.save(buffer, format="WEBP", quality=_quality_percent(quality) if quality is not None else 80)
        return buffer.getvalue()
