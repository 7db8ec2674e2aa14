"""
Capture orchestrator.

Runs the full pipeline for one element: clone, inline images, backgrounds
and fonts, generate base CSS, and assemble the SVG data URL. Plugin hooks
run at the stage boundaries.
"""

import asyncio
import html
import math
from typing import Callable, Dict, List, Optional, Tuple

from bs4 import Tag

from ..core.cache import ResourceCache, shared_cache
from ..core.context import CaptureContext, CaptureOptions, create_context
from ..core.errors import AssemblyError, InvalidInputError
from ..core.plugins import HookName, PluginRegistry, default_registry
from ..dom.clone import PreparedClone, owner_document, prepare_clone, release_clone
from ..dom.css import generate_deduped_base_css
from ..dom.fonts import FontEmbedder
from ..dom.styles import (
    collect_used_tag_names,
    get_style,
    measure,
    parse_style,
    set_style_property,
    split_background_image,
)
from ..resolvers.background import BackgroundResolver
from ..resolvers.fetch import AssetFetcher
from ..resolvers.image import ImageResolver
from ..resolvers.outcome import Resolution, settle
from ..utils.constants import SVG_DATA_PREFIX, SVG_NS, XHTML_NS
from ..utils.helpers import idle
from ..utils.log import get_logger
from ..utils.urls import encode_uri_component, is_data_image


ORIENTATION_FIX_CSS = "svg{overflow:visible;}"


def _format_number(value: float) -> str:
    return f"{value:g}"


class CaptureOrchestrator:
    """
    Turns an element into a self-contained SVG data URL.
    
    The collaborators (style access, measuring, cloning, base CSS, fonts)
    can be replaced for other element sources.
    """
    
    def __init__(
        self,
        cache: Optional[ResourceCache] = None,
        fetcher: Optional[AssetFetcher] = None,
        registry: Optional[PluginRegistry] = None,
        style_accessor: Callable[[Tag], Dict[str, str]] = get_style,
        measurer: Callable[[Tag], Tuple[float, float]] = measure,
        clone_preparer: Callable[..., PreparedClone] = prepare_clone,
        base_css_generator: Callable[[List[str]], str] = generate_deduped_base_css,
        fonts: Optional[FontEmbedder] = None
    ):
        """
        Initialize the capture orchestrator.
        
        Args:
            cache: Resource cache, the process-wide one by default
            fetcher: HTTP fetcher shared by all resolvers
            registry: Plugin registry, the process-wide one by default
            style_accessor: Computed style lookup for original elements
            measurer: Natural size lookup for the captured element
            clone_preparer: Cloning collaborator
            base_css_generator: Base CSS collaborator
            fonts: Font collaborator
        """
        self.cache = cache if cache is not None else shared_cache
        self.fetcher = fetcher if fetcher is not None else AssetFetcher()
        self.registry = registry if registry is not None else default_registry
        self.style_accessor = style_accessor
        self.measurer = measurer
        self.clone_preparer = clone_preparer
        self.base_css_generator = base_css_generator
        self.images = ImageResolver(self.cache, self.fetcher)
        self.backgrounds = BackgroundResolver(self.cache, self.images)
        self.fonts = fonts if fonts is not None else FontEmbedder(self.cache, self.fetcher)
        self.logger = get_logger("capture")
    
    async def capture(self, element: Tag, options: Optional[CaptureOptions] = None) -> str:
        """
        Capture an element as an SVG data URL.
        
        Args:
            element: Element to capture
            options: Capture options
            
        Returns:
            data:image/svg+xml URL of the snapshot
            
        Raises:
            InvalidInputError: If no element is given
            HookFailure: If a plugin hook raises
            AssemblyError: If the SVG document cannot be built
        """
        context = await self.capture_context(element, options)
        return context.url
    
    async def capture_context(
        self,
        element: Tag,
        options: Optional[CaptureOptions] = None
    ) -> CaptureContext:
        """Run the pipeline and return the finished context."""
        if element is None:
            raise InvalidInputError("Element cannot be None")
        
        options = options or CaptureOptions()
        context = create_context(options, element=element, cache=self.cache)
        fast = options.fast
        
        self.cache.reset_all()
        
        prepared: Optional[PreparedClone] = None
        try:
            await self.registry.run_hook(HookName.PRE_CLONE, context)
            prepared = self.clone_preparer(element, options, self.style_accessor)
            context.clone = prepared.clone
            context.class_css = prepared.class_css
            await self.registry.run_hook(HookName.POST_CLONE, context)
            
            await self.registry.run_hook(HookName.PRE_RENDER, context)
            await idle(lambda: self.inline_images(context.clone, options), fast)
            await idle(lambda: self.inline_backgrounds(prepared.pairs, options), fast)
            if options.embed_fonts:
                fonts_css = await idle(
                    lambda: self.fonts.embed_custom_fonts(owner_document(element), options),
                    fast
                )
                context.fonts_css = fonts_css or ""
            if options.compress:
                context.base_css = await self.get_base_css(context.clone, options)
            await self.registry.run_hook(HookName.POST_RENDER, context)
            
            context.url = await idle(lambda: self.build_svg_data_url(element, context), fast)
        finally:
            if release_clone(prepared):
                self.logger.debug("Removed staging container")
        
        await self.registry.run_hook(HookName.POST_EXPORT, context)
        return context
    
    async def inline_images(self, clone: Tag, options: CaptureOptions) -> int:
        """
        Replace <img> sources in the clone with data URLs.
        
        Images that fail to resolve keep their original source.
        
        Returns:
            Number of images inlined
        """
        images = [
            img for img in clone.find_all("img")
            if img.get("src") and not is_data_image(img["src"])
        ]
        if not images:
            return 0
        
        outcomes: List[Resolution] = await asyncio.gather(*(
            settle(img["src"], self.images.resolve(img["src"], options))
            for img in images
        ))
        
        inlined = 0
        for img, outcome in zip(images, outcomes):
            if outcome.ok:
                img["src"] = outcome.value
                if img.has_attr("srcset"):
                    del img["srcset"]
                inlined += 1
            else:
                self.logger.debug(f"Image left as original: {outcome.error}")
        
        self.logger.debug(f"Inlined {inlined}/{len(images)} images")
        return inlined
    
    async def inline_backgrounds(
        self,
        pairs: List[Tuple[Tag, Tag]],
        options: CaptureOptions
    ) -> int:
        """
        Write resolved background-image layers onto clone elements.
        
        Each layer is read from the original element's computed style and
        written inline on its clone. Layers that fail keep their original
        value.
        
        Returns:
            Number of layers inlined
        """
        jobs = []
        for original, copied in pairs:
            value = self.style_accessor(original).get("background-image", "none")
            if not value or value.strip() == "none":
                continue
            layers = split_background_image(value)
            jobs.append((copied, layers))
        if not jobs:
            return 0
        
        results = await asyncio.gather(*(
            asyncio.gather(*(
                settle(layer, self.backgrounds.resolve_entry(layer, options))
                for layer in layers
            ))
            for _, layers in jobs
        ))
        
        inlined = 0
        for (copied, layers), outcomes in zip(jobs, results):
            resolved = []
            for layer, outcome in zip(layers, outcomes):
                if not outcome.ok:
                    self.logger.debug(f"Background layer left as original: {outcome.error}")
                elif outcome.value != layer:
                    inlined += 1
                resolved.append(outcome.value_or(layer))
            set_style_property(copied, "background-image", ", ".join(resolved))
        return inlined
    
    async def get_base_css(self, clone: Tag, options: CaptureOptions) -> str:
        """Get base CSS for the clone's tags, cached by sorted tag set."""
        tag_names = collect_used_tag_names(clone)
        key = ",".join(tag_names)
        cached = self.cache.base_style.get(key)
        if cached is not None:
            return cached
        
        base_css = await idle(lambda: self.base_css_generator(tag_names), options.fast)
        self.cache.base_style.set(key, base_css)
        return base_css
    
    def compute_dimensions(
        self,
        natural: Tuple[float, float],
        options: CaptureOptions
    ) -> Tuple[int, int, Optional[Tuple[float, float]]]:
        """
        Compute output size and the transform scale for the clone.
        
        An explicit scale keeps the natural size (scaling happens at export).
        Otherwise width/height override the size; a single one keeps the
        aspect ratio.
        
        Args:
            natural: Natural (width, height) of the element
            options: Capture options
            
        Returns:
            (width, height, (scale_x, scale_y) or None)
        """
        natural_w, natural_h = natural
        has_w = options.width is not None
        has_h = options.height is not None
        has_scale = options.scale != 1
        
        w, h = natural_w, natural_h
        if not has_scale:
            aspect = natural_w / natural_h if natural_w and natural_h else 1.0
            if has_w and has_h:
                w, h = options.width, options.height
            elif has_w:
                w = options.width
                h = w / aspect
            elif has_h:
                h = options.height
                w = h * aspect
        
        w = math.ceil(w)
        h = math.ceil(h)
        
        transform = None
        if not has_scale and (has_w or has_h):
            transform = (
                w / natural_w if natural_w else 1.0,
                h / natural_h if natural_h else 1.0,
            )
        return w, h, transform
    
    def build_svg_data_url(self, element: Tag, context: CaptureContext) -> str:
        """
        Wrap the clone in an SVG foreignObject and encode it as a data URL.
        
        Raises:
            AssemblyError: If the document cannot be built
        """
        try:
            clone = context.clone
            w, h, transform = self.compute_dimensions(self.measurer(element), context.options)
            
            clone["xmlns"] = XHTML_NS
            set_style_property(clone, "transform-origin", "top left")
            if transform is not None:
                existing = parse_style(clone.get("style", "")).get("transform", "")
                scale = f"scale({_format_number(transform[0])}, {_format_number(transform[1])})"
                set_style_property(clone, "transform", f"{scale} {existing}".strip())
            
            style_text = (
                context.base_css + context.fonts_css + ORIENTATION_FIX_CSS + context.class_css
            )
            clone.extract()
            foreign_object = (
                '<foreignObject width="100%" height="100%">'
                f"<style>{html.escape(style_text, quote=False)}</style>"
                f"{clone.decode()}"
                "</foreignObject>"
            )
            svg = (
                f'<svg xmlns="{SVG_NS}" width="{w}" height="{h}" viewBox="0 0 {w} {h}">'
                f"{foreign_object}</svg>"
            )
            return SVG_DATA_PREFIX + encode_uri_component(svg)
        except Exception as e:
            raise AssemblyError(f"Could not build SVG document: {e}") from e
