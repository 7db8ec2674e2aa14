"""
Public API.

snapdom() captures an element and returns a CaptureResult; pre_cache()
warms the cache ahead of captures; use() registers global plugins.
By default every call shares the process-wide cache and plugin registry.
"""

from typing import Any, Mapping, Optional, Union

from bs4 import Tag

from .core.cache import ResourceCache, shared_cache
from .core.context import CaptureOptions
from .core.errors import InvalidInputError
from .core.plugins import Plugin, PluginRegistry, default_registry
from .export.result import CaptureResult
from .pipeline.capture import CaptureOrchestrator
from .pipeline.precache import PreCacheOrchestrator
from .resolvers.fetch import AssetFetcher


async def snapdom(
    element: Optional[Tag],
    *,
    cache: Optional[ResourceCache] = None,
    registry: Optional[PluginRegistry] = None,
    fetcher: Optional[AssetFetcher] = None,
    renderer=None,
    **options: Any
) -> CaptureResult:
    """
    Capture an element as a self-contained SVG snapshot.
    
    Args:
        element: Element to capture
        cache: Resource cache; the shared one by default
        registry: Plugin registry; the shared one by default
        fetcher: HTTP fetcher; a fresh one, closed afterwards, by default
        renderer: BrowserRenderer used for raster exports
        **options: CaptureOptions fields
        
    Returns:
        CaptureResult wrapping the SVG data URL
    """
    if element is None:
        raise InvalidInputError("Element cannot be None")
    capture_options = CaptureOptions.from_kwargs(**options)
    
    own_fetcher = fetcher is None
    fetcher = fetcher if fetcher is not None else AssetFetcher()
    try:
        orchestrator = CaptureOrchestrator(
            cache=cache if cache is not None else shared_cache,
            fetcher=fetcher,
            registry=registry if registry is not None else default_registry,
        )
        url = await orchestrator.capture(element, capture_options)
    finally:
        if own_fetcher:
            await fetcher.close()
    
    return CaptureResult(url, capture_options, renderer=renderer)


async def pre_cache(
    root: Optional[Tag] = None,
    *,
    cache: Optional[ResourceCache] = None,
    fetcher: Optional[AssetFetcher] = None,
    **options: Any
) -> None:
    """
    Warm the cache with the assets of a subtree.
    
    Args:
        root: Document or element to scan
        cache: Resource cache; the shared one by default
        fetcher: HTTP fetcher; a fresh one, closed afterwards, by default
        **options: CaptureOptions fields (reset, embed_fonts, base_url, ...)
    """
    precache_options = CaptureOptions.from_kwargs(**options)
    
    own_fetcher = fetcher is None
    fetcher = fetcher if fetcher is not None else AssetFetcher()
    try:
        orchestrator = PreCacheOrchestrator(
            cache=cache if cache is not None else shared_cache,
            fetcher=fetcher,
        )
        await orchestrator.pre_cache(root, precache_options)
    finally:
        if own_fetcher:
            await fetcher.close()


def use(plugin: Union[Plugin, Mapping[str, Any]], registry: Optional[PluginRegistry] = None) -> None:
    """Register a global plugin."""
    (registry if registry is not None else default_registry).use(plugin)


def clear_plugins(registry: Optional[PluginRegistry] = None) -> None:
    """Remove all global plugins."""
    (registry if registry is not None else default_registry).clear()
