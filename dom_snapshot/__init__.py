"""
DOM Snapshot - capture element trees as self-contained vector documents.

This package resolves every external visual dependency of an element tree
(images, background layers, fonts), inlines them as data references and
assembles an SVG document that can be exported as SVG or raster images.
"""

__version__ = "1.0.0"
__author__ = "DOM Snapshot Team"

from .api import snapdom, pre_cache, use, clear_plugins
from .core.cache import ResourceCache
from .core.context import CaptureOptions
from .core.plugins import HookName, Plugin

__all__ = [
    "snapdom",
    "pre_cache",
    "use",
    "clear_plugins",
    "ResourceCache",
    "CaptureOptions",
    "HookName",
    "Plugin",
]
