"""
Core pipeline state.

Contains the resource cache, capture options and context, the plugin
registry and the exception hierarchy.
"""

from .cache import ResourceCache, CacheNamespace, shared_cache
from .context import CaptureOptions, CaptureContext, create_context
from .errors import (
    SnapshotError,
    InvalidInputError,
    InvalidPluginError,
    AssemblyError,
    HookFailure,
    ResolutionError,
    ImageTimeoutError,
    DecodeFailure,
    NetworkFailure,
    CorsBlockedError,
)
from .plugins import HookName, Plugin, PluginRegistry, default_registry

__all__ = [
    "ResourceCache",
    "CacheNamespace",
    "shared_cache",
    "CaptureOptions",
    "CaptureContext",
    "create_context",
    "SnapshotError",
    "InvalidInputError",
    "InvalidPluginError",
    "AssemblyError",
    "HookFailure",
    "ResolutionError",
    "ImageTimeoutError",
    "DecodeFailure",
    "NetworkFailure",
    "CorsBlockedError",
    "HookName",
    "Plugin",
    "PluginRegistry",
    "default_registry",
]
