"""
Capture options and the context object threaded through the pipeline.
"""

from dataclasses import dataclass, field, fields
from numbers import Number
from typing import Any, Callable, Dict, List, Optional

from bs4 import Tag

from .cache import ResourceCache
from .errors import InvalidInputError
from .plugins import Plugin, PluginEntry
from ..utils.constants import DEFAULT_IMAGE_TIMEOUT_MS


def _is_positive_number(value: Any) -> bool:
    # bool is a Number subclass but never a valid size
    return isinstance(value, Number) and not isinstance(value, bool) and value > 0


@dataclass
class CaptureOptions:
    """Options recognized by capture, pre-cache and export."""

    # Output geometry
    scale: float = 1.0
    width: Optional[float] = None
    height: Optional[float] = None

    # Inlining
    embed_fonts: bool = False
    compress: bool = True
    fast: bool = True
    use_proxy: Optional[str] = None
    timeout_ms: int = DEFAULT_IMAGE_TIMEOUT_MS
    base_url: Optional[str] = None

    # Consumed by the cloning step
    exclude: List[str] = field(default_factory=list)
    filter: Optional[Callable[[Tag], bool]] = None

    # Plugins
    plugins: List[PluginEntry] = field(default_factory=list)
    ignore_global_plugins: bool = False

    # Pre-cache only
    reset: bool = False
    skip_inline: bool = False

    debug: bool = False

    # Export only
    format: str = "png"
    quality: Optional[float] = None
    background_color: Optional[str] = None
    dpr: float = 1.0
    filename: str = "snapshot"

    def __post_init__(self):
        for name in ("scale", "timeout_ms", "dpr", "width", "height"):
            value = getattr(self, name)
            if value is None and name in ("width", "height"):
                continue
            if not _is_positive_number(value):
                raise InvalidInputError(f"{name} must be a positive number, got {value!r}")
        if isinstance(self.exclude, str):
            self.exclude = [self.exclude]
        self.format = self.format.lower().lstrip(".")
        if self.format == "jpeg":
            self.format = "jpg"

    @classmethod
    def from_kwargs(cls, **kwargs: Any) -> "CaptureOptions":
        """
        Build options from keyword arguments, rejecting unknown keys.
        
        Raises:
            InvalidInputError: On an unknown option name
        """
        known = {f.name for f in fields(cls)}
        unknown = set(kwargs) - known
        if unknown:
            raise InvalidInputError(f"Unknown options: {', '.join(sorted(unknown))}")
        return cls(**kwargs)

    def merged(self, **overrides: Any) -> "CaptureOptions":
        """Get a copy with some options replaced."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(overrides)
        return CaptureOptions.from_kwargs(**values)


@dataclass
class CaptureContext:
    """
    Mutable state for one capture or pre-cache call.
    
    Every plugin hook receives this object. Fields filled by later stages
    are None or empty until that stage has run.
    """

    options: CaptureOptions
    element: Optional[Tag] = None
    cache: Optional[ResourceCache] = None
    clone: Optional[Tag] = None
    class_css: str = ""
    fonts_css: str = ""
    base_css: str = ""
    plugins: List[Plugin] = field(default_factory=list)
    url: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)


def create_context(
    options: Optional[CaptureOptions] = None,
    element: Optional[Tag] = None,
    cache: Optional[ResourceCache] = None,
    **kwargs: Any
) -> CaptureContext:
    """
    Build a capture context from options or keyword arguments.
    
    Args:
        options: Prepared options; keyword arguments override its fields
        element: Source element
        cache: Resource cache used by this call
        **kwargs: Option overrides
        
    Returns:
        New CaptureContext
    """
    if options is None:
        options = CaptureOptions.from_kwargs(**kwargs)
    elif kwargs:
        options = options.merged(**kwargs)
    return CaptureContext(options=options, element=element, cache=cache)
