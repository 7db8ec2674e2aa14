"""
Exception hierarchy for the snapshot pipeline.

Fatal errors abort a capture. Resolution errors are per-asset and are
converted by the fan-out stages into "left as original".
"""

from typing import Optional


class SnapshotError(Exception):
    """Base class for all snapshot errors."""


class InvalidInputError(SnapshotError):
    """No element was given, or an option value is unusable."""


class InvalidPluginError(SnapshotError):
    """A plugin was registered without a name."""


class AssemblyError(SnapshotError):
    """The final SVG document could not be built."""


class HookFailure(SnapshotError):
    """A plugin hook raised; the remaining pipeline is aborted."""

    def __init__(self, plugin_name: str, hook_name: str, cause: BaseException):
        self.plugin_name = plugin_name
        self.hook_name = hook_name
        self.cause = cause
        super().__init__(
            f"Plugin '{plugin_name}' failed in {hook_name}: {cause}"
        )


class ResolutionError(SnapshotError):
    """An asset could not be turned into an embeddable data reference."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        super().__init__(message)


class ImageTimeoutError(ResolutionError):
    """A raster image did not load within the timeout."""


class DecodeFailure(ResolutionError):
    """The payload was not a decodable image."""


class NetworkFailure(ResolutionError):
    """The request failed or returned a non-success status."""


class CorsBlockedError(ResolutionError):
    """Cross-origin policy prevented the load, including via proxy."""
