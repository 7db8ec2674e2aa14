"""
Export module for captured snapshots.

Contains the capture result wrapper and the Playwright browser renderer.
"""

from .result import CaptureResult

__all__ = [
    "CaptureResult",
]
