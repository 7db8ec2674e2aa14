"""
Pipeline orchestrators.

Contains the capture orchestrator and the pre-cache orchestrator.
"""

from .capture import CaptureOrchestrator
from .precache import PreCacheOrchestrator

__all__ = [
    "CaptureOrchestrator",
    "PreCacheOrchestrator",
]
