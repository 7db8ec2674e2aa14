"""
Result type for per-asset resolution.

Fan-out stages settle each resolution into a Resolution and then decide
explicitly what a failure means for that one asset.
"""

from dataclasses import dataclass
from typing import Awaitable, Optional

from ..core.errors import ResolutionError


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one asset reference."""

    source: str
    value: Optional[str] = None
    error: Optional[ResolutionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: str) -> str:
        """Get the resolved value, or default when resolution failed."""
        if self.ok and self.value is not None:
            return self.value
        return default


async def settle(source: str, awaitable: Awaitable[Optional[str]]) -> Resolution:
    """
    Await a resolution and capture a ResolutionError as a failed outcome.
    
    Errors that are not ResolutionError propagate.
    
    Args:
        source: Reference being resolved
        awaitable: Resolver coroutine
        
    Returns:
        Resolution for the reference
    """
    try:
        value = await awaitable
    except ResolutionError as e:
        return Resolution(source=source, error=e)
    return Resolution(source=source, value=value)
