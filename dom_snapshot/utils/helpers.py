"""
Small async helpers shared by the pipeline stages.
"""

import asyncio
import inspect
from typing import Any, Callable


async def idle(fn: Callable[[], Any], fast: bool = True) -> Any:
    """
    Run a stage, yielding to the event loop first unless fast is set.
    
    Args:
        fn: Callable returning a value or an awaitable
        fast: Skip the cooperative yield
        
    Returns:
        The stage's result
    """
    if not fast:
        await asyncio.sleep(0)
    result = fn()
    if inspect.isawaitable(result):
        result = await result
    return result
