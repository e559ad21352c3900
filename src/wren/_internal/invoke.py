"""Call sync or async callables uniformly.

Handlers, error handlers and lifespan hooks can be ``def`` or
``async def``; the awaitable check lives here only.
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
