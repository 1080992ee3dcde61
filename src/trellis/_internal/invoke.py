"""Call sync or async handlers uniformly.

Handlers in a chain can be ``def`` or ``async def``. The context runs
every link through this helper so the sync/async check lives in one
place.
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* and await the result if it is awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
