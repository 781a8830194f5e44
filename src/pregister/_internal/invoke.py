"""Invoke helpers — call sync or async callables uniformly.

Hooks, ``args`` wrappers and loaded entry points can be ``def`` or
``async def``.  The async batch runners call them through this helper so
the sync/async check lives in exactly one place.

Usage::

    from pregister._internal.invoke import invoke

    result = await invoke(module.main, *args)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call ``func`` and await the result if it's awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
