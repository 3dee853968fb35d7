"""
Event loop bridge for dramatiq actors.

Actors are synchronous; the sync pipeline is async. Each worker thread
keeps one event loop for its lifetime so aiohttp sessions and database
connections are never shared across loops.
"""

import asyncio
import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

from loguru import logger

T = TypeVar("T")

_loops = threading.local()


def get_event_loop() -> asyncio.AbstractEventLoop:
    """Return this thread's event loop, creating it on first use."""
    loop: asyncio.AbstractEventLoop | None = getattr(_loops, "loop", None)
    if loop is not None and not loop.is_closed():
        return loop

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    _loops.loop = loop
    logger.debug(f"Event loop created for {threading.current_thread().name}")
    return loop


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run a coroutine to completion on this thread's loop.

    Args:
        coro: Coroutine to run

    Returns:
        The coroutine's result
    """
    return get_event_loop().run_until_complete(coro)
