"""Async utilities for running blocking filesystem calls off the event loop."""

import asyncio
import logging
from typing import Any, Callable, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


async def run_sync(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run a synchronous function in a thread pool without blocking the event loop.

    Every directory listing, stat, copy and delete goes through here so the
    loop stays responsive to the stop signal while I/O is in flight.

    Args:
        func: Synchronous function to call
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result of func(*args, **kwargs)

    Example:
        entries = await run_sync(scan_files, source_root)
    """
    return await asyncio.to_thread(func, *args, **kwargs)


async def wait_for_stop(stop_event: asyncio.Event, timeout: float) -> bool:
    """Sleep for *timeout* seconds, waking early when *stop_event* is set.

    Args:
        stop_event: Shared cancellation signal.
        timeout: Maximum time to wait, in seconds.

    Returns:
        True if the stop event was set (before or during the wait),
        False if the full timeout elapsed.
    """
    if stop_event.is_set():
        return True
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        return False
    logger.debug("Stop requested during %.3fs wait", timeout)
    return True
