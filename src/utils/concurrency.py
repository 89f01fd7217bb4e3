"""Cancellation-aware waiting for the ingestion loop.

The scheduler never calls ``asyncio.sleep`` directly.  Every pause (warm-up,
politeness delay between Last.fm calls, the hourly cycle, the recovery delay
after a failed sweep) goes through :func:`interruptible_sleep`, which returns
as soon as the shared stop event is set.  A shutdown request therefore never
waits out an hour-long cycle.
"""

from __future__ import annotations

import asyncio


async def interruptible_sleep(seconds: float, stop_event: asyncio.Event) -> bool:
    """Wait up to *seconds*, returning early if *stop_event* is set.

    Parameters
    ----------
    seconds:
        Maximum time to wait.  Non-positive values only check the event.
    stop_event:
        Event signalling that the caller should shut down.

    Returns
    -------
    bool
        ``True`` if the wait ended because a stop was requested,
        ``False`` if the full interval elapsed.
    """
    if stop_event.is_set():
        return True
    if seconds <= 0:
        return False

    try:
        await asyncio.wait_for(stop_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True
