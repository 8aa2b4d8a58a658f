"""Async access to DazzleWalk walks.

The engine itself is synchronous. These helpers let async code consume a
walk without blocking the event loop: each pull runs in a worker thread via
``asyncio.to_thread``. Pulls are strictly sequential, one at a time, so the
engine's single-reader contract holds.

Example:
    >>> async for path in walk_async(TraversalConfig("/data", max_depth=2)):
    ...     print(path)
"""

import asyncio
from pathlib import PurePath
from typing import AsyncIterator, Optional

from .api import walk_events
from .config import TraversalConfig
from .core.events import Event
from .core.iterator import EventIterator
from .probes.base import FilesystemProbe
from .reporting import ErrorReporter


def _pull(events: EventIterator) -> Optional[Event]:
    return next(events, None)


async def walk_events_async(config: TraversalConfig,
                            probe: Optional[FilesystemProbe] = None,
                            reporter: Optional[ErrorReporter] = None) -> AsyncIterator[Event]:
    """Async version of ``walk_events``.

    The walk is released when iteration finishes, raises, or the async
    generator is closed (``aclose()`` or garbage collection).
    """
    events = await asyncio.to_thread(walk_events, config, probe, reporter)
    try:
        while True:
            event = await asyncio.to_thread(_pull, events)
            if event is None:
                break
            yield event
    finally:
        events.close()


async def walk_async(config: TraversalConfig,
                     probe: Optional[FilesystemProbe] = None,
                     reporter: Optional[ErrorReporter] = None) -> AsyncIterator[PurePath]:
    """Async version of ``walk``."""
    events = walk_events_async(config, probe, reporter)
    try:
        async for event in events:
            yield event.path
    finally:
        await events.aclose()
