"""Pull-based iteration over traversal events.

EventIterator turns an event source (the TraversalEngine, or the one-level
FlatListing) into a Python iterator. It hides EXIT_DIRECTORY bookkeeping
events, applies the on-error policy to every event that carries an error,
and owns the source: the source is closed exactly once whether iteration
finishes, raises, or is abandoned.
"""

import logging
from typing import Optional

from ..config import OnErrorPolicy
from ..errors import DirectoryCloseError, TraversalClosedError, error_category
from ..reporting import ErrorReporter, LoggingErrorReporter
from .events import Event, EventKind

logger = logging.getLogger(__name__)


class EventIterator:
    """Iterator over the externally visible events of a walk.

    Example:
        with EventIterator(engine, engine.start(root)) as events:
            for event in events:
                print(event.kind, event.path)
    """

    def __init__(self,
                 source,
                 first_event: Optional[Event] = None,
                 on_error: OnErrorPolicy = OnErrorPolicy.SILENT_CONTINUE,
                 reporter: Optional[ErrorReporter] = None):
        """Initialize iterator.

        Args:
            source: Object with ``advance() -> Optional[Event]`` and ``close()``
            first_event: Event already produced by the source's ``start``
            on_error: What to do with events that carry an error
            reporter: Receives errors under LOG_AND_CONTINUE
        """
        self._source = source
        self._primed = first_event
        self._next: Optional[Event] = None
        self._on_error = on_error
        self._reporter = reporter if reporter is not None else LoggingErrorReporter()
        self._exhausted = False
        self._closed = False

    def __iter__(self) -> 'EventIterator':
        return self

    def __next__(self) -> Event:
        if self._exhausted:
            raise StopIteration
        self._ensure_open()
        self._fetch_next_if_needed()
        if self._next is None:
            raise StopIteration
        event, self._next = self._next, None
        return event

    def has_next(self) -> bool:
        """Return True if another event is available, pulling at most one."""
        if self._exhausted:
            return False
        self._ensure_open()
        self._fetch_next_if_needed()
        return self._next is not None

    def next_event(self) -> Optional[Event]:
        """Take the next event, or None once the walk is exhausted."""
        if not self.has_next():
            return None
        event, self._next = self._next, None
        return event

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the source. Safe to call any number of times."""
        if self._closed:
            return
        self._closed = True
        self._source.close()

    def __enter__(self) -> 'EventIterator':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self):
        # Abandoned iterators still release their listings
        if not getattr(self, '_closed', True):
            self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise TraversalClosedError("Iterator is closed")

    def _pull(self) -> Optional[Event]:
        if self._primed is not None:
            event, self._primed = self._primed, None
            return event
        return self._source.advance()

    def _fetch_next_if_needed(self) -> None:
        if self._next is not None:
            return
        while True:
            event = self._pull()
            if event is None:
                self._exhausted = True
                self.close()
                return

            if event.error is not None:
                self._handle_error(event)
                continue

            # EXIT_DIRECTORY events are bookkeeping only
            if event.kind is EventKind.EXIT_DIRECTORY:
                continue

            self._next = event
            return

    def _handle_error(self, event: Event) -> None:
        """Apply the on-error policy. Raises under ABORT."""
        error = event.error
        policy = self._on_error

        if policy is OnErrorPolicy.ABORT:
            if isinstance(error, DirectoryCloseError):
                # Close failures never stop a walk on their own
                logger.warning("%s: %s", error_category(error), event.path)
                return
            self._exhausted = True
            self.close()
            raise error
        if policy is OnErrorPolicy.LOG_AND_CONTINUE:
            self._reporter.report(error_category(error), event.path, error)
            return
        if policy is OnErrorPolicy.SILENT_CONTINUE:
            return
        raise AssertionError(f"Unhandled on-error policy: {policy}")
