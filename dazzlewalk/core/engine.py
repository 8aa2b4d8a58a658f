"""The traversal engine.

TraversalEngine walks a filesystem tree depth-first, producing one Event per
call to ``advance()``. It keeps a stack with one frame per directory whose
listing is still being enumerated, so memory and open listings are bounded by
the depth of the tree rather than its size.

Typical use::

    with TraversalEngine(config, probe) as engine:
        event = engine.start(config.start)
        while event is not None:
            process(event)
            event = engine.advance()

Every listing the engine opens is closed exactly once: when its frame is
exhausted, when it is force-popped, or when the engine is closed.
"""

import logging
from enum import Enum
from pathlib import PurePath
from typing import TYPE_CHECKING, Any, Hashable, Iterator, List, Optional

from ..errors import (
    DirectoryCloseError,
    DirectoryIterationError,
    DirectoryOpenError,
    FileSystemLoopError,
    MetadataUnavailableError,
    TraversalClosedError,
    TraversalStateError,
)
from ..ordering import EntryOrder, ordered_children
from ..probes.base import (
    DirectoryChild,
    DirectoryListing,
    FilesystemProbe,
    IdentityCapability,
)
from .events import Event

if TYPE_CHECKING:
    from ..config import TraversalConfig

logger = logging.getLogger(__name__)


class EngineState(Enum):
    IDLE = "idle"
    OPEN = "open"
    CLOSED = "closed"


class DirectoryFrame:
    """One directory on the traversal stack.

    Owns the directory's open listing until ``close`` is called.
    """

    __slots__ = ('path', 'identity', 'listing', 'children', 'skipped', '_closed')

    def __init__(self,
                 path: PurePath,
                 identity: Optional[Hashable],
                 listing: DirectoryListing,
                 children: Iterator[DirectoryChild]):
        self.path = path
        self.identity = identity
        self.listing = listing
        self.children = children
        self.skipped = False
        self._closed = False

    def skip(self) -> None:
        self.skipped = True

    def next_child(self) -> Optional[DirectoryChild]:
        """Return the next child, or None when the listing is exhausted.

        Raises:
            OSError: If the listing fails mid-enumeration
        """
        return next(self.children, None)

    def close(self) -> Optional[DirectoryCloseError]:
        """Close the listing, returning the close failure if any."""
        if self._closed:
            return None
        self._closed = True
        try:
            self.listing.close()
        except OSError as exc:
            return DirectoryCloseError(self.path, exc)
        return None

    def __repr__(self) -> str:
        return f"DirectoryFrame(path={self.path!r}, skipped={self.skipped})"


class TraversalEngine:
    """Stack-based, pull-driven filesystem walker.

    The engine is single-reader: calls must not overlap. It spawns no threads
    and performs I/O only inside probe calls.
    """

    def __init__(self,
                 config: 'TraversalConfig',
                 probe: FilesystemProbe,
                 identity: Optional[IdentityCapability] = None):
        """Initialize engine.

        Args:
            config: Resolved traversal configuration
            probe: Filesystem access
            identity: Cycle-detection capability (defaults to the probe)
        """
        self.config = config
        self.probe = probe
        self.identity = identity if identity is not None else probe
        self._filter = config.entry_filter
        self._stack: List[DirectoryFrame] = []
        self._started = False
        self._closed = False

    # Lifecycle

    @property
    def state(self) -> EngineState:
        if self._closed:
            return EngineState.CLOSED
        return EngineState.OPEN if self._started else EngineState.IDLE

    @property
    def depth(self) -> int:
        """Number of directories currently being enumerated."""
        return len(self._stack)

    def is_open(self) -> bool:
        return not self._closed

    def __enter__(self) -> 'TraversalEngine':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # Events

    def start(self, root: PurePath) -> Event:
        """Visit the start path.

        If the start is a directory that can be entered the engine keeps its
        listing open and ``advance`` produces the rest of the walk; otherwise
        the returned event is the only one.
        """
        if self._closed:
            raise TraversalClosedError("Engine is closed")
        if self._started:
            raise TraversalStateError("Engine already started")
        self._started = True

        return self._visit(root, hint=None, is_root=True)

    def advance(self) -> Optional[Event]:
        """Return the next event, or None once the walk is exhausted."""
        while self._stack:
            top = self._stack[-1]
            child = None
            failure = None

            if not top.skipped:
                try:
                    child = top.next_child()
                except OSError as exc:
                    failure = DirectoryIterationError(top.path, exc)

            if child is None:
                return self._exit_top(failure)

            event = self._visit(child.path, hint=child.hint)
            if event is not None:
                return event
            # Child was filtered out, keep reading the same directory
        return None

    def skip_remaining_siblings(self) -> None:
        """Stop enumerating the directory at the top of the stack.

        The next ``advance`` closes it and returns its EXIT_DIRECTORY event.
        No-op if the stack is empty.
        """
        if self._stack:
            self._stack[-1].skip()

    def pop(self) -> None:
        """Close and discard the top frame without an EXIT_DIRECTORY event.

        Close failures are ignored. No-op if the stack is empty.
        """
        if not self._stack:
            return
        frame = self._stack.pop()
        error = frame.close()
        if error is not None:
            logger.debug("Ignoring close failure during pop: %s", error)

    def close(self) -> None:
        """Close every open listing. Idempotent."""
        if self._closed:
            return
        try:
            while self._stack:
                self.pop()
        finally:
            self._closed = True

    # Internals

    def _exit_top(self, failure: Optional[DirectoryIterationError]) -> Event:
        top = self._stack[-1]
        try:
            close_error = top.close()
        finally:
            self._stack.pop()

        if close_error is not None:
            if failure is None:
                failure = close_error
            else:
                failure.add_suppressed(close_error)
        logger.debug("Exit directory %s", top.path)
        return Event.exit(top.path, failure)

    def _read_metadata(self, path: PurePath, hint: Any):
        return self.probe.read_metadata(path, self.config.follow_links, hint)

    def _visit(self, path: PurePath, hint: Any, is_root: bool = False) -> Optional[Event]:
        """Visit one entry, returning its event or None if it is filtered out."""
        if not is_root and not self._filter.accepts_path(path):
            return None

        try:
            metadata = self._read_metadata(path, hint)
        except OSError as exc:
            return Event.failed(path, MetadataUnavailableError(path, exc))

        accepted = is_root or self._filter.accepts(path, metadata)
        if not accepted:
            return None

        max_depth = self.config.max_depth
        at_limit = max_depth is not None and len(self._stack) >= max_depth
        if not metadata.is_dir or at_limit:
            return Event.visit(path, metadata)

        identity = self.identity.identity_key(metadata)
        if self.config.follow_links and self._would_loop(path, identity):
            logger.debug("File system loop at %s", path)
            return Event.failed(path, FileSystemLoopError(path), metadata)

        try:
            listing = self.probe.open_directory(path)
        except OSError as exc:
            return Event.failed(path, DirectoryOpenError(path, exc), metadata)

        try:
            children = self._children(listing)
        except BaseException:
            listing.close()
            raise
        self._stack.append(DirectoryFrame(path, identity, listing, children))
        logger.debug("Enter directory %s (depth %d)", path, len(self._stack))
        return Event.enter(path, metadata)

    def _children(self, listing: DirectoryListing) -> Iterator[DirectoryChild]:
        if self.config.ordering is EntryOrder.FILES_FIRST:
            return ordered_children(listing, self.probe, self.config.follow_links)
        return iter(listing)

    def _would_loop(self, path: PurePath, identity: Optional[Hashable]) -> bool:
        """Return True if entering ``path`` would revisit an ancestor.

        Identity keys are compared when both sides have one; otherwise the
        (slower) same-file check is used. A failing same-file check counts
        as "different".
        """
        for frame in self._stack:
            if identity is not None and frame.identity is not None:
                if identity == frame.identity:
                    return True
                continue
            try:
                if self.identity.same_file(path, frame.path):
                    return True
            except OSError:
                continue
        return False
