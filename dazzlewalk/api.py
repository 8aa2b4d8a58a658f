"""High-level API for DazzleWalk.

These functions are the entry point for callers. They build the event source
from a TraversalConfig, check that the start path is usable, and hand back a
lazy, single-pass iterator. To walk again, call the function again.

Example:
    >>> config = TraversalConfig.from_options("/data", max_depth=3, log_errors=True)
    >>> with walk(config) as paths:
    ...     for path in paths:
    ...         print(path)
"""

from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, List, Optional, Tuple, Union

from .config import TraversalConfig
from .core.engine import TraversalEngine
from .core.events import Event
from .core.flat import FlatListing
from .core.iterator import EventIterator
from .probes.base import FilesystemProbe
from .probes.local import LocalFilesystemProbe
from .reporting import ErrorReporter


class PathIterator:
    """Iterator over the paths of a walk, dropping the metadata.

    Closing it (explicitly, through ``with``, or by abandoning it) closes the
    underlying EventIterator and every directory it still holds open.
    """

    def __init__(self, events: EventIterator):
        self.events = events

    def __iter__(self) -> 'PathIterator':
        return self

    def __next__(self) -> PurePath:
        return next(self.events).path

    def has_next(self) -> bool:
        return self.events.has_next()

    def close(self) -> None:
        self.events.close()

    @property
    def closed(self) -> bool:
        return self.events.closed

    def __enter__(self) -> 'PathIterator':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


@dataclass
class TreeStats:
    """Counts of entry kinds seen during a walk."""

    directories: int = 0
    files: int = 0
    symlinks: int = 0
    other: int = 0

    @property
    def total(self) -> int:
        return self.directories + self.files + self.symlinks + self.other

    def add(self, event: Event) -> None:
        metadata = event.metadata
        if metadata is None:
            return
        # Links first: a followed link to a directory is still counted as a link
        if metadata.is_symlink:
            self.symlinks += 1
        elif metadata.is_file:
            self.files += 1
        elif metadata.is_dir:
            self.directories += 1
        else:
            self.other += 1


def _open_source(config: TraversalConfig,
                 probe: FilesystemProbe) -> Tuple[Any, Event]:
    """Create and start the event source for a config.

    Raises the start event's error, if any, after releasing the source.
    """
    if config.recurse:
        source = TraversalEngine(config, probe)
    else:
        source = FlatListing(config, probe)

    try:
        first = source.start(config.start)
        if first.error is not None:
            raise first.error
    except BaseException:
        source.close()
        raise
    return source, first


def walk_events(config: TraversalConfig,
                probe: Optional[FilesystemProbe] = None,
                reporter: Optional[ErrorReporter] = None) -> EventIterator:
    """Walk a tree, yielding full events.

    ENTER_DIRECTORY and VISIT events are yielded; EXIT_DIRECTORY events and
    events carrying errors are handled internally.

    Args:
        config: Resolved traversal configuration
        probe: Filesystem access (defaults to the local filesystem)
        reporter: Receives skipped errors under LOG_AND_CONTINUE

    Returns:
        EventIterator over the walk

    Raises:
        TraversalError: If the start path cannot be read or opened
    """
    if probe is None:
        probe = LocalFilesystemProbe()
    source, first = _open_source(config, probe)
    return EventIterator(source, first, config.on_error, reporter)


def walk(config: TraversalConfig,
         probe: Optional[FilesystemProbe] = None,
         reporter: Optional[ErrorReporter] = None) -> PathIterator:
    """Walk a tree, yielding paths.

    The start path comes first; every directory comes before its children.
    See ``walk_events`` for arguments.
    """
    return PathIterator(walk_events(config, probe, reporter))


def traverse(start: Union[str, PurePath],
             probe: Optional[FilesystemProbe] = None,
             reporter: Optional[ErrorReporter] = None,
             **options) -> PathIterator:
    """Simple interface for walking a tree.

    Args:
        start: Path to start from
        probe: Filesystem access (defaults to the local filesystem)
        reporter: Receives skipped errors under log_errors
        **options: Any ``TraversalConfig.from_options`` keyword

    Example:
        >>> for path in traverse("/etc", max_depth=1, silent_errors=True):
        ...     print(path)
    """
    config = TraversalConfig.from_options(start, **options)
    return walk(config, probe, reporter)


def list_directory(start: Union[str, PurePath],
                   probe: Optional[FilesystemProbe] = None,
                   reporter: Optional[ErrorReporter] = None,
                   **options) -> PathIterator:
    """List a directory and its direct regular-file children."""
    options['recurse'] = False
    return traverse(start, probe, reporter, **options)


def collect_paths(config: TraversalConfig,
                  probe: Optional[FilesystemProbe] = None,
                  reporter: Optional[ErrorReporter] = None) -> List[PurePath]:
    """Walk the whole tree and return every path in walk order."""
    with walk(config, probe, reporter) as paths:
        return list(paths)


def count_entries(config: TraversalConfig,
                  probe: Optional[FilesystemProbe] = None,
                  reporter: Optional[ErrorReporter] = None) -> TreeStats:
    """Count directories, files, links and other entries in a tree.

    Example:
        >>> stats = count_entries(TraversalConfig.from_options("/", log_errors=True,
        ...                                                    denylist=["/proc"]))
        >>> print(stats.directories, stats.files)
    """
    stats = TreeStats()
    with walk_events(config, probe, reporter) as events:
        for event in events:
            stats.add(event)
    return stats
