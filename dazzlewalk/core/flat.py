"""One-level directory listing.

Used instead of the TraversalEngine when a walk is configured with
``recurse=False``: the start directory is reported, followed by its direct
regular-file children. No stack is involved, just the one listing.
"""

import errno
import os
from pathlib import PurePath
from typing import TYPE_CHECKING, Iterator, Optional

from ..errors import (
    DirectoryCloseError,
    DirectoryIterationError,
    DirectoryOpenError,
    MetadataUnavailableError,
    TraversalClosedError,
    TraversalError,
)
from ..ordering import EntryOrder, ordered_children
from ..probes.base import DirectoryChild, DirectoryListing, FilesystemProbe
from .events import Event

if TYPE_CHECKING:
    from ..config import TraversalConfig


class FlatListing:
    """Event source listing a single directory.

    Speaks the same ``start`` / ``advance`` / ``close`` protocol as the
    engine so it can be driven by an EventIterator.

    Children are tested for being regular files with links followed, so a
    link to a file counts as a file. The configured entry filter still
    applies.
    """

    def __init__(self, config: 'TraversalConfig', probe: FilesystemProbe):
        self.config = config
        self.probe = probe
        self._root: Optional[PurePath] = None
        self._listing: Optional[DirectoryListing] = None
        self._children: Optional[Iterator[DirectoryChild]] = None
        self._closed = False

    def start(self, root: PurePath) -> Event:
        if self._closed:
            raise TraversalClosedError("Listing is closed")
        self._root = root
        try:
            metadata = self.probe.read_metadata(root, self.config.follow_links)
        except OSError as exc:
            return Event.failed(root, MetadataUnavailableError(root, exc))

        if not metadata.is_dir:
            cause = NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), str(root))
            return Event.failed(root, DirectoryOpenError(root, cause), metadata)

        try:
            self._listing = self.probe.open_directory(root)
        except OSError as exc:
            return Event.failed(root, DirectoryOpenError(root, exc), metadata)

        if self.config.ordering is EntryOrder.FILES_FIRST:
            self._children = ordered_children(self._listing, self.probe, True)
        else:
            self._children = iter(self._listing)
        return Event.enter(root, metadata)

    def advance(self) -> Optional[Event]:
        entry_filter = self.config.entry_filter
        while self._children is not None:
            try:
                child = next(self._children, None)
            except OSError as exc:
                return self._finish(DirectoryIterationError(self._root, exc))
            if child is None:
                return self._finish(None)
            if not entry_filter.accepts_path(child.path):
                continue

            try:
                metadata = self.probe.read_metadata(child.path, True, child.hint)
            except OSError as exc:
                return Event.failed(child.path, MetadataUnavailableError(child.path, exc))

            if metadata.is_file and entry_filter.accepts(child.path, metadata):
                return Event.visit(child.path, metadata)
        return None

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()

    def _release(self) -> Optional[OSError]:
        listing, self._listing, self._children = self._listing, None, None
        if listing is None:
            return None
        try:
            listing.close()
        except OSError as exc:
            return exc
        return None

    def _finish(self, failure: Optional[TraversalError]) -> Event:
        close_error = self._release()
        if close_error is not None:
            wrapped = DirectoryCloseError(self._root, close_error)
            if failure is None:
                failure = wrapped
            else:
                failure.add_suppressed(wrapped)
        return Event.exit(self._root, failure)
