"""Traversal events.

An ``Event`` is a closed sum type tagged by ``EventKind``:

    ENTER_DIRECTORY(path, metadata)
    EXIT_DIRECTORY(path, error?)
    VISIT(path, metadata | error)

Consumers branch on ``event.kind`` and must handle all three kinds. An event
that carries an error describes an entry or directory that could not be
fully processed; the walk continues unless the on-error policy says
otherwise.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Optional

from ..errors import TraversalError
from .metadata import Metadata


class EventKind(Enum):
    """The three kinds of traversal event."""
    ENTER_DIRECTORY = "enter"   # Directory listing opened, children follow
    EXIT_DIRECTORY = "exit"     # Directory listing closed
    VISIT = "visit"             # Any other entry, or a directory not descended


@dataclass(frozen=True)
class Event:
    """A single step of a traversal."""

    kind: EventKind
    path: PurePath
    metadata: Optional[Metadata] = None
    error: Optional[TraversalError] = None

    @classmethod
    def enter(cls, path: PurePath, metadata: Metadata) -> 'Event':
        return cls(EventKind.ENTER_DIRECTORY, path, metadata)

    @classmethod
    def exit(cls, path: PurePath, error: Optional[TraversalError] = None) -> 'Event':
        return cls(EventKind.EXIT_DIRECTORY, path, None, error)

    @classmethod
    def visit(cls, path: PurePath, metadata: Metadata) -> 'Event':
        return cls(EventKind.VISIT, path, metadata)

    @classmethod
    def failed(cls, path: PurePath, error: TraversalError,
               metadata: Optional[Metadata] = None) -> 'Event':
        """A VISIT event for an entry that could not be processed."""
        return cls(EventKind.VISIT, path, metadata, error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_directory(self) -> bool:
        """True if the event describes a directory (entered or not)."""
        if self.kind is EventKind.ENTER_DIRECTORY or self.kind is EventKind.EXIT_DIRECTORY:
            return True
        if self.kind is EventKind.VISIT:
            return self.metadata is not None and self.metadata.is_dir
        raise AssertionError(f"Unhandled event kind: {self.kind}")
