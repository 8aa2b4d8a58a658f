"""Core components of DazzleWalk: events, the engine and the iterator."""

from .metadata import Metadata
from .events import Event, EventKind
from .engine import DirectoryFrame, EngineState, TraversalEngine
from .flat import FlatListing
from .iterator import EventIterator

__all__ = [
    'Metadata',
    'Event',
    'EventKind',
    'DirectoryFrame',
    'EngineState',
    'TraversalEngine',
    'FlatListing',
    'EventIterator',
]
