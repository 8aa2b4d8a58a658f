"""DazzleWalk - Lazy, depth-bounded filesystem traversal.

DazzleWalk walks a directory tree one event at a time. Nothing is read ahead
of the caller, only the directories still being enumerated hold an open
listing, and abandoning a walk early releases them all.

Quick start:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    from dazzlewalk import TraversalConfig, walk

    config = TraversalConfig.from_options("/data", max_depth=3, log_errors=True)
    with walk(config) as paths:
        for path in paths:
            print(path)

Async:
    from dazzlewalk.aio import walk_async
━━━━━━━━━━━━━━━━━━━━━━━━━━
"""

import logging

__version__ = "0.1.0"

# Core components (imported first: config depends on them)
from .core import (
    DirectoryFrame,
    EngineState,
    Event,
    EventIterator,
    EventKind,
    FlatListing,
    Metadata,
    TraversalEngine,
)

# Configuration and filtering
from .config import OnErrorPolicy, TraversalConfig
from .filters import (
    DefaultEntryFilter,
    DenylistEntryFilter,
    EntryFilter,
    PredicateEntryFilter,
)
from .ordering import EntryOrder, files_first_key

# Probes
from .probes import (
    DirectoryChild,
    DirectoryListing,
    FilesystemProbe,
    IdentityCapability,
    LocalFilesystemProbe,
)

# Errors and reporting
from .errors import (
    DirectoryCloseError,
    DirectoryIterationError,
    DirectoryOpenError,
    FileSystemLoopError,
    InvalidConfigurationError,
    MetadataUnavailableError,
    TraversalClosedError,
    TraversalError,
    TraversalStateError,
    error_category,
)
from .reporting import (
    CollectingErrorReporter,
    ErrorRecord,
    ErrorReporter,
    LoggingErrorReporter,
)

# High-level API
from .api import (
    PathIterator,
    TreeStats,
    collect_paths,
    count_entries,
    list_directory,
    traverse,
    walk,
    walk_events,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    # Core
    "DirectoryFrame",
    "EngineState",
    "Event",
    "EventIterator",
    "EventKind",
    "FlatListing",
    "Metadata",
    "TraversalEngine",
    # Config
    "OnErrorPolicy",
    "TraversalConfig",
    "DefaultEntryFilter",
    "DenylistEntryFilter",
    "EntryFilter",
    "PredicateEntryFilter",
    "EntryOrder",
    "files_first_key",
    # Probes
    "DirectoryChild",
    "DirectoryListing",
    "FilesystemProbe",
    "IdentityCapability",
    "LocalFilesystemProbe",
    # Errors
    "DirectoryCloseError",
    "DirectoryIterationError",
    "DirectoryOpenError",
    "FileSystemLoopError",
    "InvalidConfigurationError",
    "MetadataUnavailableError",
    "TraversalClosedError",
    "TraversalError",
    "TraversalStateError",
    "error_category",
    # Reporting
    "CollectingErrorReporter",
    "ErrorRecord",
    "ErrorReporter",
    "LoggingErrorReporter",
    # API
    "PathIterator",
    "TreeStats",
    "collect_paths",
    "count_entries",
    "list_directory",
    "traverse",
    "walk",
    "walk_events",
]
