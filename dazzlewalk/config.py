"""Configuration system for DazzleWalk.

A TraversalConfig is resolved and validated once, before any filesystem
access. Invalid configurations raise InvalidConfigurationError immediately
rather than failing halfway through a walk.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePath
from typing import Iterable, List, Optional, Union

from .errors import InvalidConfigurationError
from .filters import DefaultEntryFilter, DenylistEntryFilter, EntryFilter
from .ordering import EntryOrder


class OnErrorPolicy(Enum):
    """What to do with an entry or directory that could not be processed."""
    ABORT = "abort"                        # Raise at the offending entry
    LOG_AND_CONTINUE = "log_and_continue"  # Report it, skip it, carry on
    SILENT_CONTINUE = "silent_continue"    # Skip it, carry on


@dataclass(frozen=True)
class TraversalConfig:
    """Complete, immutable configuration for a filesystem walk.

    Construct it directly or through ``from_options`` which accepts the
    flat option set (individual flags, denylist strings) and resolves it.
    """

    # Where to start
    start: Union[str, PurePath]

    # Depth control (None = unbounded). The start is depth 0; directories at
    # max_depth are reported but not entered.
    max_depth: Optional[int] = None

    # Link handling
    follow_links: bool = False

    # If False, list the start directory and its regular files only
    recurse: bool = True

    # Error handling. Failing entries are skipped unless told otherwise
    on_error: OnErrorPolicy = OnErrorPolicy.SILENT_CONTINUE

    # Node filtering
    entry_filter: EntryFilter = field(default_factory=DefaultEntryFilter)

    # Ordering of children within a directory
    ordering: EntryOrder = EntryOrder.NATIVE

    def __post_init__(self):
        if isinstance(self.start, str):
            object.__setattr__(self, 'start', Path(self.start))
        errors = self.validate()
        if errors:
            raise InvalidConfigurationError(errors)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not isinstance(self.start, PurePath):
            errors.append("start must be a path")

        if self.max_depth is not None:
            if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
                errors.append("max_depth must be an integer or None")
            elif self.max_depth < 0:
                errors.append("max_depth cannot be negative")

        if not isinstance(self.on_error, OnErrorPolicy):
            errors.append(f"on_error must be an OnErrorPolicy, got {self.on_error!r}")

        if not isinstance(self.entry_filter, EntryFilter):
            errors.append("entry_filter must be an EntryFilter")

        if not isinstance(self.ordering, EntryOrder):
            errors.append(f"ordering must be an EntryOrder, got {self.ordering!r}")

        return errors

    @property
    def unbounded(self) -> bool:
        return self.max_depth is None

    @classmethod
    def from_options(cls,
                     start: Union[str, PurePath],
                     max_depth: Optional[int] = None,
                     follow_links: bool = False,
                     directories_only: bool = False,
                     no_symlink_entries: bool = False,
                     no_exotic_entries: bool = False,
                     recurse: bool = True,
                     abort_on_error: bool = False,
                     log_errors: bool = False,
                     silent_errors: bool = False,
                     denylist: Iterable[Union[str, PurePath]] = (),
                     ordering: EntryOrder = EntryOrder.NATIVE) -> 'TraversalConfig':
        """Create a config from individual options.

        Args:
            start: Path to start walking from
            max_depth: Maximum depth to descend (None = unlimited)
            follow_links: Follow symbolic links to directories
            directories_only: Only report directories
            no_symlink_entries: Do not report symbolic links. Implies that
                links are not followed.
            no_exotic_entries: Do not report FIFOs, devices, sockets, ...
            recurse: Walk the whole tree (False lists one level)
            abort_on_error: Stop at the first failing entry
            log_errors: Report failing entries and continue
            silent_errors: Skip failing entries without reporting
            denylist: Path prefixes to prune
            ordering: Order of children within a directory

        At most one of the three error flags may be set; with none set
        failing entries are skipped silently. A start path that cannot be
        read still raises whatever the policy.

        Raises:
            InvalidConfigurationError: If the options are inconsistent
        """
        chosen = [
            policy for flag, policy in (
                (abort_on_error, OnErrorPolicy.ABORT),
                (log_errors, OnErrorPolicy.LOG_AND_CONTINUE),
                (silent_errors, OnErrorPolicy.SILENT_CONTINUE),
            ) if flag
        ]
        if len(chosen) > 1:
            names = ", ".join(policy.value for policy in chosen)
            raise InvalidConfigurationError(
                f"on-error policies are mutually exclusive, got: {names}"
            )
        on_error = chosen[0] if chosen else OnErrorPolicy.SILENT_CONTINUE

        default_filter = DefaultEntryFilter(
            directories_only=directories_only,
            no_symlink_entries=no_symlink_entries,
            no_exotic_entries=no_exotic_entries,
        )
        denylist = list(denylist)
        entry_filter: EntryFilter = default_filter
        if denylist:
            entry_filter = DenylistEntryFilter(denylist, base=default_filter)

        return cls(
            start=start,
            max_depth=max_depth,
            follow_links=follow_links and not no_symlink_entries,
            recurse=recurse,
            on_error=on_error,
            entry_filter=entry_filter,
            ordering=ordering,
        )

    @classmethod
    def shallow_scan(cls, start: Union[str, PurePath], max_depth: int = 1,
                     **kwargs) -> 'TraversalConfig':
        """Create config for shallow scanning.

        Args:
            start: Path to start walking from
            max_depth: How deep to scan (default 1 = immediate children only)
        """
        return cls(start=start, max_depth=max_depth, **kwargs)
