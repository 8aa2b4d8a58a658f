"""Entry filters for DazzleWalk.

A filter decides whether a child of an opened directory is reported and
descended into at all. Filters never run against the start path.

Filters are plain value objects with no mutable state, so one instance can be
shared by any number of walks and threads.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import PurePath
from typing import Callable, Iterable, Optional, Tuple, Union

from .core.metadata import Metadata


class EntryFilter(ABC):
    """Predicate over a path plus its metadata."""

    @abstractmethod
    def accepts(self, path: PurePath, metadata: Metadata) -> bool:
        """Return True if the entry should be reported (and descended)."""
        pass

    def accepts_path(self, path: PurePath) -> bool:
        """Structural part of the filter, decidable without any I/O.

        The engine calls this before reading a child's metadata so pruned
        entries cost nothing. ``accepts`` must reject anything this rejects.
        """
        return True


@dataclass(frozen=True)
class DefaultEntryFilter(EntryFilter):
    """The default exclusion policy.

    With every flag off (the default) all entries are accepted. Links are
    judged by what they point to, so a link to a directory passes
    ``directories_only`` even when links are not followed. A dangling link
    points to nothing and counts as exotic.
    """

    directories_only: bool = False      # Reject anything that is not a directory
    no_symlink_entries: bool = False    # Reject symbolic links
    no_exotic_entries: bool = False     # Reject FIFOs, sockets, devices, ...

    def rejects_by_default(self, metadata: Metadata) -> bool:
        if self.directories_only and not metadata.points_to_dir:
            return True
        if self.no_symlink_entries and metadata.is_symlink:
            return True
        if (self.no_exotic_entries
                and not metadata.points_to_dir and not metadata.points_to_file):
            return True
        return False

    def accepts(self, path: PurePath, metadata: Metadata) -> bool:
        return not self.rejects_by_default(metadata)


def _has_prefix(path: PurePath, prefix: PurePath) -> bool:
    parts = PurePath(path).parts
    return parts[:len(prefix.parts)] == prefix.parts


class DenylistEntryFilter(EntryFilter):
    """Prunes every path at or below one of a set of prefixes.

    Matching compares path components only. Nothing is resolved against the
    real filesystem, so ``/data/../secret`` is not the same as ``/secret``
    and the start path must be spelled the way the prefixes are (both
    absolute or both relative to the same base).

    The default policy of ``base`` is always checked first, so adding a
    denylist never re-admits an entry the default policy rejects.
    """

    def __init__(self,
                 prefixes: Iterable[Union[str, PurePath]],
                 base: Optional[DefaultEntryFilter] = None):
        """Initialize denylist filter.

        Args:
            prefixes: Paths to prune, e.g. ``["/proc", "/tmp"]``
            base: Default policy to apply first (accept-all if omitted)
        """
        self.prefixes: Tuple[PurePath, ...] = tuple(PurePath(p) for p in prefixes)
        self.base = base if base is not None else DefaultEntryFilter()

    def accepts_path(self, path: PurePath) -> bool:
        return not any(_has_prefix(path, prefix) for prefix in self.prefixes)

    def accepts(self, path: PurePath, metadata: Metadata) -> bool:
        if not self.base.accepts(path, metadata):
            return False
        return self.accepts_path(path)

    def __repr__(self) -> str:
        prefixes = [str(p) for p in self.prefixes]
        return f"DenylistEntryFilter(prefixes={prefixes!r}, base={self.base!r})"


class PredicateEntryFilter(EntryFilter):
    """Composes a user predicate over another filter.

    Useful when the decision needs more than prefixes, e.g. skipping
    ``.git`` directories by name. The inner filter runs first.
    """

    def __init__(self,
                 predicate: Callable[[PurePath, Metadata], bool],
                 base: Optional[EntryFilter] = None):
        self.predicate = predicate
        self.base = base if base is not None else DefaultEntryFilter()

    def accepts_path(self, path: PurePath) -> bool:
        return self.base.accepts_path(path)

    def accepts(self, path: PurePath, metadata: Metadata) -> bool:
        if not self.base.accepts(path, metadata):
            return False
        return bool(self.predicate(path, metadata))
