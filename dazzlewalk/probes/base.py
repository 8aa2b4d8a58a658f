"""FilesystemProbe abstraction for DazzleWalk.

The probe is the only thing the engine knows about the filesystem. It lists
directories, reads metadata and answers identity questions. Keeping these
primitives behind an interface lets the same engine walk the real disk, an
in-memory test tree, or anything else that looks like a filesystem.
"""

from abc import ABC, abstractmethod
from collections import namedtuple
from pathlib import PurePath
from typing import Any, Hashable, Iterator, Optional

from ..core.metadata import Metadata


# One child of an open listing. ``hint`` is probe-specific cached data
# (os.DirEntry for the local probe) that read_metadata may use or ignore.
DirectoryChild = namedtuple('DirectoryChild', ['path', 'hint'])


class DirectoryListing(ABC):
    """An open, closeable listing of a directory's immediate children.

    Iterating yields ``DirectoryChild`` tuples lazily. Iteration may raise
    ``OSError`` if the backing storage fails mid-enumeration. ``close`` may
    also raise ``OSError``; the listing counts as released either way.
    """

    @abstractmethod
    def __iter__(self) -> Iterator[DirectoryChild]:
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    def __enter__(self) -> 'DirectoryListing':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class IdentityCapability(ABC):
    """Answers "are these two paths the same filesystem object?".

    Used for cycle detection. ``identity_key`` is the cheap path: a stable
    key taken from already-read metadata. ``same_file`` is the fallback for
    platforms or entries without one and usually costs extra I/O.
    """

    def identity_key(self, metadata: Metadata) -> Optional[Hashable]:
        """Return the identity key for an entry, or None if unavailable."""
        return metadata.identity

    @abstractmethod
    def same_file(self, first: PurePath, second: PurePath) -> bool:
        """Return True if both paths resolve to the same object.

        Raises:
            OSError: If either path cannot be resolved
        """
        pass


class FilesystemProbe(IdentityCapability):
    """Abstract access to the filesystem primitives the engine consumes.

    Every operation may raise ``OSError``.
    """

    @abstractmethod
    def open_directory(self, path: PurePath) -> DirectoryListing:
        """Open a listing of the immediate children of ``path``."""
        pass

    @abstractmethod
    def read_metadata(self, path: PurePath, follow_links: bool = False,
                      hint: Any = None) -> Metadata:
        """Read basic metadata for ``path``.

        Args:
            path: Entry to inspect
            follow_links: Describe the link target rather than the link.
                If the target cannot be resolved the link itself is
                described.
            hint: Cached data from the listing that produced ``path``.
                Implementations may ignore it; results must not depend on
                whether it was honored.
        """
        pass

    def is_dir_hint(self, child: DirectoryChild, follow_links: bool = False) -> bool:
        """Cheap best-effort directory check used for ordering.

        Never raises; an entry that cannot be inspected counts as a
        non-directory.
        """
        try:
            return self.read_metadata(child.path, follow_links, child.hint).is_dir
        except OSError:
            return False
