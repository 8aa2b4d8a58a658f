"""Test fixtures for DazzleWalk consumers.

InMemoryProbe is a scripted FilesystemProbe: a POSIX-style tree held in a
dict, with symbolic links, injectable failures, and counters for every
listing opened and closed. It lets tests reproduce permission failures,
storage errors and link cycles on any platform and without root.

Example:
    probe = InMemoryProbe()
    probe.add_file("/root/a/one.txt")
    probe.add_symlink("/root/a/loop", "/root")
    probe.fail_metadata("/root/secret", PermissionError)

    config = TraversalConfig("/root", follow_links=True,
                             on_error=OnErrorPolicy.SILENT_CONTINUE)
    paths = collect_paths(config, probe=probe)
    assert probe.balanced
"""

import errno
import os
from dataclasses import dataclass, field, replace
from pathlib import PurePath, PurePosixPath
from typing import Any, Dict, Iterator, List, Optional, Type, Union

from ..core.metadata import Metadata
from ..probes.base import DirectoryChild, DirectoryListing, FilesystemProbe

PathArg = Union[str, PurePath]
ErrorArg = Union[OSError, Type[OSError]]

_MAX_LINK_HOPS = 40

DIR = "dir"
FILE = "file"
LINK = "link"
OTHER = "other"


@dataclass
class _Node:
    kind: str
    inode: int
    target: Optional[PurePosixPath] = None
    children: List[str] = field(default_factory=list)
    size: int = 0


def _make_error(error: ErrorArg, path: PurePath) -> OSError:
    if isinstance(error, OSError):
        return error
    codes = {
        FileNotFoundError: errno.ENOENT,
        PermissionError: errno.EACCES,
        NotADirectoryError: errno.ENOTDIR,
    }
    code = codes.get(error, errno.EIO)
    return error(code, os.strerror(code), str(path))


class InMemoryListing(DirectoryListing):
    """Listing over a snapshot of an in-memory directory."""

    def __init__(self, probe: 'InMemoryProbe', path: PurePosixPath,
                 names: List[str], fail_after: Optional[int],
                 iteration_error: Optional[OSError], close_error: Optional[OSError]):
        self.probe = probe
        self.path = path
        self._names = names
        self._fail_after = fail_after
        self._iteration_error = iteration_error
        self._close_error = close_error
        self.close_calls = 0

    def __iter__(self) -> Iterator[DirectoryChild]:
        for index, name in enumerate(self._names):
            if self._fail_after is not None and index >= self._fail_after:
                raise self._iteration_error
            self.probe.children_read += 1
            yield DirectoryChild(self.path / name, None)
        if self._fail_after is not None and self._fail_after >= len(self._names):
            raise self._iteration_error

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def close(self) -> None:
        self.close_calls += 1
        if self.close_calls > 1:
            self.probe.double_closes += 1
            return
        self.probe._listing_closed(self)
        if self._close_error is not None:
            raise self._close_error


class InMemoryProbe(FilesystemProbe):
    """In-memory filesystem for tests.

    Paths are POSIX-style and absolute. Parent directories are created on
    demand. Children are listed in insertion order.

    Attributes:
        open_count: Listings successfully opened
        close_count: Listings closed (first close only)
        double_closes: Listings closed more than once
        children_read: Children handed out by all listings
        max_open: Most listings open at the same time
    """

    def __init__(self, identity_keys: bool = True):
        """Initialize probe.

        Args:
            identity_keys: Report identity keys in metadata. When False the
                engine must fall back to ``same_file`` for cycle detection.
        """
        self.identity_keys = identity_keys
        self._nodes: Dict[PurePosixPath, _Node] = {}
        self._next_inode = 1
        self._metadata_failures: Dict[PurePosixPath, OSError] = {}
        self._open_failures: Dict[PurePosixPath, OSError] = {}
        self._iteration_failures: Dict[PurePosixPath, Any] = {}
        self._close_failures: Dict[PurePosixPath, OSError] = {}
        self.open_count = 0
        self.close_count = 0
        self.double_closes = 0
        self.children_read = 0
        self.max_open = 0
        self.same_file_calls = 0
        self.hints_seen = 0
        self._open: List[InMemoryListing] = []
        self._add(PurePosixPath("/"), DIR)

    # Building the tree

    def _add(self, path: PurePosixPath, kind: str, **kwargs) -> _Node:
        if path in self._nodes:
            existing = self._nodes[path]
            if existing.kind == kind == DIR:
                return existing
            raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), str(path))
        if path != path.parent:
            parent = self.add_dir(path.parent)
            parent.children.append(path.name)
        node = _Node(kind, self._next_inode, **kwargs)
        self._next_inode += 1
        self._nodes[path] = node
        return node

    def add_dir(self, path: PathArg) -> _Node:
        return self._add(PurePosixPath(path), DIR)

    def add_file(self, path: PathArg, size: int = 0) -> _Node:
        return self._add(PurePosixPath(path), FILE, size=size)

    def add_symlink(self, path: PathArg, target: PathArg) -> _Node:
        path = PurePosixPath(path)
        target = PurePosixPath(target)
        if not target.is_absolute():
            target = path.parent / target
        return self._add(path, LINK, target=target)

    def add_special(self, path: PathArg) -> _Node:
        """Add an entry that is neither file nor directory (e.g. a FIFO)."""
        return self._add(PurePosixPath(path), OTHER)

    # Failure injection

    def fail_metadata(self, path: PathArg, error: ErrorArg = PermissionError) -> None:
        path = PurePosixPath(path)
        self._metadata_failures[path] = _make_error(error, path)

    def fail_open(self, path: PathArg, error: ErrorArg = PermissionError) -> None:
        path = PurePosixPath(path)
        self._open_failures[path] = _make_error(error, path)

    def fail_iteration(self, path: PathArg, after: int = 0, error: ErrorArg = OSError) -> None:
        """Make the listing of ``path`` fail after ``after`` children."""
        path = PurePosixPath(path)
        self._iteration_failures[path] = (after, _make_error(error, path))

    def fail_close(self, path: PathArg, error: ErrorArg = OSError) -> None:
        path = PurePosixPath(path)
        self._close_failures[path] = _make_error(error, path)

    # Bookkeeping

    @property
    def open_listings(self) -> List[InMemoryListing]:
        return list(self._open)

    @property
    def balanced(self) -> bool:
        """True if every opened listing was closed exactly once."""
        return (self.open_count == self.close_count
                and not self._open and self.double_closes == 0)

    def _listing_closed(self, listing: InMemoryListing) -> None:
        self.close_count += 1
        self._open.remove(listing)

    # Resolution

    def _resolve(self, path: PathArg, follow_last: bool = True, hops: int = 0) -> PurePosixPath:
        """Return the real path of ``path``, following links like the OS."""
        path = PurePosixPath(path)
        parts = path.parts
        current = PurePosixPath(parts[0])
        for index, name in enumerate(parts[1:], start=1):
            candidate = current / name
            node = self._nodes.get(candidate)
            if node is None:
                raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path))
            last = index == len(parts) - 1
            if node.kind == LINK and (follow_last or not last):
                hops += 1
                if hops > _MAX_LINK_HOPS:
                    raise OSError(errno.ELOOP, os.strerror(errno.ELOOP), str(path))
                current = self._resolve(node.target, True, hops)
            elif not last and node.kind != DIR:
                raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), str(path))
            else:
                current = candidate
        return current

    def _node_metadata(self, node: _Node, is_symlink: bool) -> Metadata:
        return Metadata(
            is_dir=node.kind == DIR,
            is_file=node.kind == FILE,
            is_symlink=is_symlink,
            identity=("mem", node.inode) if self.identity_keys else None,
            size=node.size,
        )

    # FilesystemProbe

    def read_metadata(self, path: PurePath, follow_links: bool = False,
                      hint: Any = None) -> Metadata:
        if hint is not None:
            self.hints_seen += 1
        path = PurePosixPath(path)
        if path in self._metadata_failures:
            raise self._metadata_failures[path]

        own = self._nodes[self._resolve(path, follow_last=False)]
        if own.kind != LINK:
            return self._node_metadata(own, False)
        try:
            target = self._nodes[self._resolve(path, follow_last=True)]
        except OSError:
            target = None
        if follow_links and target is not None:
            return self._node_metadata(target, True)
        # Dangling or unfollowed link: describe the link itself
        return replace(
            self._node_metadata(own, True),
            target_is_dir=target is not None and target.kind == DIR,
            target_is_file=target is not None and target.kind == FILE,
        )

    def open_directory(self, path: PurePath) -> InMemoryListing:
        path = PurePosixPath(path)
        if path in self._open_failures:
            raise self._open_failures[path]
        real = self._resolve(path)
        node = self._nodes[real]
        if node.kind != DIR:
            raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), str(path))

        fail_after, iteration_error = self._iteration_failures.get(path, (None, None))
        listing = InMemoryListing(
            self, path, list(node.children), fail_after, iteration_error,
            self._close_failures.get(path),
        )
        self.open_count += 1
        self._open.append(listing)
        self.max_open = max(self.max_open, len(self._open))
        return listing

    def same_file(self, first: PurePath, second: PurePath) -> bool:
        self.same_file_calls += 1
        return self._resolve(first) == self._resolve(second)
