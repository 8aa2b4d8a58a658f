"""Local filesystem probe built on os.scandir.

``os.scandir`` hands out ``DirEntry`` objects that carry the file type from
the directory read itself, and cache their stat result once taken. The probe
passes each ``DirEntry`` along as the metadata hint so most entries cost no
extra syscall beyond the one ``lstat`` the walk needs anyway.
"""

import os
import stat
from dataclasses import replace
from pathlib import Path, PurePath
from typing import Any, Iterator

from ..core.metadata import Metadata
from .base import DirectoryChild, DirectoryListing, FilesystemProbe


class LocalDirectoryListing(DirectoryListing):
    """Wraps an ``os.scandir`` iterator."""

    def __init__(self, path: PurePath):
        self.path = Path(path)
        self._scandir = os.scandir(self.path)

    def __iter__(self) -> Iterator[DirectoryChild]:
        for entry in self._scandir:
            yield DirectoryChild(self.path / entry.name, entry)

    def close(self) -> None:
        self._scandir.close()

    def __repr__(self) -> str:
        return f"LocalDirectoryListing({self.path})"


class LocalFilesystemProbe(FilesystemProbe):
    """Probe for the local filesystem."""

    def open_directory(self, path: PurePath) -> LocalDirectoryListing:
        return LocalDirectoryListing(path)

    def read_metadata(self, path: PurePath, follow_links: bool = False,
                      hint: Any = None) -> Metadata:
        # The cached entry is only trusted when it does not describe a link
        # we are about to follow: a link's target must be resolved afresh.
        if isinstance(hint, os.DirEntry) and not (follow_links and hint.is_symlink()):
            own = Metadata.from_stat(hint.stat(follow_symlinks=False))
        else:
            own = Metadata.from_stat(os.lstat(path))
            if own.is_symlink and follow_links:
                try:
                    target_stat = os.stat(path)
                except OSError:
                    # Dangling or unreadable target: describe the link itself
                    return replace(own, target_is_dir=False, target_is_file=False)
                return Metadata.from_stat(target_stat, is_symlink=True)

        if own.is_symlink:
            return _with_target_kinds(own, path)
        return own

    def same_file(self, first: PurePath, second: PurePath) -> bool:
        return os.path.samefile(first, second)

    def is_dir_hint(self, child: DirectoryChild, follow_links: bool = False) -> bool:
        if isinstance(child.hint, os.DirEntry):
            try:
                return child.hint.is_dir(follow_symlinks=follow_links)
            except OSError:
                return False
        return super().is_dir_hint(child, follow_links)


def _with_target_kinds(metadata: Metadata, path: PurePath) -> Metadata:
    """Record what an unfollowed link points to."""
    try:
        mode = os.stat(path).st_mode
    except OSError:
        return replace(metadata, target_is_dir=False, target_is_file=False)
    return replace(metadata, target_is_dir=stat.S_ISDIR(mode),
                   target_is_file=stat.S_ISREG(mode))
