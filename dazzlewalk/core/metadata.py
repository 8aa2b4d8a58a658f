"""Basic entry metadata shared by probes, filters and the engine."""

import os
import stat
from dataclasses import dataclass
from typing import Hashable, Optional


@dataclass(frozen=True)
class Metadata:
    """What the walker needs to know about a single entry.

    ``is_symlink`` always describes the entry itself. ``is_dir`` and
    ``is_file`` describe the link target when links are being followed and
    the target could be resolved, otherwise the entry itself.

    ``target_is_dir`` and ``target_is_file`` are only set for a link that
    was not followed or could not be resolved. They describe what the link
    points to, and are both False when the target cannot be resolved. The
    walk never descends through them; filters use them to judge a link by
    its target.

    ``identity`` is a stable key for the underlying filesystem object
    (device + inode on POSIX) or ``None`` when the platform cannot provide
    one cheaply.
    """

    is_dir: bool
    is_file: bool
    is_symlink: bool = False
    identity: Optional[Hashable] = None
    size: Optional[int] = None
    target_is_dir: Optional[bool] = None
    target_is_file: Optional[bool] = None

    @property
    def is_other(self) -> bool:
        """True if the entry itself is neither a directory nor a regular file.

        That covers FIFOs, sockets and devices, and also every link that was
        not followed or whose target could not be resolved. Use
        ``points_to_dir``/``points_to_file`` to ask about a link's target.
        """
        return not self.is_dir and not self.is_file

    @property
    def points_to_dir(self) -> bool:
        """True for a directory or a link (followed or not) to one."""
        if self.target_is_dir is not None:
            return self.target_is_dir
        return self.is_dir

    @property
    def points_to_file(self) -> bool:
        """True for a regular file or a link (followed or not) to one."""
        if self.target_is_file is not None:
            return self.target_is_file
        return self.is_file

    @classmethod
    def from_stat(cls, st: os.stat_result,
                  is_symlink: Optional[bool] = None) -> 'Metadata':
        """Build metadata from a stat result.

        Args:
            st: Result of ``os.stat``/``os.lstat``/``DirEntry.stat``
            is_symlink: Override for the link flag, used when ``st`` is the
                stat of a link target
        """
        mode = st.st_mode
        if is_symlink is None:
            is_symlink = stat.S_ISLNK(mode)
        # Windows DirEntry.stat() reports zero for both fields
        identity = (st.st_dev, st.st_ino) if st.st_ino else None
        return cls(
            is_dir=stat.S_ISDIR(mode),
            is_file=stat.S_ISREG(mode),
            is_symlink=is_symlink,
            identity=identity,
            size=st.st_size,
        )
