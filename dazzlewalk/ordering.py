"""Optional per-directory ordering of children.

The walk itself only guarantees depth-first, parent before children. When a
stable order is wanted, children of each directory can be sorted by name with
directories after everything else. Sorting reads one directory's names into
memory; it never looks further ahead than that.
"""

from enum import Enum
from typing import Iterable, Iterator, Tuple

from .probes.base import DirectoryChild, FilesystemProbe


class EntryOrder(Enum):
    """How children of a directory are ordered."""
    NATIVE = "native"            # Whatever the listing returns
    FILES_FIRST = "files_first"  # Non-directories by name, then directories by name


def files_first_key(name: str, is_dir: bool) -> Tuple[bool, str]:
    """Sort key placing directories after files, each group by name."""
    return (is_dir, name)


def ordered_children(listing: Iterable[DirectoryChild],
                     probe: FilesystemProbe,
                     follow_links: bool = False) -> Iterator[DirectoryChild]:
    """Yield a listing's children in files-first order.

    This is a generator, so the listing is only read when the first child is
    requested and any iteration error surfaces at that point.
    """
    keyed = [
        (files_first_key(child.path.name, probe.is_dir_hint(child, follow_links)), child)
        for child in listing
    ]
    keyed.sort(key=lambda pair: pair[0])
    for _, child in keyed:
        yield child
