"""Filesystem probes.

Probes implement the FilesystemProbe interface for a concrete filesystem,
giving the traversal engine everything it needs to walk it.
"""

from .base import DirectoryChild, DirectoryListing, FilesystemProbe, IdentityCapability
from .local import LocalDirectoryListing, LocalFilesystemProbe

__all__ = [
    "DirectoryChild",
    "DirectoryListing",
    "FilesystemProbe",
    "IdentityCapability",
    "LocalDirectoryListing",
    "LocalFilesystemProbe",
]
