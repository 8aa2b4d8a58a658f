"""Error taxonomy for DazzleWalk.

Entry-scoped failures are not raised by the engine. They are wrapped in one
of the ``TraversalError`` subclasses below and carried on the event that
describes the entry, so a single bad entry never stops the walk by itself.
The iterator layer decides, per the configured on-error policy, whether a
carried error is raised, reported or dropped.

``InvalidConfigurationError`` is the exception: it is always raised eagerly,
before any traversal begins.
"""

import errno
from pathlib import PurePath
from typing import List, Optional, Union

PathLike = Union[str, PurePath]


class TraversalError(OSError):
    """Base class for failures carried on traversal events.

    Subclasses ``OSError`` so callers that already guard filesystem code with
    ``except OSError`` keep working. The underlying error, when there is one,
    is available as ``__cause__`` and its ``errno`` is copied over.
    """

    category = "TraversalError"
    default_message = "traversal failed"

    def __init__(self, path: PathLike, cause: Optional[BaseException] = None,
                 message: Optional[str] = None):
        code = getattr(cause, 'errno', None)
        if message is None:
            message = getattr(cause, 'strerror', None) or (str(cause) if cause else None)
        super().__init__(code, message or self.default_message, str(path))
        self.path = path
        self.__cause__ = cause
        # Secondary failures raised while cleaning up after this one
        self.suppressed: List[BaseException] = []

    def add_suppressed(self, error: BaseException) -> None:
        self.suppressed.append(error)

    def __str__(self) -> str:
        return f"{self.strerror}: {self.path}"

    def __reduce__(self):
        return (self.__class__, (self.path, self.__cause__, self.strerror))


class MetadataUnavailableError(TraversalError):
    """An entry could not be stat'ed (permissions, deleted mid-walk, ...)."""

    category = "MetadataUnavailable"
    default_message = "cannot read metadata"


class DirectoryOpenError(TraversalError):
    """A directory listing could not be opened."""

    category = "DirectoryOpenFailed"
    default_message = "cannot open directory"


class DirectoryIterationError(TraversalError):
    """Reading the next entry of an open listing failed."""

    category = "DirectoryIterationFailed"
    default_message = "directory iteration failed"


class DirectoryCloseError(TraversalError):
    """Closing a listing failed. Recorded, never fatal."""

    category = "DirectoryCloseFailed"
    default_message = "cannot close directory"


class FileSystemLoopError(TraversalError):
    """Descending into a directory would revisit one of its ancestors."""

    category = "FilesystemLoop"
    default_message = "file system loop detected"

    def __init__(self, path: PathLike, cause: Optional[BaseException] = None,
                 message: Optional[str] = None):
        super().__init__(path, cause, message)
        if self.errno is None:
            self.errno = errno.ELOOP


class InvalidConfigurationError(ValueError):
    """Raised when a traversal configuration is inconsistent.

    Attributes:
        errors: Every validation message, not just the first one
    """

    def __init__(self, errors: Union[str, List[str]]):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class TraversalStateError(RuntimeError):
    """An operation was called in a state that does not allow it."""


class TraversalClosedError(TraversalStateError):
    """The engine or iterator was already closed."""


_CATEGORY_BY_TYPE = (
    (FileSystemLoopError, "FilesystemLoop"),
    (FileNotFoundError, "NoSuchFile"),
    (PermissionError, "AccessDenied"),
    (NotADirectoryError, "NotDirectory"),
)

_CATEGORY_BY_ERRNO = {
    errno.ENOENT: "NoSuchFile",
    errno.EACCES: "AccessDenied",
    errno.EPERM: "AccessDenied",
    errno.ENOTDIR: "NotDirectory",
    errno.ELOOP: "FilesystemLoop",
}


def error_category(error: BaseException) -> str:
    """Return a short category name for reporting an error.

    The most specific description wins: the kind of the underlying OS error
    ("AccessDenied", "NoSuchFile", ...) when one can be determined, otherwise
    the traversal error's own category, otherwise the exception class name
    with any ``Error`` suffix removed.
    """
    if isinstance(error, FileSystemLoopError):
        return FileSystemLoopError.category

    cause = error.__cause__ if isinstance(error, TraversalError) else error
    for candidate in (cause, error):
        if candidate is None:
            continue
        for error_type, category in _CATEGORY_BY_TYPE:
            if isinstance(candidate, error_type):
                return category
        code = getattr(candidate, 'errno', None)
        if code in _CATEGORY_BY_ERRNO:
            return _CATEGORY_BY_ERRNO[code]

    if isinstance(error, TraversalError):
        return error.category
    name = type(error).__name__
    return name[:-len("Error")] if name.endswith("Error") and name != "Error" else name
