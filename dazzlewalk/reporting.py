"""Error reporters for DazzleWalk.

Under the log-and-continue policy every skipped entry is handed to an
ErrorReporter as a ``(category, path)`` pair plus the error itself. The
default reporter writes one warning per entry to the ``dazzlewalk`` logger;
the collecting reporter keeps the records for later inspection.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Dict, List, Optional

logger = logging.getLogger("dazzlewalk")


class ErrorReporter(ABC):
    """Receives errors that the walk skipped past."""

    @abstractmethod
    def report(self, category: str, path: PurePath, error: BaseException) -> None:
        """Report one skipped entry.

        Args:
            category: Short error kind, e.g. "AccessDenied"
            path: The entry or directory that failed
            error: The carried error
        """
        pass


class LoggingErrorReporter(ErrorReporter):
    """Logs ``"<category>: <path>"`` for each error."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.WARNING):
        self.log = log if log is not None else logger
        self.level = level

    def report(self, category: str, path: PurePath, error: BaseException) -> None:
        self.log.log(self.level, "%s: %s", category, path)


@dataclass(frozen=True)
class ErrorRecord:
    category: str
    path: PurePath
    error: BaseException


class CollectingErrorReporter(ErrorReporter):
    """Collects errors without logging, for batch processing.

    Useful for collecting all errors and presenting them at the end.
    """

    def __init__(self):
        self.errors: List[ErrorRecord] = []

    def report(self, category: str, path: PurePath, error: BaseException) -> None:
        self.errors.append(ErrorRecord(category, path, error))

    @property
    def skipped_paths(self) -> List[PurePath]:
        return [record.path for record in self.errors]

    def categories(self) -> List[str]:
        return [record.category for record in self.errors]

    def get_statistics(self) -> Dict[str, Any]:
        """Get statistics about errors encountered.

        Returns:
            Dictionary with the total and a count per category
        """
        by_category: Dict[str, int] = {}
        for record in self.errors:
            by_category[record.category] = by_category.get(record.category, 0) + 1
        return {
            'total_errors': len(self.errors),
            'by_category': by_category,
            'skipped_paths': len(self.errors),
        }

    def clear(self) -> None:
        self.errors.clear()
