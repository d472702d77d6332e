"""
Errors raised by the sorting pipeline.

Every error here is fatal: it aborts the whole run. Completed moves are not
undone.
"""

from pathlib import Path
from typing import Optional


class PhotoSorterError(Exception):
    """Base class for all fatal sorting errors."""


class EventsFileError(PhotoSorterError):
    """An events file could not be parsed."""

    def __init__(self, path: Path, line_number: int, message: str):
        self.path = path
        self.line_number = line_number
        super().__init__(f"{path}:{line_number}: {message}")


class TargetDirectoryError(PhotoSorterError):
    """A required target directory could not be created."""


class TargetExistsError(PhotoSorterError):
    """A photo would overwrite an existing file."""

    def __init__(self, source: Path, target: Path):
        self.source = source
        self.target = target
        super().__init__(
            f"Refusing to overwrite existing file {target} with {source}"
        )


class RelocationError(PhotoSorterError):
    """A move or copy failed."""


class VerificationError(PhotoSorterError):
    """A photo was not found at its target after reorganisation."""

    def __init__(self, target: Path, group: Optional[str] = None):
        self.target = target
        self.group = group
        super().__init__(
            f"Expected photo {target} was not found, data loss may have occurred!"
        )


class DeletionError(PhotoSorterError):
    """A file could not be deleted."""


class DeletionRefusedError(PhotoSorterError):
    """The user declined to allow deletions."""

    def __init__(self, items: str):
        self.items = items
        super().__init__(f"User refused to allow deletion of {items}, sorting aborted")
