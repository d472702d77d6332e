"""
Removal of directories left empty by sorting.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Set

from ..shared.media_utils import THUMBNAIL_FILES, list_subdirectories
from .deduplicator import DeletionGate

logger = logging.getLogger(__name__)


class EmptyDirectoryCleaner:
    """Remove empty sub-directories of the source and target directories."""

    def __init__(
        self,
        gate: Optional[DeletionGate] = None,
        dry_run: bool = False,
        ignored: Iterable[Path] = (),
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize the cleaner.

        Args:
            gate: Confirmation gate consulted before deleting
            dry_run: Report empty directories without deleting them
            ignored: Directories that are never cleaned or descended into
            logger: Logger for reporting
        """
        self.gate = gate or DeletionGate()
        self.dry_run = dry_run
        self.ignored: Set[Path] = {Path(p).resolve() for p in ignored}
        self.logger = logger or logging.getLogger(__name__)
        self._removed: Set[Path] = set()

    def clean(self, sources: Iterable[Path], target: Optional[Path] = None) -> int:
        """
        Clean the sub-directories of every source and of the target.

        The source and target directories themselves are never removed.

        Returns:
            Number of directories removed (or that would be, in a dry run)
        """
        roots = [Path(source) for source in sources]
        if target is not None:
            roots.append(Path(target))

        cleaned = 0
        for root in roots:
            root = root.resolve()
            if not root.exists():
                # A dry run never creates the target
                self.logger.debug(f"Directory {root} does not exist")
                continue
            if not root.is_dir():
                self.logger.error(f"Directory {root} is not a directory")
                continue
            if root in self.ignored:
                self.logger.warning(f"Ignoring directory {root} as requested")
                continue

            self.logger.info(f"Looking for empty directories in {root}")
            for subdir in list_subdirectories(root):
                cleaned += self.clean_directory(subdir)

        self.logger.info(f"Cleaned {cleaned} empty directories")
        return cleaned

    def clean_directory(self, directory: Path) -> int:
        """Remove a directory tree's empty directories, deepest first."""
        directory = directory.resolve()
        if directory in self.ignored or directory in self._removed:
            return 0

        cleaned = 0
        for subdir in list_subdirectories(directory):
            cleaned += self.clean_directory(subdir)

        if self.is_empty(directory) and self.remove(directory):
            cleaned += 1
        return cleaned

    def is_empty(self, directory: Path) -> bool:
        """True if a directory holds nothing but thumbnail databases."""
        for entry in directory.iterdir():
            if entry.is_dir() and entry.resolve() in self._removed:
                continue
            if entry.is_file() and entry.name in THUMBNAIL_FILES:
                continue
            return False
        return True

    def remove(self, directory: Path) -> bool:
        """Delete an empty directory along with any thumbnail databases."""
        self.logger.info(f"Removing empty directory {directory}")
        if self.dry_run:
            self._removed.add(directory)
            return True

        self.gate.require("empty directories")
        try:
            for name in THUMBNAIL_FILES:
                thumbs = directory / name
                if thumbs.is_file():
                    thumbs.unlink()
            directory.rmdir()
        except OSError as e:
            self.logger.warning(f"Failed to delete empty directory {directory}: {e}")
            return False

        self._removed.add(directory)
        self.logger.info(f"Deleted empty directory {directory}")
        return True
