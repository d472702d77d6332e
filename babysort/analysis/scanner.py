"""
Photo discovery.

Finds photos in source directories and, when reorganising, in previously
organised target directories.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional, Set

from ..core.types import Photo
from ..shared.media_utils import list_files, list_subdirectories

if TYPE_CHECKING:
    from ..core.config import Configuration

logger = logging.getLogger(__name__)


class PhotoScanner:
    """Discover photos matching the configured extensions."""

    def __init__(
        self,
        config: "Configuration",
        ignored: Iterable[Path] = (),
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.ignored: Set[Path] = {Path(p).resolve() for p in ignored}
        self.logger = logger or logging.getLogger(__name__)

    def is_ignored(self, directory: Path) -> bool:
        return directory.resolve() in self.ignored

    def discover(
        self,
        sources: Iterable[Path],
        target: Optional[Path] = None,
        subfolders: bool = True,
        reorganize: bool = False,
    ) -> List[Photo]:
        """
        Discover photos.

        Source directories are scanned at the top level only. When
        reorganising, previously sorted sub-directories are rescanned too:
        those of the target if one is given, else those of each source.

        Args:
            sources: Source directories
            target: Explicit target directory, None to organise in place
            subfolders: Whether photos are sorted into group sub-folders
            reorganize: Whether previously sorted photos are rescanned

        Returns:
            Discovered photos in scan order
        """
        photos: List[Photo] = []

        for source in sources:
            source_dir = Path(source).resolve()
            if not source_dir.is_dir():
                self.logger.error(f"Source {source_dir} is not a directory")
                continue
            if self.is_ignored(source_dir):
                self.logger.warning(f"Ignoring directory {source_dir} as requested")
                continue

            self.logger.info(f"Scanning source directory {source_dir}")
            found = self.scan_directory(source_dir, source_dir, photos)
            self.logger.debug(f"Source directory {source_dir} contained {found} photos")

            if reorganize and target is None and subfolders:
                self.scan_subdirectories(source_dir, source_dir, photos, False)

        if reorganize and target is not None:
            target_dir = Path(target).resolve()
            if self.is_ignored(target_dir):
                self.logger.warning(
                    f"Ignoring target directory {target_dir} as requested, "
                    f"reorganisation may be ineffectual as a result"
                )
            elif target_dir.is_dir():
                self.logger.info(
                    f"Scanning target directory {target_dir} for reorganisation"
                )
                found = self.scan_directory(target_dir, target_dir, photos)
                self.logger.debug(
                    f"Target directory {target_dir} contained {found} photos"
                )
                if subfolders:
                    self.scan_subdirectories(target_dir, target_dir, photos, True)

        # A target nested in a source may be scanned twice
        unique = {}
        for photo in photos:
            unique.setdefault(photo.path, photo)
        return list(unique.values())

    def scan_directory(
        self, directory: Path, scan_root: Path, photos: List[Photo]
    ) -> int:
        """Add the photos directly inside a directory, returns how many were found."""
        found = 0
        for path in list_files(directory, self.config.has_valid_extension):
            if path.stat().st_size == 0:
                self.logger.warning(f"Skipping zero length file {path}")
                continue
            photos.append(
                Photo(path=path, scan_root=scan_root, discovery_index=len(photos))
            )
            found += 1
        return found

    def scan_subdirectories(
        self,
        directory: Path,
        scan_root: Path,
        photos: List[Photo],
        was_target: bool,
    ) -> int:
        """Recursively add the photos in every sub-directory."""
        found = 0
        for subdir in list_subdirectories(directory):
            if self.is_ignored(subdir):
                if was_target:
                    self.logger.warning(
                        f"Ignoring target sub-directory {subdir} as requested, "
                        f"reorganisation may be ineffectual as a result"
                    )
                else:
                    self.logger.warning(f"Ignoring sub-directory {subdir} as requested")
                continue

            self.logger.info(f"Scanning sub-directory {subdir} for reorganisation")
            found += self.scan_directory(subdir, scan_root, photos)
            found += self.scan_subdirectories(subdir, scan_root, photos, was_target)
        return found


def discover_photos(
    config: "Configuration",
    sources: Iterable[Path],
    target: Optional[Path] = None,
    subfolders: bool = True,
    reorganize: bool = False,
    ignored: Iterable[Path] = (),
) -> List[Photo]:
    """Convenience wrapper around PhotoScanner.discover."""
    scanner = PhotoScanner(config, ignored=ignored)
    return scanner.discover(sources, target, subfolders, reorganize)
