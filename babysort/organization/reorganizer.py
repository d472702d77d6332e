"""
Conflict-safe reorganisation of grouped photos.

Moves or copies every photo of a group to its target path. Moves that would
overwrite a file that is itself about to move (cycles), or several photos
targeting the same file, are resolved by staging the conflicting photos
through temporary files first. Existing files are never overwritten.
"""

import logging
import shutil
import uuid
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Set

from ..core.errors import (
    RelocationError,
    TargetDirectoryError,
    TargetExistsError,
    VerificationError,
)
from ..core.types import GroupReport, Groups, Photo
from .naming import group_directory, target_filename

if TYPE_CHECKING:
    from ..core.config import Configuration

logger = logging.getLogger(__name__)

# Prefix of the temporary files photos are staged through
STAGING_PREFIX = ".babysort-"


class OrganizationOperation(str, Enum):
    """Type of organization operation."""

    COPY = "copy"
    MOVE = "move"


class Reorganizer:
    """Relocate grouped photos to their target paths."""

    def __init__(
        self,
        config: "Configuration",
        target_root: Optional[Path] = None,
        subfolders: bool = True,
        operation: OrganizationOperation = OrganizationOperation.MOVE,
        dry_run: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the reorganizer.

        Args:
            config: Sorter configuration
            target_root: Target directory, None to organise each photo in place
                under the directory it was discovered in
            subfolders: Sort photos into a sub-folder per group
            operation: Operation type (copy preserves the originals)
            dry_run: If True, log intended changes without touching the disk
            logger: Logger for progress messages
        """
        self.config = config
        self.target_root = Path(target_root) if target_root is not None else None
        self.subfolders = subfolders
        self.operation = operation
        self.dry_run = dry_run
        self.logger = logger or logging.getLogger(__name__)

        # Dry run bookkeeping so existence checks match a real run
        self._vacated: Set[Path] = set()
        self._occupied: Set[Path] = set()
        self._created: Set[Path] = set()

    @property
    def verb(self) -> str:
        return self.operation.value

    def reorganize(self, groups: Groups) -> List[GroupReport]:
        """Organise every group in order."""
        return [self.organize_group(label, photos) for label, photos in groups.items()]

    def organize_group(self, label: str, photos: List[Photo]) -> GroupReport:
        """
        Organise the photos of one group.

        Args:
            label: Group label
            photos: Photos of the group, in sequence order

        Returns:
            Report of what was done, including the photos at their final paths

        Raises:
            TargetDirectoryError: If a target directory cannot be created
            RelocationError: If staging, moving or copying a photo fails
            TargetExistsError: If a photo would overwrite an existing file
            VerificationError: If a photo is missing from its target afterwards
        """
        report = GroupReport(label=label)
        targeted = [self.assign_target(label, photo) for photo in photos]

        report.no_ops = sum(1 for photo in targeted if photo.is_no_op)
        if report.no_ops == len(targeted):
            self.logger.info(
                f"All photos in group {label} are already in correct location, "
                f"no reorganisation to do"
            )
            report.photos = targeted
            report.skipped = True
            return report

        conflicts = self.find_conflicts(targeted)
        report.conflicts = len(conflicts)
        if conflicts:
            self.logger.warning(
                f"{len(conflicts)} {self.verb} conflicts detected for group {label}"
            )
            targeted = [
                self.stage(photo) if self._in_conflict(photo, conflicts) else photo
                for photo in targeted
            ]
            report.staged = sum(1 for photo in targeted if photo.staged)

        placed: List[Photo] = []
        for photo in targeted:
            if photo.is_no_op:
                self.logger.debug(
                    f"Photo {photo.path} is already sorted into the correct location"
                )
                placed.append(photo)
                continue

            self.relocate(photo)
            if self.operation == OrganizationOperation.MOVE:
                report.moved += 1
            else:
                report.copied += 1
            placed.append(photo.model_copy(update={"path": photo.target_path}))

        if not self.dry_run:
            self.verify(label, placed)

        report.photos = placed
        return report

    def assign_target(self, label: str, photo: Photo) -> Photo:
        """Compute and record the target path of a photo, creating its directory."""
        # Organising in place may use a different root for every photo
        root = self.target_root if self.target_root is not None else photo.scan_root
        directory = group_directory(root, label, self.subfolders)
        self.ensure_directory(directory)

        name = target_filename(self.config.naming_pattern, photo, self.config)
        return photo.model_copy(update={"target_path": directory / name})

    def ensure_directory(self, directory: Path) -> None:
        """
        Create a target directory if it is missing.

        Raises:
            TargetDirectoryError: If the directory cannot be created
        """
        if directory in self._created or directory.is_dir():
            return

        if self.dry_run:
            self.logger.debug(f"Ensuring required target directory {directory} exists")
        else:
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise TargetDirectoryError(
                    f"Failed to create required target directory {directory}: {e}"
                ) from e
            self.logger.debug(f"Created target directory {directory}")
        self._created.add(directory)

    def find_conflicts(self, photos: List[Photo]) -> Set[Path]:
        """
        Find the locations that make a straightforward move unsafe.

        A location conflicts when several photos target it, or when a photo
        targets the current location of a photo in the group.

        Args:
            photos: Photos with target paths assigned

        Returns:
            Conflicting locations (resolved paths)
        """
        sources = {photo.path.resolve() for photo in photos}
        targets: Set[Path] = set()
        conflicts: Set[Path] = set()

        for photo in photos:
            if photo.is_no_op:
                continue
            target = photo.target_path.resolve()
            if target in targets:
                # Sequencing should prevent this but check just in case
                self.logger.warning(f"Multiple photos targeted at file {target}")
                conflicts.add(target)
            targets.add(target)

        conflicts.update(targets & sources)
        return conflicts

    def _in_conflict(self, photo: Photo, conflicts: Set[Path]) -> bool:
        if photo.is_no_op:
            return False
        return (
            photo.path.resolve() in conflicts
            or photo.target_path.resolve() in conflicts
        )

    def stage(self, photo: Photo) -> Photo:
        """
        Move (or copy) a photo to a unique temporary file next to its target.

        Returns:
            The photo with the temporary file as its current location

        Raises:
            RelocationError: If the photo cannot be staged
        """
        staging = (
            photo.target_path.parent
            / f"{STAGING_PREFIX}{uuid.uuid4().hex}{photo.extension}"
        )
        self.logger.debug(
            f"Renaming photo {photo.path} temporarily to {staging} to avoid "
            f"{self.verb} conflicts"
        )

        try:
            self._transfer(
                photo.path, staging, move=self.operation == OrganizationOperation.MOVE
            )
        except OSError as e:
            raise RelocationError(
                f"Failed to temporarily rename photo {photo.path} to {staging}: {e}"
            ) from e

        return photo.model_copy(update={"path": staging, "staged": True})

    def relocate(self, photo: Photo) -> None:
        """
        Move or copy a photo to its target path.

        Staged photos are always moved out of their temporary file.

        Raises:
            TargetExistsError: If the target path already exists
            RelocationError: If the move or copy fails
        """
        target = photo.target_path
        self.logger.debug(
            f"{'Moving' if self.operation == OrganizationOperation.MOVE else 'Copying'} "
            f"photo {photo.path} to folder {target.parent} as {target.name}"
        )

        if self._exists(target):
            raise TargetExistsError(photo.path, target)

        move = photo.staged or self.operation == OrganizationOperation.MOVE
        try:
            self._transfer(photo.path, target, move=move)
        except OSError as e:
            raise RelocationError(
                f"Failed to {self.verb} photo {photo.path} to directory "
                f"{target.parent}: {e}"
            ) from e

        if self.dry_run:
            self.logger.info(f"[DRY RUN] Would {self.verb} {photo.path} → {target}")
        else:
            self.logger.info(
                f"{'Moved' if move else 'Copied'} {photo.path} → {target}"
            )

    def verify(self, label: str, photos: List[Photo]) -> None:
        """
        Check that every photo of a group exists at its target path.

        Raises:
            VerificationError: If any photo is missing
        """
        for photo in photos:
            if not photo.target_path.exists():
                raise VerificationError(photo.target_path, label)

    def _exists(self, path: Path) -> bool:
        key = path.resolve()
        if key in self._occupied:
            return True
        if key in self._vacated:
            return False
        return path.exists()

    def _transfer(self, source: Path, target: Path, move: bool) -> None:
        if self.dry_run:
            if move:
                self._occupied.discard(source.resolve())
                self._vacated.add(source.resolve())
            self._vacated.discard(target.resolve())
            self._occupied.add(target.resolve())
            return

        if move:
            shutil.move(str(source), str(target))
        else:
            shutil.copy2(source, target)
