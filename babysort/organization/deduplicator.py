"""
Duplicate photo detection within groups.

Photos are compared by a SHA-256 hash of their content. Within each group the
first photo of every set of identical photos survives, the rest are reported
and, unless duplicates are kept, deleted.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

from ..core.errors import DeletionError, DeletionRefusedError
from ..core.types import DeduplicationResult, Groups, Photo
from ..shared.media_utils import compute_checksum

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], bool]


def _refuse(items: str) -> bool:
    return False


class DeletionGate:
    """Asks for permission once before the first deletion of a run."""

    def __init__(
        self, allow_deletes: bool = False, confirm: Optional[ConfirmCallback] = None
    ) -> None:
        """
        Initialize the gate.

        Args:
            allow_deletes: Deletions are pre-authorised, never ask
            confirm: Callback asked "may we delete <items>?", refusal by default
        """
        self.allowed = allow_deletes
        self.confirm = confirm or _refuse

    def require(self, items: str) -> None:
        """
        Ensure deletions are permitted.

        Raises:
            DeletionRefusedError: If the user declines
        """
        if self.allowed:
            return
        if not self.confirm(items):
            raise DeletionRefusedError(items)
        self.allowed = True


class Deduplicator:
    """Find and optionally remove duplicate photos in each group."""

    def __init__(
        self,
        dry_run: bool = False,
        keep_duplicates: bool = False,
        gate: Optional[DeletionGate] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize the deduplicator.

        Args:
            dry_run: Report duplicates without deleting them
            keep_duplicates: Report duplicates and keep them in their groups
            gate: Confirmation gate consulted before deleting
            logger: Logger for reporting
        """
        self.dry_run = dry_run
        self.keep_duplicates = keep_duplicates
        self.gate = gate or DeletionGate()
        self.logger = logger or logging.getLogger(__name__)

    @property
    def deletes(self) -> bool:
        return not (self.dry_run or self.keep_duplicates)

    def hash_photo(self, photo: Photo) -> Photo:
        """Return the photo with its content hash computed, at most once."""
        if photo.content_hash is not None:
            return photo
        return photo.model_copy(update={"content_hash": compute_checksum(photo.path)})

    def deduplicate(self, groups: Groups) -> DeduplicationResult:
        """
        Detect duplicates in every group.

        Args:
            groups: Photos by group label

        Returns:
            Groups with hashes resolved and deleted duplicates removed, plus
            duplicate statistics

        Raises:
            DeletionRefusedError: If deletion is needed but not permitted
            DeletionError: If a duplicate could not be deleted
        """
        result = DeduplicationResult()

        for label, photos in groups.items():
            self.logger.debug(f"Checking for duplicates in group {label}")
            hashed = [self.hash_photo(photo) for photo in photos]

            by_hash: Dict[str, List[Photo]] = {}
            for photo in hashed:
                if photo.content_hash is None:
                    self.logger.warning(
                        f"Unable to hash photo {photo.path}, it will not be "
                        f"checked for duplicates"
                    )
                    continue
                by_hash.setdefault(photo.content_hash, []).append(photo)

            removed: Set[Path] = set()
            has_duplicates = False
            for content_hash, members in by_hash.items():
                if len(members) <= 1:
                    continue

                has_duplicates = True
                self.logger.warning(
                    f"{len(members)} Photos have the same file hash {content_hash}:"
                )
                for photo in members:
                    self.logger.warning(f"  {photo.path}")

                # The survivor is the earliest discovered photo
                survivor = min(members, key=lambda p: p.discovery_index)
                duplicates = [p for p in members if p is not survivor]

                result.duplicates_found += len(duplicates)
                result.duplicate_sets.append(
                    [survivor.path] + [p.path for p in duplicates]
                )

                if self.deletes:
                    for duplicate in duplicates:
                        self._delete(duplicate)
                        removed.add(duplicate.path)

            if not has_duplicates:
                self.logger.debug(f"No duplicates found in group {label}")

            result.duplicates_removed += len(removed)
            result.groups[label] = [p for p in hashed if p.path not in removed]

        return result

    def _delete(self, photo: Photo) -> None:
        self.gate.require("duplicate photos")
        try:
            photo.path.unlink()
        except OSError as e:
            raise DeletionError(
                f"Failed to delete duplicate file {photo.path}: {e}"
            ) from e
        self.logger.info(f"Deleted duplicate photo {photo.path}")
