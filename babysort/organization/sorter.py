"""
The complete sorting pipeline.

Discovers photos, resolves their timestamps, groups them by event or age,
optionally removes duplicates, numbers them and moves or copies them into
place, then optionally removes directories left empty.
"""

import logging
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
)

from ..analysis.dates import (
    TimestampResolver,
    resolve_timestamp,
    resolve_timestamps,
    sort_by_timestamp,
)
from ..analysis.scanner import PhotoScanner
from ..core.config import Configuration
from ..core.types import Groups, GroupReport, SortResult
from .cleanup import EmptyDirectoryCleaner
from .deduplicator import ConfirmCallback, Deduplicator, DeletionGate
from .grouping import group_photos
from .reorganizer import OrganizationOperation, Reorganizer
from .sequencer import assign_sequence_ids

logger = logging.getLogger(__name__)


class SortOptions(BaseModel):
    """How a sorting run treats the filesystem."""

    sources: List[Path] = Field(min_length=1, description="Source directories")
    target: Optional[Path] = Field(
        default=None, description="Target directory, None to organise in place"
    )
    subfolders: bool = True
    operation: OrganizationOperation = OrganizationOperation.MOVE
    dry_run: bool = False
    reorganize: bool = False
    ignore: List[Path] = Field(default_factory=list)
    deduplicate: bool = False
    keep_duplicates: bool = False
    allow_deletes: bool = False
    clean_empty_dirs: bool = False


class PhotoSorter:
    """Run the sorting pipeline for one configuration."""

    def __init__(
        self,
        config: Configuration,
        options: SortOptions,
        confirm: Optional[ConfirmCallback] = None,
        resolver: TimestampResolver = resolve_timestamp,
        logger: Optional[logging.Logger] = None,
        progress: bool = False,
    ):
        """
        Initialize the sorter.

        Args:
            config: Sorter configuration
            options: Filesystem options for the run
            confirm: Asked once before the first deletion, refusal by default
            resolver: Resolves the creation timestamp of a photo file
            logger: Logger handed to every stage
            progress: Show a progress bar while organising groups
        """
        self.config = config
        self.options = options
        self.resolver = resolver
        self.logger = logger or logging.getLogger(__name__)
        self.progress = progress
        # One gate so that a single confirmation covers every deletion
        self.gate = DeletionGate(allow_deletes=options.allow_deletes, confirm=confirm)

    def run(self) -> SortResult:
        """
        Sort the photos.

        Returns:
            Summary of the run

        Raises:
            PhotoSorterError: On any fatal error, completed moves are kept
        """
        opts = self.options
        mode = "DRY RUN" if opts.dry_run else "LIVE"
        self.logger.info(f"Starting sort ({mode})")

        if opts.reorganize and not opts.subfolders and opts.target is None:
            self.logger.warning(
                "Reorganising is unnecessary without sub-folders or a target, "
                "source directories are always rescanned and reorganised"
            )

        result = SortResult(dry_run=opts.dry_run)

        scanner = PhotoScanner(self.config, ignored=opts.ignore, logger=self.logger)
        photos = scanner.discover(
            opts.sources, opts.target, opts.subfolders, opts.reorganize
        )
        result.total_photos = len(photos)

        photos = resolve_timestamps(photos, self.resolver, logger=self.logger)
        photos = sort_by_timestamp(photos)

        grouping = group_photos(photos, self.config, logger=self.logger)
        result.unused_events = [event.name for event in grouping.unused_events]
        groups = grouping.groups

        if opts.deduplicate:
            deduplicator = Deduplicator(
                dry_run=opts.dry_run,
                keep_duplicates=opts.keep_duplicates,
                gate=self.gate,
                logger=self.logger,
            )
            dedup = deduplicator.deduplicate(groups)
            groups = dedup.groups
            result.duplicates_found = dedup.duplicates_found
            result.duplicates_removed = dedup.duplicates_removed

        groups = assign_sequence_ids(
            groups,
            self.config,
            target_root=opts.target,
            subfolders=opts.subfolders,
            reorganize=opts.reorganize,
            logger=self.logger,
        )

        reorganizer = Reorganizer(
            self.config,
            target_root=opts.target,
            subfolders=opts.subfolders,
            operation=opts.operation,
            dry_run=opts.dry_run,
            logger=self.logger,
        )
        result.groups = self._organize(reorganizer, groups)

        self.logger.info(
            f"Discovered {result.total_photos} photos in "
            f"{len(opts.sources)} source directories"
        )

        if opts.clean_empty_dirs:
            self.logger.info("Looking for empty directories to clean up...")
            cleaner = EmptyDirectoryCleaner(
                gate=self.gate,
                dry_run=opts.dry_run,
                ignored=opts.ignore,
                logger=self.logger,
            )
            result.cleaned_directories = cleaner.clean(opts.sources, opts.target)

        return result

    def _organize(self, reorganizer: Reorganizer, groups: Groups) -> List[GroupReport]:
        if not self.progress:
            return reorganizer.reorganize(groups)

        reports: List[GroupReport] = []
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeRemainingColumn(),
        ) as progress:
            task = progress.add_task("Organizing photos...", total=len(groups))

            for label, photos in groups.items():
                reports.append(reorganizer.organize_group(label, photos))
                progress.advance(task)

        return reports
