"""
Sequence numbering of photos within groups.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional

from ..core.types import Groups
from ..shared.media_utils import list_files
from .naming import group_directory

if TYPE_CHECKING:
    from ..core.config import Configuration

logger = logging.getLogger(__name__)


def assign_sequence_ids(
    groups: Groups,
    config: "Configuration",
    target_root: Optional[Path] = None,
    subfolders: bool = True,
    reorganize: bool = False,
    logger: Optional[logging.Logger] = None,
) -> Groups:
    """
    Number the photos of each group from one, in group order.

    When photos are sorted into group sub-folders, numbering continues after
    the photos already sorted into a group's folder, so that repeated runs
    append instead of renumbering. Organising in place, each scan root has its
    own group folder and so its own numbering. A full reorganisation always
    numbers from one.

    Args:
        groups: Photos by group label, each list in timestamp order
        config: Sorter configuration
        target_root: Explicit target directory, None when organising in place
        subfolders: Whether photos are sorted into group sub-folders
        reorganize: Whether this is a full reorganisation
        logger: Logger for progress messages

    Returns:
        Groups with sequence ids assigned
    """
    log = logger or logging.getLogger(__name__)
    appending = subfolders and not reorganize
    sequenced: Groups = {}

    for label, photos in groups.items():
        log.info(f"Group {label} contains {len(photos)} photos")

        # Last id handed out per group folder
        last_ids: Dict[Optional[Path], int] = {}
        numbered = []
        for photo in photos:
            directory = None
            if appending:
                root = target_root if target_root is not None else photo.scan_root
                directory = group_directory(root, label, subfolders)

            if directory not in last_ids:
                last_ids[directory] = 0
                if directory is not None:
                    last_ids[directory] = _count_sorted(directory, config, log)

            last_ids[directory] += 1
            numbered.append(
                photo.model_copy(update={"sequence_id": last_ids[directory]})
            )

        sequenced[label] = numbered

    return sequenced


def _count_sorted(directory: Path, config: "Configuration", log: logging.Logger) -> int:
    count = len(list_files(directory, config.has_valid_extension))
    if count > 0:
        log.debug(f"Directory {directory} already has {count} photos sorted into it")
    return count
