"""
Organization module for sorting photos into place.

This module groups photos by event or age, detects duplicates, assigns
sequence numbers and moves or copies photos to their target names with
safety features like dry-run mode, conflict staging and verification.
"""

from .cleanup import EmptyDirectoryCleaner
from .deduplicator import ConfirmCallback, Deduplicator, DeletionGate
from .grouping import group_photos
from .naming import (
    NamingScheme,
    group_directory,
    parse_pattern,
    render_name,
    target_filename,
)
from .reorganizer import OrganizationOperation, Reorganizer
from .sequencer import assign_sequence_ids
from .sorter import PhotoSorter, SortOptions

__all__ = [
    "EmptyDirectoryCleaner",
    "ConfirmCallback",
    "Deduplicator",
    "DeletionGate",
    "group_photos",
    "NamingScheme",
    "group_directory",
    "parse_pattern",
    "render_name",
    "target_filename",
    "OrganizationOperation",
    "Reorganizer",
    "assign_sequence_ids",
    "PhotoSorter",
    "SortOptions",
]
