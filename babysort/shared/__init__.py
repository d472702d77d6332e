"""
Shared utilities for babysort.
"""

from .media_utils import (
    # Constants
    THUMBNAIL_FILES,
    # File operations
    compute_checksum,
    list_files,
    list_subdirectories,
    safe_filename,
    # Logging
    setup_logging,
)

__all__ = [
    "THUMBNAIL_FILES",
    "compute_checksum",
    "list_files",
    "list_subdirectories",
    "safe_filename",
    "setup_logging",
]
