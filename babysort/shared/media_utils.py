"""
File utilities for babysort.

Checksums, file name sanitising, directory listing and logging setup shared
by the analysis and organization packages.
"""

import hashlib
import logging
from pathlib import Path
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

# System thumbnail databases that do not count as content of a directory
THUMBNAIL_FILES = {".DS_Store", "Thumbs.db"}

MAX_FILENAME_LENGTH = 255


def compute_checksum(file_path: Path, algorithm: str = "sha256") -> Optional[str]:
    """
    Compute cryptographic checksum of a file.

    Args:
        file_path: Path to the file
        algorithm: Hash algorithm (sha256, md5, etc.)

    Returns:
        Hexadecimal checksum string, or None on error
    """
    try:
        hash_obj = hashlib.new(algorithm)

        with open(file_path, "rb") as f:
            # Read in chunks for memory efficiency
            for chunk in iter(lambda: f.read(8192), b""):
                hash_obj.update(chunk)

        return hash_obj.hexdigest()
    except OSError as e:
        logger.error(f"Error computing checksum for {file_path}: {e}")
        return None


def safe_filename(name: str, max_length: int = MAX_FILENAME_LENGTH) -> str:
    """
    Convert a string to a safe filename.

    Args:
        name: Input string
        max_length: Longest name allowed

    Returns:
        Safe filename string
    """
    # Remove or replace unsafe characters
    unsafe_chars = '<>:"/\\|?*'
    for char in unsafe_chars:
        name = name.replace(char, "_")

    # Remove leading/trailing spaces and dots
    name = name.strip(". ")

    # Limit length
    if len(name) > max_length:
        name = name[:max_length]

    return name or "unnamed"


def list_files(
    directory: Path, predicate: Optional[Callable[[str], bool]] = None
) -> List[Path]:
    """
    List the files directly inside a directory, sorted by name.

    Args:
        directory: Directory to list
        predicate: Optional filter applied to file names

    Returns:
        Matching files, empty if the directory does not exist
    """
    if not directory.is_dir():
        return []
    return sorted(
        entry
        for entry in directory.iterdir()
        if entry.is_file() and (predicate is None or predicate(entry.name))
    )


def list_subdirectories(directory: Path) -> List[Path]:
    """List the directories directly inside a directory, sorted by name."""
    if not directory.is_dir():
        return []
    return sorted(entry for entry in directory.iterdir() if entry.is_dir())


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, set logging level to DEBUG
        quiet: If True, set logging level to WARNING
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
