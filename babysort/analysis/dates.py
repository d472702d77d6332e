"""
Creation timestamp resolution.

Timestamps come from embedded EXIF metadata when present, falling back to
filesystem attributes. Resolution happens once per photo in a dedicated pass
before grouping.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import arrow
from PIL import Image, UnidentifiedImageError
from PIL.ExifTags import IFD, Base

from ..core.types import Photo

logger = logging.getLogger(__name__)

TimestampResolver = Callable[[Path], Optional[datetime]]

# Date formats for parsing EXIF data
EXIF_DATE_FORMATS = [
    "YYYY:MM:DD HH:mm:ss",
    "YYYY-MM-DD HH:mm:ss",
    "YYYY:MM:DD",
    "YYYY-MM-DD",
]


def parse_exif_date(value: str) -> Optional[datetime]:
    """Parse an EXIF date string, None if it is not a valid date."""
    value = value.strip("\x00 ")
    for fmt in EXIF_DATE_FORMATS:
        try:
            return arrow.get(value, fmt, normalize_whitespace=True).naive
        except (arrow.ParserError, ValueError):
            continue
    return None


def exif_timestamp(path: Path) -> Optional[datetime]:
    """
    Read the capture date from a photo's EXIF metadata.

    DateTimeOriginal is preferred, then DateTimeDigitized, then DateTime.

    Args:
        path: Path to the photo

    Returns:
        Capture timestamp, or None if the file has no usable EXIF date
    """
    try:
        with Image.open(path) as img:
            exif = img.getexif()
            exif_ifd = exif.get_ifd(IFD.Exif)
            candidates = [
                exif_ifd.get(Base.DateTimeOriginal),
                exif_ifd.get(Base.DateTimeDigitized),
                exif.get(Base.DateTime),
            ]
    except (OSError, UnidentifiedImageError, ValueError) as e:
        logger.debug(f"No EXIF data for {path}: {e}")
        return None

    for value in candidates:
        if not value:
            continue
        parsed = parse_exif_date(str(value))
        if parsed:
            return parsed
        logger.debug(f"Could not parse EXIF date {value!r} in {path}")

    return None


def filesystem_timestamp(path: Path) -> Optional[datetime]:
    """Creation time of a file where the platform records it, else modification time."""
    try:
        stat = os.stat(path)
    except OSError as e:
        logger.debug(f"Error getting filesystem dates for {path}: {e}")
        return None
    created = getattr(stat, "st_birthtime", None)
    return datetime.fromtimestamp(created if created else stat.st_mtime)


def resolve_timestamp(path: Path) -> Optional[datetime]:
    """Resolve a photo's timestamp, EXIF first then filesystem."""
    return exif_timestamp(path) or filesystem_timestamp(path)


def resolve_timestamps(
    photos: Iterable[Photo],
    resolver: TimestampResolver = resolve_timestamp,
    logger: Optional[logging.Logger] = None,
) -> List[Photo]:
    """
    Resolve the timestamp of every photo that does not have one yet.

    The resolver is called at most once per photo, photos that already carry
    a timestamp or were resolved before are returned unchanged.

    Args:
        photos: Photos to resolve
        resolver: Callable mapping a path to its timestamp
        logger: Logger for unresolvable photos

    Returns:
        Photos with timestamps resolved
    """
    log = logger or logging.getLogger(__name__)
    resolved: List[Photo] = []

    for photo in photos:
        if photo.timestamp_resolved or photo.timestamp is not None:
            resolved.append(photo)
            continue

        timestamp = resolver(photo.path)
        if timestamp is None:
            log.warning(f"Unable to determine creation date of photo {photo.path}")
        resolved.append(
            photo.model_copy(update={"timestamp": timestamp, "timestamp_resolved": True})
        )

    return resolved


def sort_by_timestamp(photos: Iterable[Photo]) -> List[Photo]:
    """
    Sort photos into creation order.

    Photos without a timestamp come first, ordered by path. Photos with equal
    timestamps keep their discovery order.
    """
    return sorted(
        photos,
        key=lambda p: (
            p.timestamp is not None,
            p.timestamp or datetime.min,
            "" if p.timestamp is not None else str(p.path),
        ),
    )
