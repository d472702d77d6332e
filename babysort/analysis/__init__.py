"""
Analysis module for photo classification.

Discovers photos, resolves their creation timestamps and classifies them into
age brackets or events.
"""

from .age import calendar_months, classify_age
from .dates import resolve_timestamp, resolve_timestamps, sort_by_timestamp
from .events import EventCalendar, parse_date, parse_events_file
from .scanner import PhotoScanner, discover_photos

__all__ = [
    "calendar_months",
    "classify_age",
    "resolve_timestamp",
    "resolve_timestamps",
    "sort_by_timestamp",
    "EventCalendar",
    "parse_date",
    "parse_events_file",
    "PhotoScanner",
    "discover_photos",
]
