"""
Event matching.

Events are named time intervals that take precedence over age brackets when
grouping photos. They are defined in a comma separated events file:

    start,end,name

where start and end are dates with an optional time portion. A date-only start
begins at 00:00:00 and a date-only end finishes at 23:59:59.
"""

import logging
from datetime import datetime, time
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

import arrow
from pydantic import ValidationError

from ..core.errors import EventsFileError
from ..core.types import Event, Photo

logger = logging.getLogger(__name__)

# Formats accepted for dates with a time portion
DATETIME_FORMATS = [
    "YYYY-MM-DD HH:mm:ssZZ",
    "YYYY-MM-DD HH:mm:ssZ",
    "YYYY-MM-DD HH:mm:ss",
    "YYYY-MM-DDTHH:mm:ssZZ",
    "YYYY-MM-DDTHH:mm:ssZ",
    "YYYY-MM-DDTHH:mm:ss",
    "D/M/YYYY HH:mm:ssZZ",
    "D/M/YYYY HH:mm:ssZ",
    "D/M/YYYY HH:mm:ss",
]

# Formats accepted for plain dates
DATE_FORMATS = [
    "YYYY-MM-DD",
    "D/M/YYYY",
]

END_OF_DAY = time(23, 59, 59)


def parse_date(value: str, end_of_day: bool = False) -> datetime:
    """
    Parse a date or date-time string.

    Args:
        value: Date string, e.g. "2024-01-05", "5/1/2024" or "2024-01-05 10:30:00"
        end_of_day: If True a date-only value is placed at 23:59:59 instead of
            midnight

    Returns:
        Naive datetime holding the wall clock time of the value

    Raises:
        ValueError: If the value matches none of the accepted formats
    """
    value = value.strip()

    for fmt in DATETIME_FORMATS:
        try:
            return arrow.get(value, fmt, normalize_whitespace=True).naive
        except (arrow.ParserError, ValueError):
            continue

    # A trailing time that matched no format above must not be dropped
    if len(value.split()) > 1 or "T" in value:
        raise ValueError(f"Unrecognised date '{value}'")

    for fmt in DATE_FORMATS:
        try:
            parsed = arrow.get(value, fmt).naive
        except (arrow.ParserError, ValueError):
            continue
        if end_of_day:
            return datetime.combine(parsed.date(), END_OF_DAY)
        return parsed

    raise ValueError(f"Unrecognised date '{value}'")


class EventCalendar:
    """A set of events that photos can be matched against."""

    def __init__(
        self,
        events: Iterable[Event] = (),
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize the calendar.

        Events are sorted by start then end. Overlapping events are allowed but
        reported, since photos always match the first event in sort order.

        Args:
            events: Events to match against
            logger: Logger for advisory warnings
        """
        self.logger = logger or logging.getLogger(__name__)
        self.events: Tuple[Event, ...] = tuple(
            sorted(events, key=lambda e: (e.start, e.end))
        )
        self._check_overlaps()

    def __iter__(self) -> Iterator[Event]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def _check_overlaps(self) -> None:
        for i, event in enumerate(self.events):
            for other in self.events[i + 1 :]:
                if not event.end > other.start:
                    continue
                if event.end > other.end:
                    self.logger.warning(
                        f"Event {event.name} contains event {other.name}, as a result "
                        f"no photos will be grouped into event {other.name} because "
                        f"photos will always match event {event.name} which starts first"
                    )
                else:
                    self.logger.warning(
                        f"Event {event.name} overlaps with event {other.name}, photos "
                        f"will be grouped into the first containing event"
                    )

    def match(self, timestamp: Optional[datetime]) -> Optional[Event]:
        """Find the first event strictly containing a timestamp."""
        if timestamp is None:
            return None
        for event in self.events:
            if event.contains(timestamp):
                return event
        return None

    def in_event(self, photo: Photo) -> Optional[Event]:
        """Find the event a photo belongs to, if any."""
        return self.match(photo.timestamp)


def parse_events_file(
    path: Path, logger: Optional[logging.Logger] = None
) -> EventCalendar:
    """
    Parse an events file.

    Args:
        path: Path to the events file
        logger: Logger passed on to the resulting calendar

    Returns:
        Calendar holding the parsed events

    Raises:
        EventsFileError: If the file cannot be read or any line is malformed
    """
    log = logger or logging.getLogger(__name__)
    events: List[Event] = []

    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    except OSError as e:
        raise EventsFileError(path, 0, f"cannot read events file: {e}") from e

    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue

        parts = line.split(",", 2)
        if len(parts) != 3:
            raise EventsFileError(
                path, line_number, "expected start,end,name"
            )

        name = parts[2].strip()
        if not name:
            raise EventsFileError(path, line_number, "event name is empty")

        try:
            start = parse_date(parts[0])
            end = parse_date(parts[1], end_of_day=True)
        except ValueError as e:
            raise EventsFileError(path, line_number, str(e)) from e

        try:
            event = Event(start=start, end=end, name=name)
        except ValidationError as e:
            raise EventsFileError(
                path, line_number, f"event {name} must start before it ends"
            ) from e

        log.info(f"Event {name} defined with start date {start} and end date {end}")
        events.append(event)

    return EventCalendar(events, logger=log)
