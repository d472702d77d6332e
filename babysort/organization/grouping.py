"""
Grouping of photos into events and age brackets.
"""

import logging
from typing import TYPE_CHECKING, Dict, Iterable, Optional

from ..analysis.age import classify_age
from ..core.types import Event, GroupingResult, Groups, Photo

if TYPE_CHECKING:
    from ..core.config import Configuration

logger = logging.getLogger(__name__)


def group_photos(
    photos: Iterable[Photo],
    config: "Configuration",
    logger: Optional[logging.Logger] = None,
) -> GroupingResult:
    """
    Assign every photo to exactly one group.

    A photo inside an event is grouped under the event name, any other photo
    under its age bracket. Groups are ordered by first occurrence, so passing
    photos in timestamp order yields groups in timestamp order.

    Args:
        photos: Photos, normally sorted by timestamp
        config: Sorter configuration
        logger: Logger for progress and advisory warnings

    Returns:
        The groups plus the number of photos matched by each event
    """
    log = logger or logging.getLogger(__name__)
    groups: Groups = {}
    event_counts: Dict[Event, int] = {event: 0 for event in config.events}
    total = 0

    for photo in photos:
        total += 1
        event = config.events.in_event(photo)
        if event is not None:
            label = event.name
            photo = photo.model_copy(update={"event": event.name})
            event_counts[event] += 1
        else:
            label = classify_age(photo.timestamp, config)

        log.debug(
            f"Photo {photo.path} has creation date {photo.timestamp} "
            f"and is in group {label}"
        )
        groups.setdefault(label, []).append(photo)

    for event, count in event_counts.items():
        if count == 0:
            log.warning(
                f"Event {event.name} with start date {event.start} and end date "
                f"{event.end} did not match any photos - are you sure you defined "
                f"the date range correctly?"
            )

    log.info(f"Sorted {total} photos into {len(groups)} groups")
    return GroupingResult(groups=groups, event_counts=event_counts)
