"""
Age bracket classification.

Turns a photo timestamp into a human readable age bracket such as
"6 Days", "3 Weeks", "5 Months", "2 Years" or "30 Weeks Pregnant".
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

import arrow

if TYPE_CHECKING:
    from ..core.config import Configuration

UNKNOWN = "Unknown"


def calendar_months(start: datetime, end: datetime) -> int:
    """
    Count whole calendar months between two timestamps.

    A month counts once ``start`` shifted by that many months has been
    reached. Shifting clamps to the end of shorter months, so 31 January
    plus one month is the last day of February.

    Args:
        start: Earlier timestamp
        end: Later timestamp

    Returns:
        Number of whole months, never negative
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if months > 0 and arrow.get(start).shift(months=months).naive > end:
        months -= 1
    return max(months, 0)


def classify_age(timestamp: Optional[datetime], config: "Configuration") -> str:
    """
    Compute the age bracket label for a timestamp.

    Args:
        timestamp: When the photo was taken, None if unknown
        config: Sorter configuration holding birth date and thresholds

    Returns:
        Age bracket label, "Unknown" if the timestamp is missing
    """
    if timestamp is None:
        return UNKNOWN

    if timestamp < config.birth_date:
        weeks_to_due = (config.due_date - timestamp).days // 7
        return f"{config.weeks_of_pregnancy - weeks_to_due} Weeks Pregnant"

    age_days = (timestamp - config.birth_date).days
    if age_days // 7 < config.weeks_threshold:
        return f"{age_days} Days"

    age_weeks = age_days // 7
    age_months = calendar_months(config.birth_date, timestamp)
    if age_weeks >= config.weeks_threshold and age_months < config.months_threshold:
        return f"{age_weeks} Weeks"
    if (
        age_months >= config.months_threshold
        and age_months // 12 < config.years_threshold
    ):
        return f"{age_months} Months"

    return f"{age_months // 12} Years"
