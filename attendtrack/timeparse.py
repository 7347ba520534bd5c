"""
Class time parsing.

Schedule slots carry free-form time text, typically produced by a person or
by the extraction service, e.g.:

    "10:00 AM - 11:00 AM"
    "2 PM"
    "14:30"

Only the start of a range is used. Parsing never raises: anything we cannot
read becomes None so the schedule view can still show the slot.
"""

from __future__ import annotations

import re
from typing import Any, Optional


_START_RE = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(AM|PM)?\b")


def parse_start_minutes(time_text: Any) -> Optional[int]:
    """
    Convert the start of a class time string to minutes since midnight.

    Returns a value in [0, 1439], or None if the text is unparseable.
    """
    if not isinstance(time_text, str):
        return None

    # "10:00 AM - 11:00 AM" -> "10:00 AM"
    start = time_text.split("-", 1)[0].strip().upper()
    if not start:
        return None

    # first time found anywhere in the text, e.g. "Mon 9:00 AM"
    match = _START_RE.search(start)
    if not match:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2)) if match.group(2) else 0
    meridiem = match.group(3)

    if minutes > 59:
        return None

    if meridiem:
        # "13 PM" is not a 12-hour clock value
        if hours > 12:
            return None
        if meridiem == "PM" and hours < 12:
            hours += 12
        if meridiem == "AM" and hours == 12:
            hours = 0
    elif hours > 23:
        return None

    return hours * 60 + minutes


def format_minutes(minutes: Optional[int]) -> str:
    """
    Render minutes since midnight as 'HH:MM' ('--:--' for None).
    """
    if minutes is None:
        return "--:--"
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
