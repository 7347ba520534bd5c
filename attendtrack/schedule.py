"""
Today's schedule and the next-class reminder.

Everything here takes `now` as a parameter, so the same inputs always give
the same answer. The caller re-evaluates on a coarse clock tick (once per
minute is enough for a countdown in whole minutes).

Classification of a class relative to now (no end time is parsed, every
class is assumed to last 60 minutes):

    past      start < now - 60
    upcoming  start > now
    now       otherwise
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from attendtrack.model import ClassOccurrence, Subject, TimeRemaining
from attendtrack.timeparse import parse_start_minutes


DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

ASSUMED_DURATION_MINUTES = 60

PAST = "past"
NOW = "now"
UPCOMING = "upcoming"
UNKNOWN = "unknown"


def weekday_name(now: datetime) -> str:
    """
    English weekday name (independent of the system locale).
    """
    return DAYS[now.weekday()]


def minutes_of_day(now: datetime) -> int:
    return now.hour * 60 + now.minute


def todays_occurrences(subjects: Iterable[Subject], now: datetime) -> List[ClassOccurrence]:
    """
    Flatten all slots that fall on now's weekday and sort them by start time.

    Slots whose time cannot be parsed are kept (for display) and sorted last,
    in the order they were found.
    """
    today = weekday_name(now).lower()

    out: List[ClassOccurrence] = []
    for sub in subjects:
        for slot in sub.schedule:
            if not slot.day or slot.day.strip().lower() != today:
                continue
            out.append(
                ClassOccurrence(
                    subject_name=sub.name,
                    day=slot.day,
                    time=slot.time,
                    start_minutes=parse_start_minutes(slot.time),
                )
            )

    # sorted() is stable, so unparseable slots keep their relative order
    out.sort(key=lambda occ: (occ.start_minutes is None, occ.start_minutes or 0))
    return out


def upcoming_class(occurrences: Sequence[ClassOccurrence], now: datetime) -> Optional[ClassOccurrence]:
    """
    First class that starts strictly after now, or None.
    """
    current = minutes_of_day(now)
    for occ in occurrences:
        if occ.start_minutes is None:
            continue
        if occ.start_minutes > current:
            return occ
    return None


def time_remaining(occurrence: Optional[ClassOccurrence], now: datetime) -> TimeRemaining:
    """
    Hours and minutes until the occurrence starts.
    """
    if occurrence is None or occurrence.start_minutes is None:
        raise ValueError("time_remaining() needs a class with a parsed start time")
    delta = occurrence.start_minutes - minutes_of_day(now)
    return TimeRemaining(hours=delta // 60, minutes=delta % 60)


def classify(occurrence: ClassOccurrence, now: datetime) -> str:
    """
    Return 'past', 'now', 'upcoming' (or 'unknown' for unparseable times).
    """
    if occurrence.start_minutes is None:
        return UNKNOWN
    current = minutes_of_day(now)
    if occurrence.start_minutes < current - ASSUMED_DURATION_MINUTES:
        return PAST
    if occurrence.start_minutes > current:
        return UPCOMING
    return NOW


def next_reminder(
    subjects: Iterable[Subject], now: datetime
) -> Optional[Tuple[ClassOccurrence, TimeRemaining]]:
    """
    The next class today together with its countdown, or None.
    """
    occ = upcoming_class(todays_occurrences(subjects, now), now)
    if occ is None:
        return None
    return occ, time_remaining(occ, now)
