"""
Attendance ledger.

Each subject keeps an append-only history of attendance events. Recording an
event appends one record and updates the running counters in the same step,
so history and counters never drift apart. A manual correction overwrites the
counters only (used to seed totals from before tracking started).

Every function returns a new Subject; nothing is modified in place.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Any, Iterable, Optional, Tuple

from attendtrack.model import (
    ABSENT,
    CANCELLED,
    PRESENT,
    STATUSES,
    AttendanceRecord,
    ScheduleSlot,
    Subject,
    new_id,
)

logger = logging.getLogger(__name__)


def coerce_count(value: Any) -> int:
    """
    Turn user input into a non-negative integer.

    Non-numeric input becomes 0 instead of raising, e.g. '' or 'abc'.
    """
    if isinstance(value, bool):
        return int(value)
    try:
        n = int(value)
    except (TypeError, ValueError):
        try:
            n = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0
    return max(n, 0)


def new_subject(
    name: str,
    total: Any = 0,
    attended: Any = 0,
    schedule: Iterable[ScheduleSlot] = (),
) -> Subject:
    """
    Create a subject with an empty history.
    """
    clean = (name or "").strip()
    if not clean:
        raise ValueError("Subject name must not be empty")
    return Subject(
        id=new_id(),
        name=clean,
        total_lectures=coerce_count(total),
        attended_lectures=coerce_count(attended),
        schedule=tuple(schedule),
    )


def record_event(subject: Subject, status: str, at: Optional[datetime] = None) -> Subject:
    """
    Append one attendance event and update the counters.

    present   -> attended += 1, total += 1
    absent    -> total += 1
    cancelled -> logged only, counters unchanged
    """
    if status not in STATUSES:
        raise ValueError(f"Unknown attendance status: {status!r}")

    record = AttendanceRecord(
        id=new_id(),
        timestamp=at if at is not None else datetime.now(),
        status=status,
    )

    total = subject.total_lectures
    attended = subject.attended_lectures
    if status == PRESENT:
        total += 1
        attended += 1
    elif status == ABSENT:
        total += 1

    logger.debug("%s: recorded %s (%d/%d)", subject.name, status, attended, total)

    return dataclasses.replace(
        subject,
        total_lectures=total,
        attended_lectures=attended,
        history=subject.history + (record,),
    )


def correct_counts(subject: Subject, new_total: Any, new_attended: Any) -> Subject:
    """
    Overwrite both counters, leaving the history untouched.

    attended > total is accepted here; the percentage then exceeds 100.
    """
    return dataclasses.replace(
        subject,
        total_lectures=coerce_count(new_total),
        attended_lectures=coerce_count(new_attended),
    )


def history_newest_first(subject: Subject) -> Tuple[AttendanceRecord, ...]:
    return tuple(reversed(subject.history))


def count_by_status(subject: Subject) -> dict[str, int]:
    """
    Number of history records per status (cancelled classes included).
    """
    counts = {PRESENT: 0, ABSENT: 0, CANCELLED: 0}
    for rec in subject.history:
        counts[rec.status] = counts.get(rec.status, 0) + 1
    return counts


# ---------------------------------------------------------------------------
# Schedule edits
# ---------------------------------------------------------------------------


def add_slot(subject: Subject, day: str, time: str) -> Subject:
    """
    Add a weekly slot. Duplicates are allowed (two sessions on one day).
    """
    slot = ScheduleSlot(day=(day or "").strip(), time=(time or "").strip())
    return dataclasses.replace(subject, schedule=subject.schedule + (slot,))


def remove_slot(subject: Subject, index: int) -> Subject:
    if not (0 <= index < len(subject.schedule)):
        raise IndexError(f"No schedule slot #{index + 1} for {subject.name}")
    schedule = subject.schedule[:index] + subject.schedule[index + 1 :]
    return dataclasses.replace(subject, schedule=schedule)


# ---------------------------------------------------------------------------
# Subject list helpers (the list itself is owned by the caller)
# ---------------------------------------------------------------------------


def find_subject(subjects: Iterable[Subject], key: str) -> Optional[Subject]:
    """
    Look up a subject by exact id, then by case-insensitive name.
    """
    needle = (key or "").strip()
    if not needle:
        return None
    items = list(subjects)
    for s in items:
        if s.id == needle:
            return s
    for s in items:
        if s.name.lower() == needle.lower():
            return s
    return None


def replace_subject(subjects: Iterable[Subject], updated: Subject) -> Tuple[Subject, ...]:
    return tuple(updated if s.id == updated.id else s for s in subjects)


def remove_subject(subjects: Iterable[Subject], subject_id: str) -> Tuple[Subject, ...]:
    return tuple(s for s in subjects if s.id != subject_id)
