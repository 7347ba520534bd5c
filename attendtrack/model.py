"""
Central data model definitions used across the project.

All values are frozen dataclasses so that:
- every "update" produces a new object (dataclasses.replace)
- a Subject can be handed to any function without being modified behind the caller's back
- the caller owns the single source of truth (see storage.AppState)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple


PRESENT = "present"
ABSENT = "absent"
CANCELLED = "cancelled"

STATUSES = (PRESENT, ABSENT, CANCELLED)

DEFAULT_TARGET = 75


def new_id() -> str:
    """
    Return a fresh collision-resistant identifier.
    """
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ScheduleSlot:
    """
    One weekly recurring class slot, e.g. ("Monday", "10:00 AM - 11:00 AM").

    The time is kept as free-form text; see timeparse.parse_start_minutes.
    """

    day: str
    time: str


@dataclass(frozen=True)
class AttendanceRecord:
    """
    One immutable ledger entry.

    timestamp is the moment the event was recorded, not the class time.
    """

    id: str
    timestamp: datetime
    status: str


@dataclass(frozen=True)
class StudyTopic:
    id: str
    name: str
    is_completed: bool = False


@dataclass(frozen=True)
class StudyLog:
    """
    A logged study session for one subject (optionally one topic).
    """

    id: str
    subject_id: str
    description: str
    timestamp: datetime
    topic_id: Optional[str] = None
    needs_follow_up: bool = False
    follow_up_date: Optional[date] = None


@dataclass(frozen=True)
class Subject:
    """
    A tracked course with its running counters and attendance history.

    history is stored oldest first (append order).
    """

    id: str
    name: str
    total_lectures: int = 0
    attended_lectures: int = 0
    schedule: Tuple[ScheduleSlot, ...] = ()
    history: Tuple[AttendanceRecord, ...] = ()
    topics: Tuple[StudyTopic, ...] = ()


@dataclass(frozen=True)
class UserProfile:
    name: str = ""
    college: str = ""
    age: str = ""
    email: str = ""
    phone: str = ""
    target_attendance: int = DEFAULT_TARGET


@dataclass(frozen=True)
class ClassOccurrence:
    """
    One slot of a subject resolved against "today".

    Derived on every query, never persisted. start_minutes is None when the
    slot's time text could not be parsed.
    """

    subject_name: str
    day: str
    time: str
    start_minutes: Optional[int]


@dataclass(frozen=True)
class StatusMessage:
    """
    Result of calculator.status_message.

    count is the bunkable / needed number, or None when it is unbounded.
    """

    tier: str
    message: str
    count: Optional[int]


@dataclass(frozen=True)
class TimeRemaining:
    hours: int
    minutes: int


@dataclass(frozen=True)
class AppState:
    """
    Everything the app persists: profile, subjects and study logs.
    """

    profile: UserProfile = field(default_factory=UserProfile)
    subjects: Tuple[Subject, ...] = ()
    study_logs: Tuple[StudyLog, ...] = ()
