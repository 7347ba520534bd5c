"""
Persistent storage for the app state.

This module manages the file:

    data/state.json

Layout:

    {
      "profile":    {...},
      "subjects":   [{..., "schedule": [...], "history": [...], "topics": [...]}],
      "study_logs": [...]
    }

Older files may lack "history" and "topics" on subjects; those default to
empty lists when loading. Loading never crashes the application: a missing
or corrupted file yields an empty state, a malformed record is skipped.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

from attendtrack.ledger import coerce_count
from attendtrack.model import (
    DEFAULT_TARGET,
    STATUSES,
    AppState,
    AttendanceRecord,
    ScheduleSlot,
    StudyLog,
    StudyTopic,
    Subject,
    UserProfile,
    new_id,
)

logger = logging.getLogger(__name__)


def _default_state_path() -> Path:
    """
    Return the default path of state.json inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can override the path.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "state.json"


def _str(x: Any) -> str:
    return "" if x is None else str(x).strip()


def _parse_datetime(raw: Any) -> datetime:
    # ISO strings may come from other clients with a trailing 'Z'
    text = _str(raw)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    # keep every timestamp naive local time, like datetime.now()
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _parse_date(raw: Any) -> Optional[date]:
    text = _str(raw)
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# dict -> model
# ---------------------------------------------------------------------------


def profile_from_dict(data: Any) -> UserProfile:
    if not isinstance(data, dict):
        return UserProfile()
    target = data.get("target_attendance", data.get("targetAttendance", DEFAULT_TARGET))
    return UserProfile(
        name=_str(data.get("name")),
        college=_str(data.get("college")),
        age=_str(data.get("age")),
        email=_str(data.get("email")),
        phone=_str(data.get("phone")),
        target_attendance=min(coerce_count(target), 100),
    )


def subject_from_dict(data: dict[str, Any]) -> Subject:
    """
    Build a Subject from its JSON form.

    Raises KeyError/ValueError/TypeError for records that cannot be read.
    """
    name = _str(data["name"])
    if not name:
        raise ValueError("subject without name")

    schedule = tuple(
        ScheduleSlot(day=_str(s.get("day")), time=_str(s.get("time")))
        for s in data.get("schedule") or []
        if isinstance(s, dict)
    )

    history = []
    for r in data.get("history") or []:
        if not isinstance(r, dict):
            logger.warning("Skipping unreadable history record in %s", name)
            continue
        status = _str(r.get("status")).lower()
        if status not in STATUSES:
            logger.warning("Skipping history record with status %r", status)
            continue
        try:
            timestamp = _parse_datetime(r.get("timestamp", r.get("date")))
        except ValueError:
            logger.warning("Skipping history record with bad timestamp in %s", name)
            continue
        history.append(AttendanceRecord(id=_str(r.get("id")) or new_id(), timestamp=timestamp, status=status))

    topics = tuple(
        StudyTopic(
            id=_str(t.get("id")) or new_id(),
            name=_str(t.get("name")),
            is_completed=bool(t.get("is_completed", t.get("isCompleted", False))),
        )
        for t in data.get("topics") or []
        if isinstance(t, dict)
    )

    return Subject(
        id=_str(data.get("id")) or new_id(),
        name=name,
        total_lectures=coerce_count(data.get("total_lectures", data.get("totalLectures", 0))),
        attended_lectures=coerce_count(data.get("attended_lectures", data.get("attendedLectures", 0))),
        schedule=schedule,
        history=tuple(history),
        topics=topics,
    )


def study_log_from_dict(data: dict[str, Any]) -> StudyLog:
    return StudyLog(
        id=_str(data.get("id")) or new_id(),
        subject_id=_str(data["subject_id"]),
        description=_str(data["description"]),
        timestamp=_parse_datetime(data["timestamp"]),
        topic_id=_str(data.get("topic_id")) or None,
        needs_follow_up=bool(data.get("needs_follow_up", False)),
        follow_up_date=_parse_date(data.get("follow_up_date")),
    )


def state_from_dict(data: Any) -> AppState:
    if not isinstance(data, dict):
        return AppState()

    subjects = []
    for raw in data.get("subjects") or []:
        try:
            subjects.append(subject_from_dict(raw))
        except (KeyError, ValueError, TypeError, AttributeError) as exc:
            logger.warning("Skipping unreadable subject: %s", exc)

    logs = []
    for raw in data.get("study_logs") or []:
        try:
            logs.append(study_log_from_dict(raw))
        except (KeyError, ValueError, TypeError, AttributeError) as exc:
            logger.warning("Skipping unreadable study log: %s", exc)

    return AppState(
        profile=profile_from_dict(data.get("profile")),
        subjects=tuple(subjects),
        study_logs=tuple(logs),
    )


# ---------------------------------------------------------------------------
# model -> dict
# ---------------------------------------------------------------------------


def subject_to_dict(subject: Subject) -> dict[str, Any]:
    return {
        "id": subject.id,
        "name": subject.name,
        "total_lectures": subject.total_lectures,
        "attended_lectures": subject.attended_lectures,
        "schedule": [{"day": s.day, "time": s.time} for s in subject.schedule],
        "history": [
            {"id": r.id, "timestamp": r.timestamp.isoformat(timespec="seconds"), "status": r.status}
            for r in subject.history
        ],
        "topics": [{"id": t.id, "name": t.name, "is_completed": t.is_completed} for t in subject.topics],
    }


def study_log_to_dict(log: StudyLog) -> dict[str, Any]:
    return {
        "id": log.id,
        "subject_id": log.subject_id,
        "description": log.description,
        "timestamp": log.timestamp.isoformat(timespec="seconds"),
        "topic_id": log.topic_id,
        "needs_follow_up": log.needs_follow_up,
        "follow_up_date": log.follow_up_date.isoformat() if log.follow_up_date else None,
    }


def state_to_dict(state: AppState) -> dict[str, Any]:
    p = state.profile
    return {
        "profile": {
            "name": p.name,
            "college": p.college,
            "age": p.age,
            "email": p.email,
            "phone": p.phone,
            "target_attendance": p.target_attendance,
        },
        "subjects": [subject_to_dict(s) for s in state.subjects],
        "study_logs": [study_log_to_dict(log) for log in state.study_logs],
    }


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def load_state(path: str | Path | None = None) -> AppState:
    """
    Load the app state from state.json.

    Returns an empty state if the file does not exist or is invalid.
    """
    # Use custom path if provided (mainly for tests),
    # otherwise fall back to the default package location
    state_path = Path(path) if path is not None else _default_state_path()

    # First run: nothing saved yet
    if not state_path.exists():
        return AppState()

    try:
        data = json.loads(state_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", state_path, exc)
        return AppState()

    return state_from_dict(data)


def save_state(state: AppState, path: str | Path | None = None) -> None:
    """
    Save the app state to state.json.

    Creates parent directories if needed.
    """
    state_path = Path(path) if path is not None else _default_state_path()
    state_path.parent.mkdir(parents=True, exist_ok=True)

    payload = state_to_dict(state)
    state_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
