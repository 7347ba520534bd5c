"""
Study tracker.

Optional companion to attendance: per-subject topics that can be ticked off,
and free-text study logs with an optional follow-up (revision) date.
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from attendtrack.model import StudyLog, StudyTopic, Subject, new_id


def add_topic(subject: Subject, name: str) -> Subject:
    clean = (name or "").strip()
    if not clean:
        raise ValueError("Topic name must not be empty")
    topic = StudyTopic(id=new_id(), name=clean)
    return dataclasses.replace(subject, topics=subject.topics + (topic,))


def remove_topic(subject: Subject, topic_id: str) -> Subject:
    return dataclasses.replace(subject, topics=tuple(t for t in subject.topics if t.id != topic_id))


def set_topic_completed(subject: Subject, topic_id: str, completed: bool = True) -> Subject:
    topics = tuple(
        dataclasses.replace(t, is_completed=completed) if t.id == topic_id else t for t in subject.topics
    )
    return dataclasses.replace(subject, topics=topics)


def find_topic(subject: Subject, key: str) -> Optional[StudyTopic]:
    """
    Look up a topic by id or case-insensitive name.
    """
    needle = (key or "").strip().lower()
    for t in subject.topics:
        if t.id == key or t.name.lower() == needle:
            return t
    return None


def topic_progress(subject: Subject) -> Tuple[int, int]:
    """
    Return (completed, total) topic counts.
    """
    done = sum(1 for t in subject.topics if t.is_completed)
    return done, len(subject.topics)


def new_study_log(
    subject_id: str,
    description: str,
    topic_id: Optional[str] = None,
    needs_follow_up: bool = False,
    follow_up_date: Optional[date] = None,
    at: Optional[datetime] = None,
) -> StudyLog:
    """
    Create a study log entry. A follow-up date implies needs_follow_up.
    """
    text = (description or "").strip()
    if not text:
        raise ValueError("Study log description must not be empty")
    follow_up = needs_follow_up or follow_up_date is not None
    return StudyLog(
        id=new_id(),
        subject_id=subject_id,
        description=text,
        timestamp=at if at is not None else datetime.now(),
        topic_id=topic_id,
        needs_follow_up=follow_up,
        follow_up_date=follow_up_date if follow_up else None,
    )


def logs_for_subject(logs: Iterable[StudyLog], subject_id: str) -> List[StudyLog]:
    """
    Logs of one subject, newest first.
    """
    out = [log for log in logs if log.subject_id == subject_id]
    out.sort(key=lambda log: log.timestamp, reverse=True)
    return out


def follow_ups_due(logs: Iterable[StudyLog], on: date) -> List[StudyLog]:
    """
    Logs that need a follow-up on or before `on` (undated follow-ups are always due).
    """
    due = [
        log
        for log in logs
        if log.needs_follow_up and (log.follow_up_date is None or log.follow_up_date <= on)
    ]
    due.sort(key=lambda log: (log.follow_up_date or date.min, log.timestamp))
    return due
