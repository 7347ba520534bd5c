"""
CLI (Command Line Interface).

Terminal commands around the attendance tracker, e.g.:

    attendtrack add "Maths" --total 10 --attended 8
    attendtrack slot Maths Monday "10:00 AM - 11:00 AM"
    attendtrack mark Maths present
    attendtrack status
    attendtrack today
    attendtrack logs Maths
    attendtrack dashboard --watch

Note:
- The rich dashboard lives in attendtrack/dashboard.py
- This CLI is intentionally simple and prints plain text (no rich formatting)
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from attendtrack.calculator import overall_percentage, percentage, status_message
from attendtrack.extract import load_extraction_result, subjects_from_extraction
from attendtrack.fetch import ResourceUnreachableError, fetch_resource
from attendtrack.ledger import (
    add_slot,
    correct_counts,
    count_by_status,
    find_subject,
    history_newest_first,
    new_subject,
    record_event,
    remove_slot,
    remove_subject,
    replace_subject,
)
from attendtrack.model import ABSENT, CANCELLED, PRESENT, STATUSES, AppState, Subject
from attendtrack.schedule import DAYS, classify, next_reminder, todays_occurrences, weekday_name
from attendtrack.storage import load_state, save_state
from attendtrack.study import (
    add_topic,
    find_topic,
    follow_ups_due,
    logs_for_subject,
    new_study_log,
    remove_topic,
    set_topic_completed,
)
from attendtrack.timeparse import format_minutes, parse_start_minutes

logger = logging.getLogger(__name__)


def _lookup(state: AppState, key: str) -> Optional[Subject]:
    sub = find_subject(state.subjects, key)
    if sub is None:
        print(f"Unknown subject: {key}")
    return sub


def _save_subject(state: AppState, updated: Subject, path: Optional[Path]) -> AppState:
    new_state = dataclasses.replace(state, subjects=replace_subject(state.subjects, updated))
    save_state(new_state, path)
    return new_state


def _parse_when(text: Optional[str]) -> datetime:
    if not text:
        return datetime.now()
    return datetime.fromisoformat(text)


def _cmd_profile(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    """
    Show the profile, or update the given fields.
    """
    changes = {}
    for field in ("name", "college", "age", "email", "phone"):
        value = getattr(args, field)
        if value is not None:
            changes[field] = value.strip()
    if args.target is not None:
        if not (1 <= args.target <= 100):
            print("Target must be between 1 and 100.")
            return 1
        changes["target_attendance"] = args.target

    profile = state.profile
    if changes:
        profile = dataclasses.replace(profile, **changes)
        save_state(dataclasses.replace(state, profile=profile), path)
        print("Profile updated.")

    print(f"Name:    {profile.name or '-'}")
    print(f"College: {profile.college or '-'}")
    print(f"Target:  {profile.target_attendance}%")
    return 0


def _cmd_add(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    name = (args.name or "").strip()
    if not name:
        print("Please provide a subject name.")
        return 1
    if find_subject(state.subjects, name) is not None:
        print(f"Already tracked: {name}")
        return 0

    sub = new_subject(name, total=args.total, attended=args.attended)
    save_state(dataclasses.replace(state, subjects=state.subjects + (sub,)), path)
    print(f"Added: {sub.name} ({sub.attended_lectures}/{sub.total_lectures})")
    return 0


def _cmd_remove(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    sub = _lookup(state, args.subject)
    if sub is None:
        return 1
    save_state(dataclasses.replace(state, subjects=remove_subject(state.subjects, sub.id)), path)
    print(f"Removed: {sub.name} (subjects: {len(state.subjects) - 1})")
    return 0


def _cmd_slot(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    sub = _lookup(state, args.subject)
    if sub is None:
        return 1

    # allow unusual input, but warn
    if args.day.strip().lower() not in [d.lower() for d in DAYS]:
        print(f"Warning: '{args.day}' is not a weekday name (adding anyway).")
    if parse_start_minutes(args.time) is None:
        print(f"Warning: could not read a start time from '{args.time}' (adding anyway).")

    updated = add_slot(sub, args.day, args.time)
    _save_subject(state, updated, path)
    print(f"{sub.name}: {args.day.strip()} {args.time.strip()} (slots: {len(updated.schedule)})")
    return 0


def _cmd_unslot(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    sub = _lookup(state, args.subject)
    if sub is None:
        return 1
    try:
        updated = remove_slot(sub, args.index - 1)
    except IndexError as exc:
        print(exc)
        return 1
    _save_subject(state, updated, path)
    print(f"{sub.name}: removed slot #{args.index} (slots: {len(updated.schedule)})")
    return 0


def _cmd_mark(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    """
    Record present / absent / cancelled for a subject.
    """
    sub = _lookup(state, args.subject)
    if sub is None:
        return 1

    updated = record_event(sub, args.status, at=_parse_when(args.at))
    _save_subject(state, updated, path)

    status = status_message(updated, state.profile.target_attendance)
    print(f"{updated.name}: {args.status} -> {updated.attended_lectures}/{updated.total_lectures} ({percentage(updated)}%)")
    print(status.message)
    return 0


def _cmd_edit(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    """
    Manually correct the counters (history is not touched).
    """
    sub = _lookup(state, args.subject)
    if sub is None:
        return 1
    updated = correct_counts(sub, args.total, args.attended)
    _save_subject(state, updated, path)
    print(f"{updated.name}: {updated.attended_lectures}/{updated.total_lectures} ({percentage(updated)}%)")
    if updated.attended_lectures > updated.total_lectures:
        print("Warning: attended is greater than total.")
    return 0


def _cmd_history(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    sub = _lookup(state, args.subject)
    if sub is None:
        return 1
    records = history_newest_first(sub)
    if not records:
        print("No attendance history recorded yet.")
        return 0
    for rec in records[: args.limit]:
        print(f"{rec.timestamp:%d %b %Y %H:%M} | {rec.status}")
    if len(records) > args.limit:
        print(f"... and {len(records) - args.limit} older records")
    counts = count_by_status(sub)
    print(f"Present: {counts[PRESENT]} | Absent: {counts[ABSENT]} | Cancelled: {counts[CANCELLED]}")
    return 0


def _cmd_status(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    if not state.subjects:
        print("No subjects yet.")
        return 0
    target = state.profile.target_attendance
    for sub in state.subjects:
        status = status_message(sub, target)
        print(
            f"{sub.name} | {sub.attended_lectures}/{sub.total_lectures} | "
            f"{percentage(sub)}% | {status.message}"
        )
    print(f"Overall: {overall_percentage(state.subjects)}% (target {target}%)")
    return 0


def _cmd_today(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    now = _parse_when(args.at)
    occurrences = todays_occurrences(state.subjects, now)
    if not occurrences:
        print(f"No classes on {weekday_name(now)}.")
        return 0

    for occ in occurrences:
        print(f"{format_minutes(occ.start_minutes)}  {occ.time} | {occ.subject_name} | {classify(occ, now)}")

    reminder = next_reminder(state.subjects, now)
    if reminder is None:
        print("No more classes today.")
    else:
        occ, left = reminder
        print(f"Next: {occ.subject_name} in {left.hours}h {left.minutes}m")
    return 0


def _cmd_import(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    """
    Add subjects from a saved extraction result (JSON).
    """
    try:
        result = load_extraction_result(args.file)
    except (OSError, ValueError) as exc:
        print(f"Could not read extraction result: {exc}")
        return 1

    subjects = subjects_from_extraction(result)
    if not subjects:
        print("No subjects found.")
        return 0

    save_state(dataclasses.replace(state, subjects=state.subjects + tuple(subjects)), path)
    for sub in subjects:
        print(f"Added: {sub.name} ({len(sub.schedule)} slots)")
    if result.schedule_summary:
        print(result.schedule_summary)
    return 0


def _cmd_fetch(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    """
    Download a timetable document (direct, then via proxies).
    """
    try:
        res = fetch_resource(args.url)
    except ValueError as exc:
        print(exc)
        return 1
    except ResourceUnreachableError as exc:
        print(exc)
        logger.debug("Fetch failures: %s", exc.details())
        return 1

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(res.content)
    print(f"Saved {len(res.content)} bytes ({res.mime_type}, via {res.source}) to: {out}")
    return 0


def _cmd_topic(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    sub = _lookup(state, args.subject)
    if sub is None:
        return 1

    topic = find_topic(sub, args.topic)
    if args.done or args.remove:
        if topic is None:
            print(f"Unknown topic: {args.topic}")
            return 1
        if args.remove:
            _save_subject(state, remove_topic(sub, topic.id), path)
            print(f"{sub.name}: removed topic {topic.name}")
        else:
            _save_subject(state, set_topic_completed(sub, topic.id), path)
            print(f"{sub.name}: completed {topic.name}")
        return 0

    if topic is not None:
        print(f"Already listed: {topic.name}")
        return 0
    _save_subject(state, add_topic(sub, args.topic), path)
    print(f"{sub.name}: added topic {args.topic.strip()}")
    return 0


def _cmd_log(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    sub = _lookup(state, args.subject)
    if sub is None:
        return 1
    if not (args.description or "").strip():
        print("Please provide a description.")
        return 1

    topic_id = None
    if args.topic:
        topic = find_topic(sub, args.topic)
        if topic is None:
            print(f"Unknown topic: {args.topic}")
            return 1
        topic_id = topic.id

    follow_up = date.fromisoformat(args.follow_up) if args.follow_up else None
    log = new_study_log(
        sub.id,
        args.description,
        topic_id=topic_id,
        needs_follow_up=args.needs_follow_up,
        follow_up_date=follow_up,
        at=_parse_when(args.at),
    )
    save_state(dataclasses.replace(state, study_logs=(log,) + state.study_logs), path)
    print(f"Logged study session for {sub.name}.")
    return 0


def _cmd_logs(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    sub = _lookup(state, args.subject)
    if sub is None:
        return 1
    logs = logs_for_subject(state.study_logs, sub.id)
    if not logs:
        print(f"No study sessions logged for {sub.name}.")
        return 0

    topics = {t.id: t.name for t in sub.topics}
    for log in logs:
        bits = [f"{log.timestamp:%d %b %Y %H:%M}"]
        if log.topic_id:
            bits.append(topics.get(log.topic_id, "(removed topic)"))
        bits.append(log.description)
        if log.needs_follow_up:
            when = log.follow_up_date.isoformat() if log.follow_up_date else "follow-up needed"
            bits.append(f"follow-up: {when}")
        print(" | ".join(bits))
    return 0


def _cmd_followups(args: argparse.Namespace, state: AppState, path: Optional[Path]) -> int:
    on = date.fromisoformat(args.on) if args.on else date.today()
    due = follow_ups_due(state.study_logs, on)
    if not due:
        print("No follow-ups due.")
        return 0
    names = {s.id: s.name for s in state.subjects}
    for log in due:
        when = log.follow_up_date.isoformat() if log.follow_up_date else "any time"
        print(f"{when} | {names.get(log.subject_id, '?')} | {log.description}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="attendtrack", description="Attendance tracker CLI")
    parser.add_argument("--state", type=Path, default=None, help="Path of the state file (default: package data/)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_profile = sub.add_parser("profile", help="Show or update your profile")
    p_profile.add_argument("--name", type=str)
    p_profile.add_argument("--college", type=str)
    p_profile.add_argument("--age", type=str)
    p_profile.add_argument("--email", type=str)
    p_profile.add_argument("--phone", type=str)
    p_profile.add_argument("--target", type=int, help="Target attendance percentage (e.g. 75)")

    p_add = sub.add_parser("add", help="Add a subject")
    p_add.add_argument("name", type=str, help="Subject name")
    p_add.add_argument("--total", type=str, default="0", help="Lectures held so far")
    p_add.add_argument("--attended", type=str, default="0", help="Lectures attended so far")

    p_remove = sub.add_parser("remove", help="Remove a subject")
    p_remove.add_argument("subject", type=str)

    p_slot = sub.add_parser("slot", help="Add a weekly class slot")
    p_slot.add_argument("subject", type=str)
    p_slot.add_argument("day", type=str, help="Weekday, e.g. Monday")
    p_slot.add_argument("time", type=str, help="Time, e.g. '10:00 AM - 11:00 AM'")

    p_unslot = sub.add_parser("unslot", help="Remove a weekly class slot")
    p_unslot.add_argument("subject", type=str)
    p_unslot.add_argument("index", type=int, help="Slot number (1-based)")

    p_mark = sub.add_parser("mark", help="Record attendance for a class")
    p_mark.add_argument("subject", type=str)
    p_mark.add_argument("status", choices=STATUSES)
    p_mark.add_argument("--at", type=str, default=None, help="ISO timestamp (default: now)")

    p_edit = sub.add_parser("edit", help="Correct the lecture counters")
    p_edit.add_argument("subject", type=str)
    p_edit.add_argument("total", type=str)
    p_edit.add_argument("attended", type=str)

    p_history = sub.add_parser("history", help="Show attendance history (newest first)")
    p_history.add_argument("subject", type=str)
    p_history.add_argument("--limit", type=int, default=20)

    sub.add_parser("status", help="Attendance status of all subjects")

    p_today = sub.add_parser("today", help="Today's classes and the next one")
    p_today.add_argument("--at", type=str, default=None, help="ISO timestamp (default: now)")

    p_import = sub.add_parser("import", help="Add subjects from an extraction result (.json)")
    p_import.add_argument("file", type=str)

    p_fetch = sub.add_parser("fetch", help="Download a timetable document from a link")
    p_fetch.add_argument("url", type=str)
    p_fetch.add_argument("out", type=str, help="Output file path")

    p_topic = sub.add_parser("topic", help="Add a study topic (complete it with --done, delete it with --remove)")
    p_topic.add_argument("subject", type=str)
    p_topic.add_argument("topic", type=str)
    topic_action = p_topic.add_mutually_exclusive_group()
    topic_action.add_argument("--done", action="store_true")
    topic_action.add_argument("--remove", action="store_true")

    p_log = sub.add_parser("log", help="Log a study session")
    p_log.add_argument("subject", type=str)
    p_log.add_argument("description", type=str)
    p_log.add_argument("--topic", type=str, default=None)
    p_log.add_argument("--follow-up", type=str, default=None, help="Revision date YYYY-MM-DD")
    p_log.add_argument("--needs-follow-up", action="store_true")
    p_log.add_argument("--at", type=str, default=None, help="ISO timestamp (default: now)")

    p_logs = sub.add_parser("logs", help="Study sessions of a subject (newest first)")
    p_logs.add_argument("subject", type=str)

    p_followups = sub.add_parser("followups", help="Study follow-ups that are due")
    p_followups.add_argument("--on", type=str, default=None, help="Date YYYY-MM-DD (default: today)")

    p_dash = sub.add_parser("dashboard", help="Rich dashboard")
    p_dash.add_argument("--watch", action="store_true", help="Refresh every minute")

    return parser


_HANDLERS = {
    "profile": _cmd_profile,
    "add": _cmd_add,
    "remove": _cmd_remove,
    "slot": _cmd_slot,
    "unslot": _cmd_unslot,
    "mark": _cmd_mark,
    "edit": _cmd_edit,
    "history": _cmd_history,
    "status": _cmd_status,
    "today": _cmd_today,
    "import": _cmd_import,
    "fetch": _cmd_fetch,
    "topic": _cmd_topic,
    "log": _cmd_log,
    "logs": _cmd_logs,
    "followups": _cmd_followups,
}


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "dashboard":
        from attendtrack.dashboard import run_dashboard

        run_dashboard(lambda: load_state(args.state), watch=args.watch)
        raise SystemExit(0)

    handler = _HANDLERS.get(args.command)
    if handler is None:
        raise SystemExit(2)

    state = load_state(args.state)
    try:
        code = handler(args, state, args.state)
    except ValueError as exc:
        # bad dates / timestamps typed by the user
        print(f"Invalid input: {exc}")
        code = 1
    raise SystemExit(code)
