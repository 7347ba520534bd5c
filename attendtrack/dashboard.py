"""
Terminal dashboard.

Renders the reminder banner, today's schedule and the per-subject status
with rich. In watch mode the view is rebuilt on a one-minute tick, which is
all the countdown needs (it is shown in whole minutes).
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Callable, Optional

from rich import box
from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from attendtrack.calculator import TIER_DANGER, TIER_OK, TIER_WARN, overall_percentage, percentage, status_message
from attendtrack.model import AppState
from attendtrack.schedule import NOW, PAST, UPCOMING, classify, next_reminder, todays_occurrences
from attendtrack.study import topic_progress

TICK_SECONDS = 60

_TIER_STYLE = {TIER_OK: "green", TIER_WARN: "yellow", TIER_DANGER: "red"}
_CLASS_STYLE = {PAST: "dim strike", NOW: "bold green", UPCOMING: "cyan"}


def _countdown_text(hours: int, minutes: int) -> str:
    return f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"


def render_reminder(state: AppState, now: datetime) -> Optional[Panel]:
    reminder = next_reminder(state.subjects, now)
    if reminder is None:
        return None
    occ, left = reminder
    start = occ.time.split("-", 1)[0].strip()
    body = f"[bold]{escape(occ.subject_name)}[/]  starts at {escape(start)}  ([yellow]{_countdown_text(left.hours, left.minutes)}[/] remaining)"
    return Panel(body, title="Upcoming lecture", border_style="magenta")


def render_today(state: AppState, now: datetime) -> Optional[Table]:
    occurrences = todays_occurrences(state.subjects, now)
    if not occurrences:
        return None

    table = Table(title=f"Today's schedule ({now:%A})", box=box.SIMPLE)
    table.add_column("Subject")
    table.add_column("Time")
    table.add_column("")
    for occ in occurrences:
        state_name = classify(occ, now)
        style = _CLASS_STYLE.get(state_name, "")
        marker = "[bold green]NOW[/]" if state_name == NOW else ""
        name = f"[{style}]{escape(occ.subject_name)}[/]" if style else escape(occ.subject_name)
        table.add_row(name, escape(occ.time), marker)
    return table


def render_subjects(state: AppState) -> Table:
    target = state.profile.target_attendance
    overall = overall_percentage(state.subjects)
    overall_style = "green" if overall >= target else "red"

    table = Table(
        title=f"Attendance (target {target}%, overall [{overall_style}]{overall}%[/])",
        box=box.SIMPLE,
    )
    table.add_column("Subject")
    table.add_column("Attended", justify="right")
    table.add_column("%", justify="right")
    table.add_column("Status")
    table.add_column("Topics", justify="right")

    for sub in state.subjects:
        status = status_message(sub, target)
        style = _TIER_STYLE.get(status.tier, "")
        done, total = topic_progress(sub)
        table.add_row(
            f"[bold cyan]{escape(sub.name)}[/]",
            f"{sub.attended_lectures}/{sub.total_lectures}",
            f"{percentage(sub)}",
            f"[{style}]{status.message}[/]",
            f"{done}/{total}" if total else "",
        )
    return table


def render(state: AppState, now: datetime) -> Group:
    parts = []
    greeting = escape(state.profile.name.split(" ")[0]) if state.profile.name else ""
    parts.append(f"[bold]Hi{', ' + greeting if greeting else ''}[/]  [dim]{now:%a %d %b %H:%M}[/]")
    reminder = render_reminder(state, now)
    if reminder is not None:
        parts.append(reminder)
    today = render_today(state, now)
    if today is not None:
        parts.append(today)
    if state.subjects:
        parts.append(render_subjects(state))
    else:
        parts.append("No subjects yet. Add one with: attendtrack add <name>")
    return Group(*parts)


def run_dashboard(
    load_state_fn: Callable[[], AppState],
    watch: bool = False,
    console: Optional[Console] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> None:
    """
    Print the dashboard once, or keep refreshing it every minute until Ctrl+C.

    The state is reloaded on every tick so changes made from another terminal show up.
    """
    con = console if console is not None else Console()

    if not watch:
        con.print(render(load_state_fn(), clock()))
        return

    try:
        while True:
            con.clear()
            con.print(render(load_state_fn(), clock()))
            con.print("[dim]Refreshing every minute, Ctrl+C to quit.[/]")
            time.sleep(TICK_SECONDS)
    except KeyboardInterrupt:
        con.print("Bye.")
