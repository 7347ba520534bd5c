"""
Tests for the rich dashboard rendering.
"""

import io
import unittest
from datetime import datetime
from unittest import mock

from rich.console import Console

from attendtrack.dashboard import run_dashboard
from attendtrack.ledger import add_slot, new_subject
from attendtrack.model import AppState, UserProfile


def _console() -> Console:
    return Console(file=io.StringIO(), record=True, width=120, color_system=None)


def _state() -> AppState:
    maths = add_slot(new_subject("Maths", total=10, attended=9), "Monday", "9:00 AM - 10:00 AM")
    physics = add_slot(new_subject("Physics", total=10, attended=6), "Monday", "11:00 AM - 12:00 PM")
    return AppState(profile=UserProfile(name="Asha Rao", target_attendance=75), subjects=(maths, physics))


class TestDashboard(unittest.TestCase):
    def test_render_once(self) -> None:
        con = _console()
        run_dashboard(_state, console=con, clock=lambda: datetime(2024, 1, 1, 10, 30))
        text = con.export_text()

        self.assertIn("Hi, Asha", text)
        self.assertIn("Upcoming lecture", text)
        self.assertIn("30m remaining", text)
        self.assertIn("Today's schedule (Monday)", text)
        self.assertIn("Can bunk 2 classes", text)
        self.assertIn("Attend next 6 classes!", text)
        self.assertIn("overall 75%", text)

    def test_no_subjects(self) -> None:
        con = _console()
        run_dashboard(AppState, console=con, clock=lambda: datetime(2024, 1, 1, 10, 30))
        self.assertIn("No subjects yet", con.export_text())

    def test_watch_stops_on_ctrl_c(self) -> None:
        con = _console()
        with mock.patch("attendtrack.dashboard.time.sleep", side_effect=KeyboardInterrupt):
            run_dashboard(_state, watch=True, console=con, clock=lambda: datetime(2024, 1, 1, 10, 30))
        text = con.export_text()
        self.assertIn("Maths", text)
        self.assertIn("Bye.", text)


if __name__ == "__main__":
    unittest.main()
