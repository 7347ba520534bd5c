"""
Unit tests for class time parsing.

Contract:
- only the start of a range is used
- 12-hour values are normalized (12 AM -> 0, 12 PM -> 720)
- anything unreadable yields None instead of raising
"""

import unittest

from attendtrack.timeparse import format_minutes, parse_start_minutes


class TestParseStartMinutes(unittest.TestCase):
    def test_range_uses_start(self) -> None:
        self.assertEqual(parse_start_minutes("10:00 AM - 11:00 AM"), 600)

    def test_noon_and_midnight(self) -> None:
        self.assertEqual(parse_start_minutes("12:30 PM"), 750)
        self.assertEqual(parse_start_minutes("12:00 AM"), 0)
        self.assertEqual(parse_start_minutes("12 PM"), 720)

    def test_pm_adds_twelve_hours(self) -> None:
        self.assertEqual(parse_start_minutes("2:15 pm"), 855)
        self.assertEqual(parse_start_minutes("11:59 PM"), 1439)

    def test_time_found_inside_text(self) -> None:
        self.assertEqual(parse_start_minutes("Mon 9:00 AM"), 540)
        self.assertEqual(parse_start_minutes("(10:00 AM)"), 600)
        self.assertEqual(parse_start_minutes("Lecture at 2 PM - 3 PM"), 840)

    def test_hour_only(self) -> None:
        self.assertEqual(parse_start_minutes("10 AM"), 600)
        self.assertEqual(parse_start_minutes("10AM"), 600)

    def test_24_hour_clock(self) -> None:
        self.assertEqual(parse_start_minutes("14:30"), 870)
        self.assertEqual(parse_start_minutes("0:00"), 0)

    def test_unparseable_returns_none(self) -> None:
        self.assertIsNone(parse_start_minutes("garbage"))
        self.assertIsNone(parse_start_minutes(""))
        self.assertIsNone(parse_start_minutes("   "))
        self.assertIsNone(parse_start_minutes(None))

    def test_out_of_range_returns_none(self) -> None:
        self.assertIsNone(parse_start_minutes("25:00"))
        self.assertIsNone(parse_start_minutes("10:75"))
        self.assertIsNone(parse_start_minutes("13 PM"))
        self.assertIsNone(parse_start_minutes("100"))

    def test_format_minutes(self) -> None:
        self.assertEqual(format_minutes(605), "10:05")
        self.assertEqual(format_minutes(None), "--:--")


if __name__ == "__main__":
    unittest.main()
