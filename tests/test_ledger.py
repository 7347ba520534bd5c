"""
Unit tests for the attendance ledger.

Ledger contract:
- present -> attended and total +1, absent -> total +1, cancelled -> no change
- every event is appended to the history, which is never edited
- correct_counts overwrites counters only and coerces bad input to 0
- the input subject is never modified
"""

import unittest
from datetime import datetime

from attendtrack.ledger import (
    add_slot,
    coerce_count,
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
from attendtrack.model import ABSENT, CANCELLED, PRESENT, STATUSES


class TestRecordEvent(unittest.TestCase):
    def test_present_increments_both(self) -> None:
        sub = new_subject("Maths")
        at = datetime(2024, 1, 1, 10, 0)
        updated = record_event(sub, PRESENT, at=at)

        self.assertEqual(updated.total_lectures, 1)
        self.assertEqual(updated.attended_lectures, 1)
        self.assertEqual(len(updated.history), 1)
        self.assertEqual(updated.history[0].status, PRESENT)
        self.assertEqual(updated.history[0].timestamp, at)

    def test_absent_increments_total_only(self) -> None:
        updated = record_event(new_subject("Maths"), ABSENT)
        self.assertEqual(updated.total_lectures, 1)
        self.assertEqual(updated.attended_lectures, 0)

    def test_cancelled_is_logged_but_not_counted(self) -> None:
        sub = new_subject("Maths", total=4, attended=3)
        updated = record_event(sub, CANCELLED)
        self.assertEqual(updated.total_lectures, 4)
        self.assertEqual(updated.attended_lectures, 3)
        self.assertEqual(len(updated.history), 1)

    def test_original_subject_unchanged(self) -> None:
        sub = new_subject("Maths")
        record_event(sub, PRESENT)
        self.assertEqual(sub.total_lectures, 0)
        self.assertEqual(sub.history, ())

    def test_history_is_append_only(self) -> None:
        sub = new_subject("Maths")
        first = record_event(sub, PRESENT, at=datetime(2024, 1, 1, 9, 0))
        second = record_event(first, ABSENT, at=datetime(2024, 1, 2, 9, 0))
        self.assertEqual(second.history[0], first.history[0])
        self.assertEqual([r.status for r in second.history], [PRESENT, ABSENT])
        self.assertEqual([r.status for r in history_newest_first(second)], [ABSENT, PRESENT])
        self.assertNotEqual(second.history[0].id, second.history[1].id)

    def test_attended_never_exceeds_total(self) -> None:
        sub = new_subject("Maths", total=2, attended=1)
        for status in [PRESENT, ABSENT, CANCELLED, PRESENT, PRESENT, ABSENT, CANCELLED]:
            sub = record_event(sub, status)
            self.assertLessEqual(sub.attended_lectures, sub.total_lectures)
        self.assertEqual(count_by_status(sub), {PRESENT: 3, ABSENT: 2, CANCELLED: 2})

    def test_unknown_status_raises(self) -> None:
        with self.assertRaises(ValueError):
            record_event(new_subject("Maths"), "late")

    def test_statuses(self) -> None:
        self.assertEqual(STATUSES, ("present", "absent", "cancelled"))


class TestCorrectCounts(unittest.TestCase):
    def test_overwrites_counters_keeps_history(self) -> None:
        sub = record_event(new_subject("Maths"), PRESENT)
        fixed = correct_counts(sub, 20, 15)
        self.assertEqual((fixed.total_lectures, fixed.attended_lectures), (20, 15))
        self.assertEqual(fixed.history, sub.history)

    def test_idempotent(self) -> None:
        sub = new_subject("Maths")
        once = correct_counts(sub, "12", "9")
        twice = correct_counts(once, "12", "9")
        self.assertEqual(once, twice)

    def test_bad_input_becomes_zero(self) -> None:
        fixed = correct_counts(new_subject("Maths"), "abc", -3)
        self.assertEqual((fixed.total_lectures, fixed.attended_lectures), (0, 0))

    def test_attended_above_total_is_allowed(self) -> None:
        fixed = correct_counts(new_subject("Maths"), 2, 3)
        self.assertEqual(fixed.attended_lectures, 3)

    def test_coerce_count(self) -> None:
        self.assertEqual(coerce_count("7"), 7)
        self.assertEqual(coerce_count(4.9), 4)
        self.assertEqual(coerce_count("4.5"), 4)
        self.assertEqual(coerce_count(""), 0)
        self.assertEqual(coerce_count(None), 0)
        self.assertEqual(coerce_count("nan"), 0)


class TestSubjects(unittest.TestCase):
    def test_new_subject_requires_name(self) -> None:
        with self.assertRaises(ValueError):
            new_subject("   ")

    def test_new_subject_starts_empty(self) -> None:
        sub = new_subject("  Physics ")
        self.assertEqual(sub.name, "Physics")
        self.assertEqual((sub.total_lectures, sub.attended_lectures), (0, 0))
        self.assertEqual((sub.schedule, sub.history, sub.topics), ((), (), ()))

    def test_ids_are_unique(self) -> None:
        ids = {new_subject("X").id for _ in range(200)}
        self.assertEqual(len(ids), 200)

    def test_slots(self) -> None:
        sub = add_slot(new_subject("Maths"), "Monday", "10:00 AM")
        sub = add_slot(sub, "Monday", "10:00 AM")
        self.assertEqual(len(sub.schedule), 2)

        sub = remove_slot(sub, 0)
        self.assertEqual(len(sub.schedule), 1)
        with self.assertRaises(IndexError):
            remove_slot(sub, 5)

    def test_list_helpers(self) -> None:
        maths = new_subject("Maths")
        physics = new_subject("Physics")
        subjects = (maths, physics)

        self.assertIs(find_subject(subjects, "maths"), maths)
        self.assertIs(find_subject(subjects, physics.id), physics)
        self.assertIsNone(find_subject(subjects, "Chemistry"))

        updated = record_event(maths, PRESENT)
        replaced = replace_subject(subjects, updated)
        self.assertEqual(replaced[0].total_lectures, 1)
        self.assertEqual(replaced[1], physics)

        self.assertEqual(remove_subject(subjects, maths.id), (physics,))


if __name__ == "__main__":
    unittest.main()
