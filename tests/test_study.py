"""
Unit tests for study topics and study logs.
"""

import unittest
from datetime import date, datetime

from attendtrack.ledger import new_subject
from attendtrack.study import (
    add_topic,
    find_topic,
    follow_ups_due,
    logs_for_subject,
    new_study_log,
    remove_topic,
    set_topic_completed,
    topic_progress,
)


class TestTopics(unittest.TestCase):
    def test_add_complete_remove(self) -> None:
        sub = add_topic(new_subject("Maths"), "Limits")
        sub = add_topic(sub, "Integrals")
        self.assertEqual(topic_progress(sub), (0, 2))

        limits = find_topic(sub, "limits")
        self.assertIsNotNone(limits)
        assert limits is not None

        sub = set_topic_completed(sub, limits.id)
        self.assertEqual(topic_progress(sub), (1, 2))

        sub = remove_topic(sub, limits.id)
        self.assertEqual([t.name for t in sub.topics], ["Integrals"])

    def test_empty_topic_rejected(self) -> None:
        with self.assertRaises(ValueError):
            add_topic(new_subject("Maths"), " ")


class TestStudyLogs(unittest.TestCase):
    def test_follow_up_date_implies_follow_up(self) -> None:
        log = new_study_log("s1", "Revised chapter 2", follow_up_date=date(2024, 5, 1))
        self.assertTrue(log.needs_follow_up)

        plain = new_study_log("s1", "Read notes")
        self.assertFalse(plain.needs_follow_up)
        self.assertIsNone(plain.follow_up_date)

    def test_empty_description_rejected(self) -> None:
        with self.assertRaises(ValueError):
            new_study_log("s1", "")

    def test_logs_for_subject_newest_first(self) -> None:
        logs = [
            new_study_log("s1", "old", at=datetime(2024, 1, 1)),
            new_study_log("s2", "other", at=datetime(2024, 1, 2)),
            new_study_log("s1", "new", at=datetime(2024, 1, 3)),
        ]
        self.assertEqual([log.description for log in logs_for_subject(logs, "s1")], ["new", "old"])

    def test_follow_ups_due(self) -> None:
        logs = [
            new_study_log("s1", "later", follow_up_date=date(2024, 6, 1)),
            new_study_log("s1", "soon", follow_up_date=date(2024, 5, 1)),
            new_study_log("s1", "whenever", needs_follow_up=True),
            new_study_log("s1", "done"),
        ]
        due = follow_ups_due(logs, date(2024, 5, 15))
        self.assertEqual([log.description for log in due], ["whenever", "soon"])


if __name__ == "__main__":
    unittest.main()
