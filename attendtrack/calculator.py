"""
Attendance math.

Pure functions over a subject's counters and the user's target percentage.

    percentage = round(100 * attended / total)        (100 if total == 0)
    bunkable   = floor((100*attended - target*total) / target)
    needed     = ceil((target*total - 100*attended) / (100 - target))

All arithmetic is done on integers so results are exact.
"""

from __future__ import annotations

from typing import Iterable, Optional

from attendtrack.model import StatusMessage, Subject


TIER_OK = "ok"
TIER_WARN = "warn"
TIER_DANGER = "danger"


def _ratio_percent(attended: int, total: int) -> int:
    if total == 0:
        return 100
    # round half up, like a calculator would
    return (200 * attended + total) // (2 * total)


def _check_target(target: int) -> None:
    if not (0 <= target <= 100):
        raise ValueError(f"Target percentage must be between 0 and 100: {target!r}")


def percentage(subject: Subject) -> int:
    """
    Current attendance percentage of one subject.

    A subject without any recorded lecture counts as 100%.
    """
    return _ratio_percent(subject.attended_lectures, subject.total_lectures)


def overall_percentage(subjects: Iterable[Subject]) -> int:
    """
    Aggregate percentage over the summed counters (not an average of percentages).
    """
    total = 0
    attended = 0
    for s in subjects:
        total += s.total_lectures
        attended += s.attended_lectures
    return _ratio_percent(attended, total)


def bunkable_classes(attended: int, total: int, target: int) -> Optional[int]:
    """
    How many further classes can be missed while staying at or above target.

    None means unbounded (target 0). The result can be <= 0.
    """
    _check_target(target)
    if target == 0:
        return None
    return (100 * attended - target * total) // target


def classes_needed(attended: int, total: int, target: int) -> Optional[int]:
    """
    How many consecutive classes must be attended to climb back to target.

    None means the target can never be reached again (target 100 with at
    least one missed class).
    """
    _check_target(target)
    if target == 100:
        return None
    deficit = target * total - 100 * attended
    # ceil for positive integers without floats
    return -(-deficit // (100 - target))


def status_message(subject: Subject, target: int) -> StatusMessage:
    """
    Classify a subject against the target.

    - OK:     above target, can skip `count` classes
    - WARN:   on target, no class can be skipped
    - DANGER: below target, must attend `count` classes
    """
    _check_target(target)

    if percentage(subject) >= target:
        bunkable = bunkable_classes(subject.attended_lectures, subject.total_lectures, target)
        if bunkable is None:
            return StatusMessage(TIER_OK, "Can skip any class", None)
        if bunkable <= 0:
            return StatusMessage(TIER_WARN, "On track. Don't miss!", 0)
        return StatusMessage(TIER_OK, f"Can bunk {bunkable} classes", bunkable)

    needed = classes_needed(subject.attended_lectures, subject.total_lectures, target)
    if needed is None:
        return StatusMessage(TIER_DANGER, "Target unreachable. Attend every class!", None)
    return StatusMessage(TIER_DANGER, f"Attend next {needed} classes!", needed)
