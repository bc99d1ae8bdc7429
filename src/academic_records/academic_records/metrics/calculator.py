"""Pure functions behind the derived student fields.

Nothing here touches storage: given the raw attendance and marks records of one
student, the same inputs always give the same outputs, which is what makes the
recomputation idempotent and safe to re-run for reconciliation.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from ..core.constants import NO_GRADE
from ..core.enums import AttendanceStatus

# Overall (per-student) ladder, applied to the rounded average.
OVERALL_GRADE_LADDER: tuple[tuple[int, str], ...] = (
    (90, "A+"),
    (85, "A"),
    (80, "A-"),
    (75, "B+"),
    (70, "B"),
    (65, "B-"),
    (60, "C+"),
    (55, "C"),
    (50, "C-"),
    (40, "D"),
)

# Per-record ladder used when a marks entry is saved. It has no "D" band:
# anything under 50 is an F. Keep it separate from the overall ladder.
RECORD_GRADE_LADDER: tuple[tuple[int, str], ...] = (
    (90, "A+"),
    (85, "A"),
    (80, "A-"),
    (75, "B+"),
    (70, "B"),
    (65, "B-"),
    (60, "C+"),
    (55, "C"),
    (50, "C-"),
)

FAIL_GRADE = "F"


def round_half_up(value: float) -> int:
    """Round .5 away from zero (Python's round() would give 92 for 92.5)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _grade(value: float, ladder: Sequence[tuple[int, str]]) -> str:
    for threshold, letter in ladder:
        if value >= threshold:
            return letter
    return FAIL_GRADE


def record_percentage(marks_obtained: float, max_marks: float) -> int:
    if max_marks <= 0:
        raise ValueError("max_marks must be positive")
    return round_half_up(float(marks_obtained) / float(max_marks) * 100)


def record_grade(percentage: float) -> str:
    return _grade(percentage, RECORD_GRADE_LADDER)


def overall_grade(average_marks: float) -> str:
    return _grade(average_marks, OVERALL_GRADE_LADDER)


def attendance_percentage(statuses: Iterable[AttendanceStatus]) -> int:
    statuses = list(statuses)
    if not statuses:
        return 0
    attended = sum(1 for s in statuses if AttendanceStatus(s).counts_as_attended)
    return round_half_up(100 * attended / len(statuses))


@dataclass(frozen=True)
class MarksSummary:
    average_marks: int
    overall_grade: str


def marks_summary(percentages: Iterable[float]) -> MarksSummary:
    values = [float(p) for p in percentages]
    if not values:
        return MarksSummary(average_marks=0, overall_grade=NO_GRADE)
    average = round_half_up(sum(values) / len(values))
    return MarksSummary(average_marks=average, overall_grade=overall_grade(average))
