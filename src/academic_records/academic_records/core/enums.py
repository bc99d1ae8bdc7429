from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role of a principal; fixed once the account exists."""

    ADMIN = "admin"
    FACULTY = "faculty"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"

    @property
    def counts_as_attended(self) -> bool:
        return self in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


class ExamType(str, Enum):
    ASSIGNMENT = "assignment"
    QUIZ = "quiz"
    MIDTERM = "midterm"
    FINAL = "final"
    PROJECT = "project"
