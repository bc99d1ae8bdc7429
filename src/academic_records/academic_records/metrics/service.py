from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, TypeVar

from ..attendance.repository import AttendanceRepository
from ..core.exceptions import RecomputationError
from ..core.logger import get_logger
from ..marks.repository import MarksRepository
from ..students.repository import StudentRepository
from .calculator import attendance_percentage, marks_summary

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class StudentMetrics:
    student_id: int
    attendance_percentage: int
    average_marks: int
    overall_grade: str

    def to_dict(self) -> dict:
        return {
            "studentId": self.student_id,
            "attendancePercentage": self.attendance_percentage,
            "marks": self.average_marks,
            "overallGrade": self.overall_grade,
        }


@dataclass
class ReconcileReport:
    checked: int = 0
    failed: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"checked": self.checked, "reconciled": self.checked - len(self.failed), "failed": self.failed}


class MetricsService:
    """Rebuild a student's derived fields from the raw attendance and marks rows.

    Each recompute reads the current rows and overwrites the stored values, so
    running it again without intervening writes changes nothing. Write paths
    call the ``refresh_after_*`` methods, which never undo the primary write:
    a failure is logged and reported back as ``False``.
    """

    def __init__(self, students: StudentRepository, attendance: AttendanceRepository, marks: MarksRepository):
        self._students = students
        self._attendance = attendance
        self._marks = marks

    def recompute_attendance(self, student_id: int) -> int:
        def run() -> int:
            records = self._attendance.list_for_student(student_id)
            percentage = attendance_percentage(r.status for r in records)
            self._store(student_id, attendance_percentage=percentage)
            return percentage

        return self._guard(student_id, "attendance", run)

    def recompute_marks(self, student_id: int):
        def run():
            records = self._marks.list_for_students([student_id])
            summary = marks_summary(r.percentage for r in records)
            self._store(student_id, average_marks=summary.average_marks, overall_grade=summary.overall_grade)
            return summary

        return self._guard(student_id, "marks", run)

    def recompute_student(self, student_id: int) -> StudentMetrics:
        percentage = self.recompute_attendance(student_id)
        summary = self.recompute_marks(student_id)
        return StudentMetrics(
            student_id=int(student_id),
            attendance_percentage=percentage,
            average_marks=summary.average_marks,
            overall_grade=summary.overall_grade,
        )

    def refresh_after_attendance_write(self, student_id: int) -> bool:
        try:
            self.recompute_attendance(student_id)
        except RecomputationError:
            return False
        return True

    def refresh_after_marks_write(self, student_id: int) -> bool:
        try:
            self.recompute_marks(student_id)
        except RecomputationError:
            return False
        return True

    def reconcile_all(self) -> ReconcileReport:
        report = ReconcileReport()
        for student in self._students.list_all():
            report.checked += 1
            try:
                self.recompute_student(student.student_id)
            except RecomputationError:
                report.failed.append(student.student_id)
        if report.failed:
            logger.warning("reconcile finished with %d failure(s): %s", len(report.failed), report.failed)
        else:
            logger.info("reconcile finished, %d student(s) rebuilt", report.checked)
        return report

    def _store(self, student_id: int, **values) -> None:
        if not self._students.update_metrics(int(student_id), **values):
            raise RecomputationError(int(student_id), f"Student {student_id} not found while storing metrics")

    def _guard(self, student_id: int, kind: str, run: Callable[[], T]) -> T:
        try:
            return run()
        except RecomputationError:
            logger.exception("%s metrics for student %s are stale", kind, student_id)
            raise
        except Exception as e:
            logger.exception("%s metrics for student %s are stale", kind, student_id)
            raise RecomputationError(int(student_id), f"Failed to recompute {kind} metrics: {e}") from e
