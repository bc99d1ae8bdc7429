from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_all(self) -> Sequence[AttendanceRecord]:
        """Newest day first."""
        raise NotImplementedError

    def list_for_students(self, student_ids: Sequence[int]) -> Sequence[AttendanceRecord]:
        """Newest day first; empty input gives an empty result."""
        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        student_id: int,
        faculty_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        remarks: str = "",
    ) -> int:
        """Raises DuplicateError when (student, day) already has a record."""
        raise NotImplementedError

    def update(self, attendance_id: int, *, status: AttendanceStatus, remarks: str) -> bool:
        raise NotImplementedError

    def delete_by_id(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def delete_for_student(self, student_id: int) -> int:
        raise NotImplementedError
