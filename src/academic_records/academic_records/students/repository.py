from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[Student]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def list_by_faculty(self, faculty_id: int) -> Sequence[Student]:
        raise NotImplementedError

    def count_by_faculty(self, faculty_id: int) -> int:
        raise NotImplementedError

    def count_by_course(self, course_id: int) -> int:
        raise NotImplementedError

    def create(self, *, user_id: int, course_id: int, faculty_id: int) -> int:
        """New profiles start with the zero/"N/A" metric defaults."""
        raise NotImplementedError

    def update_assignment(
        self,
        student_id: int,
        *,
        course_id: Optional[int] = None,
        faculty_id: Optional[int] = None,
    ) -> bool:
        raise NotImplementedError

    def update_metrics(
        self,
        student_id: int,
        *,
        attendance_percentage: Optional[int] = None,
        average_marks: Optional[int] = None,
        overall_grade: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def reassign_faculty(self, *, from_faculty_id: int, to_faculty_id: int) -> int:
        """Move every student of one faculty to another; returns rows changed."""
        raise NotImplementedError

    def delete_by_id(self, student_id: int) -> bool:
        raise NotImplementedError
