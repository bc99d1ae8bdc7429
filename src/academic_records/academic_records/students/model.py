from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import NO_GRADE


@dataclass(frozen=True)
class Student:
    """Domain entity: a student profile.

    ``overall_grade``, ``average_marks`` and ``attendance_percentage`` are
    derived; only ``metrics.service.MetricsService`` writes them.
    """

    student_id: int
    user_id: int
    course_id: int
    faculty_id: int
    overall_grade: str = NO_GRADE
    average_marks: int = 0
    attendance_percentage: int = 0
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.student_id,
            "userId": self.user_id,
            "courseId": self.course_id,
            "facultyId": self.faculty_id,
            "overallGrade": self.overall_grade,
            "marks": self.average_marks,
            "attendancePercentage": self.attendance_percentage,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
