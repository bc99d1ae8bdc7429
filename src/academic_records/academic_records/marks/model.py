from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ExamType


@dataclass(frozen=True)
class MarksRecord:
    """Domain entity: one assessment result.

    ``percentage`` and ``grade`` are always computed from ``marks_obtained`` and
    ``max_marks`` by the service before the record is stored.
    """

    mark_id: int
    student_id: int
    subject: str
    exam_type: ExamType
    max_marks: float
    marks_obtained: float
    percentage: int
    grade: str
    exam_date: date
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.mark_id,
            "studentId": self.student_id,
            "subject": self.subject,
            "examType": self.exam_type.value,
            "maxMarks": self.max_marks,
            "marksObtained": self.marks_obtained,
            "percentage": self.percentage,
            "grade": self.grade,
            "examDate": self.exam_date.strftime("%Y-%m-%d"),
            "createdBy": self.created_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class MarksEntry:
    """Validated values ready to be written (new record or full replacement)."""

    subject: str
    exam_type: ExamType
    max_marks: float
    marks_obtained: float
    percentage: int
    grade: str
    exam_date: date
