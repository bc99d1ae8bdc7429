from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance on one canonical (UTC) day."""

    attendance_id: int
    student_id: int
    faculty_id: int
    attendance_date: date
    status: AttendanceStatus
    remarks: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "studentId": self.student_id,
            "facultyId": self.faculty_id,
            "date": self.attendance_date.strftime("%Y-%m-%d"),
            "status": self.status.value,
            "remarks": self.remarks,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
