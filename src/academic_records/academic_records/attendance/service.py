from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from ..access.policy import AccessPolicy, Action, Resource
from ..common.datetime_utils import canonical_day
from ..common.ids import parse_id
from ..common.validators import require_enum
from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateError, NotFoundError, ValidationError
from ..core.logger import get_logger
from ..metrics.service import MetricsService
from ..students.model import Student
from ..students.service import StudentDirectory
from ..users.model import AuthenticatedPrincipal
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class AttendanceWrite:
    record: Optional[AttendanceRecord]
    metrics_synced: bool

    def to_dict(self) -> dict:
        data = self.record.to_dict() if self.record else {}
        data["metricsSynced"] = self.metrics_synced
        return data


@dataclass
class BulkAttendanceResult:
    created: list[AttendanceRecord] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    metrics_synced: bool = True

    def to_dict(self) -> dict:
        return {
            "message": f"Marked attendance for {len(self.created)} student(s)",
            "records": [r.to_dict() for r in self.created],
            "skipped": self.skipped,
            "metricsSynced": self.metrics_synced,
        }


def _clean_remarks(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("Remarks must be text")
    return value.strip()


class AttendanceService:
    """Mark, correct and remove attendance; keep the student's percentage current."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        directory: StudentDirectory,
        metrics: MetricsService,
        policy: AccessPolicy,
    ):
        self._attendance = attendance
        self._directory = directory
        self._metrics = metrics
        self._policy = policy

    def list_attendance(self, caller: AuthenticatedPrincipal) -> Sequence[AttendanceRecord]:
        visible = self._directory.visible(caller, Resource.ATTENDANCE)
        if visible is None:
            return self._attendance.list_all()
        return self._attendance.list_for_students([s.student_id for s in visible])

    def list_for_student(self, caller: AuthenticatedPrincipal, student_id: Any) -> Sequence[AttendanceRecord]:
        student = self._directory.get_authorized(caller, student_id, Resource.ATTENDANCE, Action.READ)
        return self._attendance.list_for_student(student.student_id)

    def mark(
        self,
        caller: AuthenticatedPrincipal,
        *,
        student_id: Any,
        attendance_date: Any,
        status: Any,
        remarks: Any = None,
    ) -> AttendanceWrite:
        self._policy.require_role(caller, Resource.ATTENDANCE, Action.CREATE)
        if student_id in (None, "") or attendance_date in (None, "") or status in (None, ""):
            raise ValidationError("Student ID, date, and status are required")

        day = canonical_day(attendance_date)
        status = require_enum(status, AttendanceStatus, "status")
        remarks = _clean_remarks(remarks)

        student = self._directory.get(student_id)
        self._directory.authorize(caller, student, Resource.ATTENDANCE, Action.CREATE)

        if self._attendance.get_for_student_and_date(student.student_id, day):
            raise DuplicateError("Attendance already marked for this date")

        record = self._create(caller, student, day, status, remarks)
        synced = self._metrics.refresh_after_attendance_write(student.student_id)
        return AttendanceWrite(record=record, metrics_synced=synced)

    def mark_bulk(
        self,
        caller: AuthenticatedPrincipal,
        *,
        attendance_date: Any,
        entries: Any,
    ) -> BulkAttendanceResult:
        self._policy.require_role(caller, Resource.ATTENDANCE, Action.CREATE)
        if attendance_date in (None, "") or not isinstance(entries, list) or not entries:
            raise ValidationError("Date and attendance records are required")

        day = canonical_day(attendance_date)

        # Validate and authorize every row before the first write.
        rows: list[tuple[Student, AttendanceStatus, str]] = []
        seen: set[int] = set()
        for entry in entries:
            if not isinstance(entry, dict):
                raise ValidationError("Each attendance record must be an object")
            student = self._directory.get(entry.get("studentId"))
            self._directory.authorize(caller, student, Resource.ATTENDANCE, Action.CREATE)
            status = require_enum(entry.get("status"), AttendanceStatus, "status")
            if student.student_id in seen:
                raise ValidationError(f"Student {student.student_id} appears more than once")
            seen.add(student.student_id)
            rows.append((student, status, _clean_remarks(entry.get("remarks"))))

        result = BulkAttendanceResult()
        for student, status, remarks in rows:
            if self._attendance.get_for_student_and_date(student.student_id, day):
                result.skipped.append(student.student_id)
                continue
            try:
                record = self._create(caller, student, day, status, remarks)
            except DuplicateError:
                # Lost a race with another writer for the same day.
                result.skipped.append(student.student_id)
                continue
            result.created.append(record)
            if not self._metrics.refresh_after_attendance_write(student.student_id):
                result.metrics_synced = False

        logger.info(
            "bulk attendance for %s: %d created, %d skipped",
            day.isoformat(),
            len(result.created),
            len(result.skipped),
        )
        return result

    def update(
        self,
        caller: AuthenticatedPrincipal,
        attendance_id: Any,
        *,
        status: Any = None,
        remarks: Any = None,
    ) -> AttendanceWrite:
        self._policy.require_role(caller, Resource.ATTENDANCE, Action.UPDATE)
        record = self._get(attendance_id)
        student = self._directory.get(record.student_id)
        self._directory.authorize(caller, student, Resource.ATTENDANCE, Action.UPDATE)

        new_status = record.status if status in (None, "") else require_enum(status, AttendanceStatus, "status")
        new_remarks = record.remarks if remarks is None else _clean_remarks(remarks)

        if not self._attendance.update(record.attendance_id, status=new_status, remarks=new_remarks):
            raise NotFoundError("Attendance record not found")

        synced = self._metrics.refresh_after_attendance_write(student.student_id)
        return AttendanceWrite(record=self._get(record.attendance_id), metrics_synced=synced)

    def delete(self, caller: AuthenticatedPrincipal, attendance_id: Any) -> AttendanceWrite:
        self._policy.require_role(caller, Resource.ATTENDANCE, Action.DELETE)
        record = self._get(attendance_id)
        student = self._directory.get(record.student_id)
        self._directory.authorize(caller, student, Resource.ATTENDANCE, Action.DELETE)

        if not self._attendance.delete_by_id(record.attendance_id):
            raise NotFoundError("Attendance record not found")

        synced = self._metrics.refresh_after_attendance_write(student.student_id)
        return AttendanceWrite(record=None, metrics_synced=synced)

    def _create(
        self,
        caller: AuthenticatedPrincipal,
        student: Student,
        day,
        status: AttendanceStatus,
        remarks: str,
    ) -> AttendanceRecord:
        attendance_id = self._attendance.create(
            student_id=student.student_id,
            faculty_id=parse_id(caller.principal_id, "faculty ID"),
            attendance_date=day,
            status=status,
            remarks=remarks,
        )
        return self._get(attendance_id)

    def _get(self, attendance_id: Any) -> AttendanceRecord:
        record = self._attendance.get_by_id(parse_id(attendance_id, "attendance ID"))
        if not record:
            raise NotFoundError("Attendance record not found")
        return record
