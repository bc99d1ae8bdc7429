from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..access.policy import AccessPolicy, Action, Resource, Target
from ..common.datetime_utils import canonical_day
from ..common.ids import parse_id
from ..common.validators import require_enum, require_non_empty, require_number
from ..core.constants import MAX_MARKS_LIMIT
from ..core.enums import ExamType, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logger import get_logger
from ..courses.repository import CourseRepository
from ..metrics.calculator import record_grade, record_percentage
from ..metrics.service import MetricsService
from ..students.model import Student
from ..students.service import StudentDirectory
from ..users.model import AuthenticatedPrincipal
from .model import MarksEntry, MarksRecord
from .repository import MarksRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class MarksWrite:
    record: Optional[MarksRecord]
    metrics_synced: bool

    def to_dict(self) -> dict:
        data = self.record.to_dict() if self.record else {}
        data["metricsSynced"] = self.metrics_synced
        return data


def normalize_exam_type(value: Any) -> ExamType:
    """'Mid-term' and 'MIDTERM' both mean ExamType.MIDTERM."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Exam type is required")
    return require_enum(value.strip().lower().replace("-", ""), ExamType, "exam type")


def build_entry(
    *,
    subject: Any,
    exam_type: Any,
    max_marks: Any,
    marks_obtained: Any,
    exam_date: Any,
) -> MarksEntry:
    """Validate raw values and attach the derived percentage and grade."""
    subject = require_non_empty(subject, "Subject")
    kind = exam_type if isinstance(exam_type, ExamType) else normalize_exam_type(exam_type)
    max_value = require_number(max_marks, "Max marks")
    obtained = require_number(marks_obtained, "Marks obtained")

    if max_value <= 0:
        raise ValidationError("Max marks must be greater than 0")
    if max_value > MAX_MARKS_LIMIT:
        raise ValidationError(f"Max marks cannot exceed {MAX_MARKS_LIMIT}")
    if obtained < 0:
        raise ValidationError("Marks obtained cannot be negative")
    if obtained > max_value:
        raise ValidationError("Marks obtained cannot exceed max marks")

    percentage = record_percentage(obtained, max_value)
    return MarksEntry(
        subject=subject,
        exam_type=kind,
        max_marks=max_value,
        marks_obtained=obtained,
        percentage=percentage,
        grade=record_grade(percentage),
        exam_date=canonical_day(exam_date, "exam date"),
    )


class MarksService:
    def __init__(
        self,
        marks: MarksRepository,
        directory: StudentDirectory,
        courses: CourseRepository,
        metrics: MetricsService,
        policy: AccessPolicy,
    ):
        self._marks = marks
        self._directory = directory
        self._courses = courses
        self._metrics = metrics
        self._policy = policy

    def list_marks(self, caller: AuthenticatedPrincipal) -> Sequence[MarksRecord]:
        visible = self._directory.visible(caller, Resource.MARKS)
        if visible is None:
            return self._marks.list_all()
        return self._marks.list_for_students(
            [s.student_id for s in visible],
            created_by=self._author_filter(caller),
        )

    def list_for_student(
        self,
        caller: AuthenticatedPrincipal,
        student_id: Any,
        *,
        subject: Optional[str] = None,
        exam_type: Optional[str] = None,
    ) -> Sequence[MarksRecord]:
        student = self._directory.get_authorized(caller, student_id, Resource.MARKS, Action.READ)
        return self._marks.list_for_students(
            [student.student_id],
            created_by=self._author_filter(caller),
            subject=subject.strip() if subject and subject.strip() else None,
            exam_type=normalize_exam_type(exam_type) if exam_type else None,
        )

    def add(
        self,
        caller: AuthenticatedPrincipal,
        *,
        student_id: Any,
        subject: Any,
        exam_type: Any,
        max_marks: Any,
        marks_obtained: Any,
        exam_date: Any,
    ) -> MarksWrite:
        self._policy.require_role(caller, Resource.MARKS, Action.CREATE)
        if any(v in (None, "") for v in (student_id, subject, exam_type, max_marks, marks_obtained, exam_date)):
            raise ValidationError(
                "Student ID, subject, exam type, max marks, marks obtained, and exam date are required"
            )
        entry = build_entry(
            subject=subject,
            exam_type=exam_type,
            max_marks=max_marks,
            marks_obtained=marks_obtained,
            exam_date=exam_date,
        )

        student = self._directory.get(student_id)
        self._directory.authorize(caller, student, Resource.MARKS, Action.CREATE)
        self._warn_unknown_subject(student, entry.subject)

        mark_id = self._marks.create(
            student_id=student.student_id,
            created_by=parse_id(caller.principal_id, "faculty ID"),
            entry=entry,
        )
        synced = self._metrics.refresh_after_marks_write(student.student_id)
        return MarksWrite(record=self._get(mark_id), metrics_synced=synced)

    def update(
        self,
        caller: AuthenticatedPrincipal,
        mark_id: Any,
        *,
        subject: Any = None,
        exam_type: Any = None,
        max_marks: Any = None,
        marks_obtained: Any = None,
        exam_date: Any = None,
    ) -> MarksWrite:
        self._policy.require_role(caller, Resource.MARKS, Action.UPDATE)
        record = self._get(mark_id)
        self._policy.require(caller, Resource.MARKS, Action.UPDATE, Target(author_id=record.created_by))

        entry = build_entry(
            subject=record.subject if subject in (None, "") else subject,
            exam_type=record.exam_type if exam_type in (None, "") else exam_type,
            max_marks=record.max_marks if max_marks in (None, "") else max_marks,
            marks_obtained=record.marks_obtained if marks_obtained in (None, "") else marks_obtained,
            exam_date=record.exam_date if exam_date in (None, "") else exam_date,
        )
        if not self._marks.update(record.mark_id, entry=entry):
            raise NotFoundError("Marks record not found")

        synced = self._metrics.refresh_after_marks_write(record.student_id)
        return MarksWrite(record=self._get(record.mark_id), metrics_synced=synced)

    def delete(self, caller: AuthenticatedPrincipal, mark_id: Any) -> MarksWrite:
        self._policy.require_role(caller, Resource.MARKS, Action.DELETE)
        record = self._get(mark_id)
        self._policy.require(caller, Resource.MARKS, Action.DELETE, Target(author_id=record.created_by))

        if not self._marks.delete_by_id(record.mark_id):
            raise NotFoundError("Marks record not found")

        synced = self._metrics.refresh_after_marks_write(record.student_id)
        return MarksWrite(record=None, metrics_synced=synced)

    @staticmethod
    def _author_filter(caller: AuthenticatedPrincipal) -> Optional[int]:
        if caller.role == Role.FACULTY:
            return parse_id(caller.principal_id, "faculty ID")
        return None

    def _warn_unknown_subject(self, student: Student, subject: str) -> None:
        course = self._courses.get_by_id(student.course_id)
        if course and subject not in course.subjects:
            logger.warning(
                "subject %r is not part of course id=%s for student id=%s",
                subject,
                course.course_id,
                student.student_id,
            )

    def _get(self, mark_id: Any) -> MarksRecord:
        record = self._marks.get_by_id(parse_id(mark_id, "marks ID"))
        if not record:
            raise NotFoundError("Marks record not found")
        return record
