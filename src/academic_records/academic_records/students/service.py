from __future__ import annotations

from typing import Any, Optional, Sequence

from ..access.policy import AccessPolicy, Action, Resource, Scope, Target
from ..attendance.repository import AttendanceRepository
from ..common.ids import parse_id, parse_optional_id
from ..common.validators import require_email, require_non_empty
from ..core.constants import DEFAULT_STUDENT_PASSWORD
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.logger import get_logger
from ..courses.repository import CourseRepository
from ..marks.repository import MarksRepository
from ..metrics.service import MetricsService, ReconcileReport, StudentMetrics
from ..users.model import AuthenticatedPrincipal, Principal
from ..users.repository import PrincipalRepository
from ..users.service import AccountFactory
from .model import Student
from .repository import StudentRepository

logger = get_logger(__name__)


class StudentDirectory:
    """Shared lookups for services that act on a student's records.

    Resolves the student, then asks the policy with the student's ownership
    facts. Missing students raise NotFoundError, denied ones AuthorizationError.
    """

    def __init__(self, students: StudentRepository, policy: AccessPolicy):
        self._students = students
        self._policy = policy

    def get(self, student_id: Any) -> Student:
        student = self._students.get_by_id(parse_id(student_id, "student ID"))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def authorize(self, caller: AuthenticatedPrincipal, student: Student, resource: Resource, action: Action) -> None:
        self._policy.require(
            caller,
            resource,
            action,
            Target(faculty_id=student.faculty_id, student_user_id=student.user_id),
        )

    def get_authorized(
        self,
        caller: AuthenticatedPrincipal,
        student_id: Any,
        resource: Resource,
        action: Action,
    ) -> Student:
        self._policy.require_role(caller, resource, action)
        student = self.get(student_id)
        self.authorize(caller, student, resource, action)
        return student

    def own_profile(self, caller: AuthenticatedPrincipal) -> Student:
        student = self._students.get_by_user_id(parse_id(caller.principal_id, "user ID"))
        if not student:
            raise NotFoundError("Student record not found")
        return student

    def visible(self, caller: AuthenticatedPrincipal, resource: Resource) -> Optional[Sequence[Student]]:
        """Students whose records the caller may list; ``None`` means all of them."""
        scope = self._policy.require_list(caller, resource)
        if scope is Scope.ALL:
            return None
        if scope is Scope.ASSIGNED:
            return self._students.list_by_faculty(parse_id(caller.principal_id, "faculty ID"))
        return [self.own_profile(caller)]


class StudentService:
    def __init__(
        self,
        students: StudentRepository,
        principals: PrincipalRepository,
        courses: CourseRepository,
        attendance: AttendanceRepository,
        marks: MarksRepository,
        metrics: MetricsService,
        policy: AccessPolicy,
        *,
        default_password: str = DEFAULT_STUDENT_PASSWORD,
    ):
        self._students = students
        self._principals = principals
        self._courses = courses
        self._attendance = attendance
        self._marks = marks
        self._metrics = metrics
        self._policy = policy
        self._directory = StudentDirectory(students, policy)
        self._accounts = AccountFactory(principals)
        self._default_password = default_password

    @property
    def directory(self) -> StudentDirectory:
        return self._directory

    def list_students(self, caller: AuthenticatedPrincipal) -> Sequence[Student]:
        visible = self._directory.visible(caller, Resource.STUDENT)
        return self._students.list_all() if visible is None else list(visible)

    def get_student(self, caller: AuthenticatedPrincipal, student_id: Any) -> Student:
        return self._directory.get_authorized(caller, student_id, Resource.STUDENT, Action.READ)

    def get_own_profile(self, caller: AuthenticatedPrincipal) -> Student:
        return self._directory.own_profile(caller)

    def create_student(
        self,
        caller: AuthenticatedPrincipal,
        *,
        course_id: Any,
        faculty_id: Any,
        user_id: Any = None,
        name: Any = None,
        email: Any = None,
        password: Any = None,
    ) -> Student:
        self._policy.require_role(caller, Resource.STUDENT, Action.CREATE)

        if course_id in (None, ""):
            raise ValidationError("Course is required")
        if faculty_id in (None, ""):
            raise ValidationError("Faculty ID is required")
        course_key = self._require_course(course_id)
        faculty_key = self._require_faculty(faculty_id)

        existing_user = parse_optional_id(user_id, "user ID")
        if existing_user is not None:
            account = self._principals.get_by_id(existing_user)
            if not account or account.role != Role.STUDENT:
                raise ValidationError("Invalid user ID. User must have student role.")
            if self._students.get_by_user_id(account.principal_id):
                raise ValidationError("This user already has a student record")
            created_account = None
        else:
            if not name or not email:
                raise ValidationError("Email and name are required when userId is not provided")
            account = self._accounts.create(
                name=name,
                email=email,
                password=password or self._default_password,
                role=Role.STUDENT,
            )
            created_account = account

        try:
            new_id = self._students.create(
                user_id=account.principal_id,
                course_id=course_key,
                faculty_id=faculty_key,
            )
        except Exception:
            # Do not leave a detached account behind.
            if created_account is not None:
                self._principals.delete_by_id(created_account.principal_id)
            raise

        logger.info("student id=%s created for user id=%s", new_id, account.principal_id)
        return self._directory.get(new_id)

    def update_student(
        self,
        caller: AuthenticatedPrincipal,
        student_id: Any,
        *,
        course_id: Any = None,
        faculty_id: Any = None,
        name: Any = None,
        email: Any = None,
    ) -> Student:
        student = self._directory.get_authorized(caller, student_id, Resource.STUDENT, Action.UPDATE)

        new_faculty = None
        if faculty_id not in (None, ""):
            new_faculty = self._require_faculty(faculty_id)
            if new_faculty != student.faculty_id and caller.role != Role.ADMIN:
                raise AuthorizationError("Forbidden: only an admin can reassign a student's faculty")

        new_course = self._require_course(course_id) if course_id not in (None, "") else None

        profile: dict = {}
        if name is not None:
            profile["name"] = require_non_empty(name, "Name")
        if email is not None:
            profile["email"] = require_email(email)
            self._accounts.ensure_email_free(profile["email"], except_id=student.user_id)

        if new_course is not None or new_faculty is not None:
            if not self._students.update_assignment(student.student_id, course_id=new_course, faculty_id=new_faculty):
                raise NotFoundError("Student not found")
        if profile:
            self._principals.update(student.user_id, **profile)

        return self._directory.get(student.student_id)

    def delete_student(self, caller: AuthenticatedPrincipal, student_id: Any) -> None:
        self._policy.require_role(caller, Resource.STUDENT, Action.DELETE)
        student = self._directory.get(student_id)

        # Each step commits on its own; a failure names the step it stopped at.
        step = "attendance"
        try:
            removed_attendance = self._attendance.delete_for_student(student.student_id)
            step = "marks"
            removed_marks = self._marks.delete_for_student(student.student_id)
            step = "profile"
            profile_deleted = self._students.delete_by_id(student.student_id)
            if profile_deleted:
                # The account is not reusable once detached from its profile.
                step = "account"
                self._principals.delete_by_id(student.user_id)
        except Exception:
            logger.exception(
                "delete student id=%s (account id=%s) failed while removing %s",
                student.student_id,
                student.user_id,
                step,
            )
            raise
        if not profile_deleted:
            raise NotFoundError("Student not found")

        logger.info(
            "student id=%s deleted with account id=%s (%d attendance, %d marks removed)",
            student.student_id,
            student.user_id,
            removed_attendance,
            removed_marks,
        )

    def recompute(self, caller: AuthenticatedPrincipal, student_id: Any) -> StudentMetrics:
        self._policy.require_role(caller, Resource.STUDENT, Action.RECONCILE)
        student = self._directory.get(student_id)
        return self._metrics.recompute_student(student.student_id)

    def reconcile_all(self, caller: AuthenticatedPrincipal) -> ReconcileReport:
        self._policy.require_role(caller, Resource.STUDENT, Action.RECONCILE)
        return self._metrics.reconcile_all()

    def describe(self, student: Student) -> dict:
        """Student dict with the linked account, course and faculty expanded."""
        data = student.to_dict()
        user = self._principals.get_by_id(student.user_id)
        faculty = self._principals.get_by_id(student.faculty_id)
        course = self._courses.get_by_id(student.course_id)
        data["user"] = _brief(user)
        data["faculty"] = _brief(faculty)
        data["course"] = {"id": course.course_id, "name": course.name, "subjects": list(course.subjects)} if course else None
        return data

    def _require_course(self, course_id: Any) -> int:
        key = parse_id(course_id, "course ID")
        if not self._courses.get_by_id(key):
            raise ValidationError("Invalid course ID. Course not found.")
        return key

    def _require_faculty(self, faculty_id: Any) -> int:
        key = parse_id(faculty_id, "faculty ID")
        faculty = self._principals.get_by_id(key)
        if not faculty or faculty.role != Role.FACULTY:
            raise ValidationError("Invalid faculty ID. User must have faculty role.")
        return key


def _brief(principal: Optional[Principal]) -> Optional[dict]:
    if not principal:
        return None
    return {"id": principal.principal_id, "name": principal.name, "email": principal.email}
