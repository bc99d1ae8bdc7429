"""Faculty administration and the ownership cascade on deletion.

Deleting a faculty runs as two explicit phases without a transaction:

1. REASSIGN: every student of the faculty moves to ``reassign_to`` in one
   statement.
2. DELETE: the faculty principal is removed.

If phase 2 fails after phase 1, no student references the old faculty any more,
so calling delete again finds zero dependents and simply finishes the job.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from werkzeug.security import generate_password_hash

from ..access.policy import AccessPolicy, Action, Resource
from ..common.ids import parse_id, parse_optional_id
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ReassignmentRequiredError, ValidationError
from ..core.logger import get_logger
from ..students.repository import StudentRepository
from ..users.model import AuthenticatedPrincipal, Principal
from ..users.repository import PrincipalRepository
from ..users.service import AccountFactory

logger = get_logger(__name__)


@dataclass(frozen=True)
class FacultyDeletion:
    faculty_id: int
    students_reassigned: int
    reassigned_to: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "message": "Faculty deleted",
            "studentsReassigned": self.students_reassigned,
            "reassignedTo": self.reassigned_to,
        }


class FacultyService:
    def __init__(self, principals: PrincipalRepository, students: StudentRepository, policy: AccessPolicy):
        self._principals = principals
        self._students = students
        self._policy = policy
        self._accounts = AccountFactory(principals)

    def list_faculty(self, caller: AuthenticatedPrincipal) -> Sequence[Principal]:
        self._policy.require_role(caller, Resource.FACULTY, Action.READ)
        return self._principals.list_by_role(Role.FACULTY)

    def student_count(self, caller: AuthenticatedPrincipal, faculty_id: Any) -> int:
        self._policy.require_role(caller, Resource.FACULTY, Action.READ)
        faculty = self._get(faculty_id)
        return self._students.count_by_faculty(faculty.principal_id)

    def create_faculty(self, caller: AuthenticatedPrincipal, *, name: Any, email: Any, password: Any) -> Principal:
        self._policy.require_role(caller, Resource.FACULTY, Action.CREATE)
        if not name or not email or not password:
            raise ValidationError("Name, email, and password are required")
        return self._accounts.create(name=name, email=email, password=password, role=Role.FACULTY)

    def update_faculty(
        self,
        caller: AuthenticatedPrincipal,
        faculty_id: Any,
        *,
        name: Any = None,
        email: Any = None,
        password: Any = None,
    ) -> Principal:
        self._policy.require_role(caller, Resource.FACULTY, Action.UPDATE)
        faculty = self._get(faculty_id)

        changes: dict = {}
        if name not in (None, ""):
            changes["name"] = require_non_empty(name, "Name")
        if email not in (None, ""):
            changes["email"] = require_email(email)
            self._accounts.ensure_email_free(changes["email"], except_id=faculty.principal_id)
        if password not in (None, ""):
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
            changes["password_hash"] = generate_password_hash(password)

        if changes and not self._principals.update(faculty.principal_id, **changes):
            raise NotFoundError("Faculty not found")
        return self._get(faculty.principal_id)

    def delete_faculty(
        self,
        caller: AuthenticatedPrincipal,
        faculty_id: Any,
        *,
        reassign_to: Any = None,
    ) -> FacultyDeletion:
        self._policy.require_role(caller, Resource.FACULTY, Action.DELETE)
        faculty = self._get(faculty_id)

        dependents = self._students.count_by_faculty(faculty.principal_id)
        logger.info("delete faculty id=%s: %d dependent student(s)", faculty.principal_id, dependents)

        if dependents == 0:
            self._delete_principal(faculty.principal_id)
            return FacultyDeletion(faculty_id=faculty.principal_id, students_reassigned=0)

        target_id = parse_optional_id(reassign_to, "reassignment faculty ID")
        if target_id is None:
            logger.info("delete faculty id=%s rejected: reassignment required", faculty.principal_id)
            raise ReassignmentRequiredError(dependents)
        if target_id == faculty.principal_id:
            raise ValidationError("Cannot reassign students to the faculty being deleted")
        target = self._principals.get_by_id(target_id)
        if not target or target.role != Role.FACULTY:
            raise ValidationError("Target faculty for reassignment not found")

        moved = self._students.reassign_faculty(from_faculty_id=faculty.principal_id, to_faculty_id=target_id)
        logger.info(
            "delete faculty id=%s: reassigned %d student(s) to faculty id=%s",
            faculty.principal_id,
            moved,
            target_id,
        )

        self._delete_principal(faculty.principal_id)
        return FacultyDeletion(faculty_id=faculty.principal_id, students_reassigned=moved, reassigned_to=target_id)

    def _delete_principal(self, faculty_id: int) -> None:
        try:
            deleted = self._principals.delete_by_id(faculty_id)
        except Exception:
            logger.exception("delete faculty id=%s: removing the principal failed; retry the delete", faculty_id)
            raise
        if not deleted:
            raise NotFoundError("Faculty not found")
        logger.info("delete faculty id=%s: principal removed", faculty_id)

    def _get(self, faculty_id: Any) -> Principal:
        faculty = self._principals.get_by_id(parse_id(faculty_id, "faculty ID"))
        if not faculty or faculty.role != Role.FACULTY:
            raise NotFoundError("Faculty not found")
        return faculty
