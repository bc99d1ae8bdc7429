from __future__ import annotations

from typing import Any, Optional, Sequence

from ..access.policy import AccessPolicy, Action, Resource
from ..common.ids import parse_id
from ..common.validators import require_non_empty
from ..core.exceptions import DuplicateError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from ..users.model import AuthenticatedPrincipal
from .model import Course
from .repository import CourseRepository


def _clean_subjects(subjects: Any) -> list[str]:
    if not isinstance(subjects, (list, tuple)):
        raise ValidationError("Course name and at least one subject are required")
    cleaned = [s.strip() for s in subjects if isinstance(s, str) and s.strip()]
    if not cleaned:
        raise ValidationError("Course name and at least one subject are required")
    # Order is irrelevant, duplicates are noise.
    return list(dict.fromkeys(cleaned))


class CourseService:
    def __init__(self, courses: CourseRepository, students: StudentRepository, policy: AccessPolicy):
        self._courses = courses
        self._students = students
        self._policy = policy

    def list_courses(self, caller: AuthenticatedPrincipal) -> Sequence[Course]:
        self._policy.require_role(caller, Resource.COURSE, Action.READ)
        return self._courses.list_all()

    def get_course(self, caller: AuthenticatedPrincipal, course_id: Any) -> Course:
        self._policy.require_role(caller, Resource.COURSE, Action.READ)
        return self._get(course_id)

    def create_course(self, caller: AuthenticatedPrincipal, *, name: Any, subjects: Any) -> Course:
        self._policy.require_role(caller, Resource.COURSE, Action.CREATE)
        name = require_non_empty(name, "Course name")
        cleaned = _clean_subjects(subjects)

        if self._courses.get_by_name(name):
            raise DuplicateError("Course with this name already exists")

        course_id = self._courses.create(name=name, subjects=cleaned)
        return self._get(course_id)

    def update_course(
        self,
        caller: AuthenticatedPrincipal,
        course_id: Any,
        *,
        name: Optional[Any] = None,
        subjects: Optional[Any] = None,
    ) -> Course:
        self._policy.require_role(caller, Resource.COURSE, Action.UPDATE)
        course = self._get(course_id)

        new_name = course.name
        if name is not None:
            new_name = require_non_empty(name, "Course name")
            if new_name != course.name:
                clash = self._courses.get_by_name(new_name)
                if clash and clash.course_id != course.course_id:
                    raise DuplicateError("Course with this name already exists")

        new_subjects = list(course.subjects) if subjects is None else _clean_subjects(subjects)

        if not self._courses.update(course.course_id, name=new_name, subjects=new_subjects):
            raise NotFoundError("Course not found")
        return self._get(course.course_id)

    def delete_course(self, caller: AuthenticatedPrincipal, course_id: Any) -> None:
        self._policy.require_role(caller, Resource.COURSE, Action.DELETE)
        course = self._get(course_id)

        in_use = self._students.count_by_course(course.course_id)
        if in_use:
            raise ValidationError(f"Course is assigned to {in_use} student(s) and cannot be deleted")

        if not self._courses.delete_by_id(course.course_id):
            raise NotFoundError("Course not found")

    def _get(self, course_id: Any) -> Course:
        course = self._courses.get_by_id(parse_id(course_id, "course ID"))
        if not course:
            raise NotFoundError("Course not found")
        return course
