from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional, Sequence

import pytest
from werkzeug.security import generate_password_hash

from src.academic_records.academic_records.attendance.model import AttendanceRecord
from src.academic_records.academic_records.container import Container, wire
from src.academic_records.academic_records.core.enums import AttendanceStatus, ExamType, Role
from src.academic_records.academic_records.core.exceptions import DuplicateError
from src.academic_records.academic_records.courses.model import Course
from src.academic_records.academic_records.main import create_app
from src.academic_records.academic_records.marks.model import MarksEntry, MarksRecord
from src.academic_records.academic_records.students.model import Student
from src.academic_records.academic_records.users.model import AuthenticatedPrincipal, Principal
from src.academic_records.academic_records.users.tokens import TokenService

NOW = datetime(2026, 3, 2, 9, 0, 0)


class InMemoryPrincipals:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, Principal] = {}
        self.fail_next_delete = False

    def get_by_id(self, principal_id: int) -> Optional[Principal]:
        return self.rows.get(int(principal_id))

    def get_by_email(self, email: str) -> Optional[Principal]:
        return next((p for p in self.rows.values() if p.email == email), None)

    def list_by_role(self, role: Role) -> Sequence[Principal]:
        return sorted((p for p in self.rows.values() if p.role == role), key=lambda p: p.name)

    def create(self, *, name: str, email: str, password_hash: str, role: Role) -> int:
        pid = self._next_id
        self._next_id += 1
        self.rows[pid] = Principal(pid, name, email, password_hash, role, NOW)
        return pid

    def update(self, principal_id: int, *, name=None, email=None, password_hash=None) -> bool:
        current = self.rows.get(int(principal_id))
        if not current:
            return False
        changes = {k: v for k, v in (("name", name), ("email", email), ("password_hash", password_hash)) if v is not None}
        self.rows[current.principal_id] = replace(current, **changes)
        return True

    def delete_by_id(self, principal_id: int) -> bool:
        if self.fail_next_delete:
            self.fail_next_delete = False
            raise RuntimeError("connection lost")
        return self.rows.pop(int(principal_id), None) is not None


class InMemoryCourses:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, Course] = {}

    def list_all(self) -> Sequence[Course]:
        return sorted(self.rows.values(), key=lambda c: c.name)

    def get_by_id(self, course_id: int) -> Optional[Course]:
        return self.rows.get(int(course_id))

    def get_by_name(self, name: str) -> Optional[Course]:
        return next((c for c in self.rows.values() if c.name == name), None)

    def create(self, *, name: str, subjects: Sequence[str]) -> int:
        cid = self._next_id
        self._next_id += 1
        self.rows[cid] = Course(cid, name, tuple(subjects), NOW)
        return cid

    def update(self, course_id: int, *, name: str, subjects: Sequence[str]) -> bool:
        current = self.rows.get(int(course_id))
        if not current:
            return False
        self.rows[current.course_id] = replace(current, name=name, subjects=tuple(subjects))
        return True

    def delete_by_id(self, course_id: int) -> bool:
        return self.rows.pop(int(course_id), None) is not None


class InMemoryStudents:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, Student] = {}
        self.fail_metrics = False

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.rows.get(int(student_id))

    def get_by_user_id(self, user_id: int) -> Optional[Student]:
        return next((s for s in self.rows.values() if s.user_id == int(user_id)), None)

    def list_all(self) -> Sequence[Student]:
        return [self.rows[k] for k in sorted(self.rows)]

    def list_by_faculty(self, faculty_id: int) -> Sequence[Student]:
        return [s for s in self.list_all() if s.faculty_id == int(faculty_id)]

    def count_by_faculty(self, faculty_id: int) -> int:
        return len(self.list_by_faculty(faculty_id))

    def count_by_course(self, course_id: int) -> int:
        return sum(1 for s in self.rows.values() if s.course_id == int(course_id))

    def create(self, *, user_id: int, course_id: int, faculty_id: int) -> int:
        sid = self._next_id
        self._next_id += 1
        self.rows[sid] = Student(sid, int(user_id), int(course_id), int(faculty_id), created_at=NOW)
        return sid

    def _update(self, student_id: int, values: dict) -> bool:
        current = self.rows.get(int(student_id))
        if not current:
            return False
        self.rows[current.student_id] = replace(current, **{k: v for k, v in values.items() if v is not None})
        return True

    def update_assignment(self, student_id: int, *, course_id=None, faculty_id=None) -> bool:
        return self._update(student_id, {"course_id": course_id, "faculty_id": faculty_id})

    def update_metrics(self, student_id: int, *, attendance_percentage=None, average_marks=None, overall_grade=None) -> bool:
        if self.fail_metrics:
            raise RuntimeError("metrics store unavailable")
        return self._update(
            student_id,
            {
                "attendance_percentage": attendance_percentage,
                "average_marks": average_marks,
                "overall_grade": overall_grade,
            },
        )

    def reassign_faculty(self, *, from_faculty_id: int, to_faculty_id: int) -> int:
        moved = 0
        for s in list(self.rows.values()):
            if s.faculty_id == int(from_faculty_id):
                self.rows[s.student_id] = replace(s, faculty_id=int(to_faculty_id))
                moved += 1
        return moved

    def delete_by_id(self, student_id: int) -> bool:
        return self.rows.pop(int(student_id), None) is not None


class InMemoryAttendance:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, AttendanceRecord] = {}

    def _sorted(self, records) -> list[AttendanceRecord]:
        return sorted(records, key=lambda r: (r.attendance_date, r.attendance_id), reverse=True)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.rows.get(int(attendance_id))

    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        return next(
            (r for r in self.rows.values() if r.student_id == int(student_id) and r.attendance_date == attendance_date),
            None,
        )

    def list_all(self) -> Sequence[AttendanceRecord]:
        return self._sorted(self.rows.values())

    def list_for_students(self, student_ids: Sequence[int]) -> Sequence[AttendanceRecord]:
        wanted = {int(i) for i in student_ids}
        return self._sorted(r for r in self.rows.values() if r.student_id in wanted)

    def list_for_student(self, student_id: int) -> Sequence[AttendanceRecord]:
        return self.list_for_students([student_id])

    def create(self, *, student_id, faculty_id, attendance_date, status, remarks="") -> int:
        if self.get_for_student_and_date(student_id, attendance_date):
            raise DuplicateError("Attendance already marked for this date")
        aid = self._next_id
        self._next_id += 1
        self.rows[aid] = AttendanceRecord(aid, int(student_id), int(faculty_id), attendance_date, status, remarks, NOW)
        return aid

    def update(self, attendance_id: int, *, status: AttendanceStatus, remarks: str) -> bool:
        current = self.rows.get(int(attendance_id))
        if not current:
            return False
        self.rows[current.attendance_id] = replace(current, status=status, remarks=remarks)
        return True

    def delete_by_id(self, attendance_id: int) -> bool:
        return self.rows.pop(int(attendance_id), None) is not None

    def delete_for_student(self, student_id: int) -> int:
        doomed = [k for k, r in self.rows.items() if r.student_id == int(student_id)]
        for k in doomed:
            del self.rows[k]
        return len(doomed)


class InMemoryMarks:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, MarksRecord] = {}

    def _sorted(self, records) -> list[MarksRecord]:
        return sorted(records, key=lambda r: (r.exam_date, r.mark_id), reverse=True)

    def get_by_id(self, mark_id: int) -> Optional[MarksRecord]:
        return self.rows.get(int(mark_id))

    def list_all(self) -> Sequence[MarksRecord]:
        return self._sorted(self.rows.values())

    def list_for_students(self, student_ids, *, created_by=None, subject=None, exam_type=None) -> Sequence[MarksRecord]:
        wanted = {int(i) for i in student_ids}
        return self._sorted(
            r
            for r in self.rows.values()
            if r.student_id in wanted
            and (created_by is None or r.created_by == int(created_by))
            and (subject is None or r.subject == subject)
            and (exam_type is None or r.exam_type == exam_type)
        )

    def create(self, *, student_id: int, created_by: int, entry: MarksEntry) -> int:
        mid = self._next_id
        self._next_id += 1
        self.rows[mid] = MarksRecord(
            mark_id=mid,
            student_id=int(student_id),
            subject=entry.subject,
            exam_type=entry.exam_type,
            max_marks=entry.max_marks,
            marks_obtained=entry.marks_obtained,
            percentage=entry.percentage,
            grade=entry.grade,
            exam_date=entry.exam_date,
            created_by=int(created_by),
            created_at=NOW,
            updated_at=NOW,
        )
        return mid

    def update(self, mark_id: int, *, entry: MarksEntry) -> bool:
        current = self.rows.get(int(mark_id))
        if not current:
            return False
        self.rows[current.mark_id] = replace(
            current,
            subject=entry.subject,
            exam_type=entry.exam_type,
            max_marks=entry.max_marks,
            marks_obtained=entry.marks_obtained,
            percentage=entry.percentage,
            grade=entry.grade,
            exam_date=entry.exam_date,
        )
        return True

    def delete_by_id(self, mark_id: int) -> bool:
        return self.rows.pop(int(mark_id), None) is not None

    def delete_for_student(self, student_id: int) -> int:
        doomed = [k for k, r in self.rows.items() if r.student_id == int(student_id)]
        for k in doomed:
            del self.rows[k]
        return len(doomed)


def as_caller(principal: Principal) -> AuthenticatedPrincipal:
    """What a verified token for ``principal`` yields (id as a string)."""
    return AuthenticatedPrincipal(str(principal.principal_id), principal.email, principal.name, principal.role)


@dataclass
class World:
    """Demo records: one course, admin, faculty A (two students), faculty B (one student)."""

    container: Container
    course: Course
    admin: Principal
    faculty_a: Principal
    faculty_b: Principal
    alice: Student
    bob: Student
    carol: Student

    @property
    def principals(self) -> InMemoryPrincipals:
        return self.container.principals_repo

    @property
    def students(self) -> InMemoryStudents:
        return self.container.students_repo

    @property
    def attendance(self) -> InMemoryAttendance:
        return self.container.attendance_repo

    @property
    def marks(self) -> InMemoryMarks:
        return self.container.marks_repo

    def caller(self, principal: Principal) -> AuthenticatedPrincipal:
        return as_caller(principal)

    def account_of(self, student: Student) -> Principal:
        return self.principals.get_by_id(student.user_id)

    def student_caller(self, student: Student) -> AuthenticatedPrincipal:
        return as_caller(self.account_of(student))

    def reload(self, student: Student) -> Student:
        return self.students.get_by_id(student.student_id)

    def token_for(self, principal: Principal) -> str:
        return self.container.tokens.issue(principal)

    def headers_for(self, principal: Principal) -> dict:
        return {"Authorization": f"Bearer {self.token_for(principal)}"}


def add_principal(principals: InMemoryPrincipals, name: str, email: str, role: Role, password: str = "secret123") -> Principal:
    pid = principals.create(name=name, email=email, password_hash=generate_password_hash(password), role=role)
    return principals.get_by_id(pid)


@pytest.fixture
def container() -> Container:
    return wire(
        principals_repo=InMemoryPrincipals(),
        courses_repo=InMemoryCourses(),
        students_repo=InMemoryStudents(),
        attendance_repo=InMemoryAttendance(),
        marks_repo=InMemoryMarks(),
        tokens=TokenService("test-jwt-secret", expires_minutes=60),
    )


@pytest.fixture
def world(container: Container) -> World:
    principals = container.principals_repo
    courses = container.courses_repo
    students = container.students_repo

    course_id = courses.create(name="B.Sc Computer Science", subjects=["Mathematics", "Programming", "Databases"])
    admin = add_principal(principals, "Ada Admin", "admin@example.edu", Role.ADMIN)
    faculty_a = add_principal(principals, "Frank Faculty", "frank@example.edu", Role.FACULTY)
    faculty_b = add_principal(principals, "Grace Faculty", "grace@example.edu", Role.FACULTY)

    def enrol(name: str, email: str, faculty: Principal) -> Student:
        account = add_principal(principals, name, email, Role.STUDENT)
        sid = students.create(user_id=account.principal_id, course_id=course_id, faculty_id=faculty.principal_id)
        return students.get_by_id(sid)

    return World(
        container=container,
        course=courses.get_by_id(course_id),
        admin=admin,
        faculty_a=faculty_a,
        faculty_b=faculty_b,
        alice=enrol("Alice Student", "alice@example.edu", faculty_a),
        bob=enrol("Bob Student", "bob@example.edu", faculty_a),
        carol=enrol("Carol Student", "carol@example.edu", faculty_b),
    )


@pytest.fixture
def app(container: Container):
    app = create_app(container=container, settings_module="config.testing")
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app, world):
    return app.test_client()


def marks_entry(
    *,
    subject: str = "Mathematics",
    exam_type: ExamType = ExamType.QUIZ,
    max_marks: float = 100,
    marks_obtained: float = 80,
    percentage: int = 80,
    grade: str = "A-",
    exam_date: date = date(2026, 3, 1),
) -> MarksEntry:
    return MarksEntry(subject, exam_type, max_marks, marks_obtained, percentage, grade, exam_date)
