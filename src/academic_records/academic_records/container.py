from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .access.policy import AccessPolicy
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_JWT_ALGORITHM, DEFAULT_STUDENT_PASSWORD, DEFAULT_TOKEN_MINUTES
from .courses.mysql_course_repository import MySQLCourseRepository
from .courses.repository import CourseRepository
from .courses.service import CourseService
from .database.connection import DBConfig, DatabaseConnection
from .faculty.service import FacultyService
from .marks.mysql_marks_repository import MySQLMarksRepository
from .marks.repository import MarksRepository
from .marks.service import MarksService
from .metrics.service import MetricsService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .users.mysql_principal_repository import MySQLPrincipalRepository
from .users.repository import PrincipalRepository
from .users.service import AuthService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    principals_repo: PrincipalRepository
    courses_repo: CourseRepository
    students_repo: StudentRepository
    attendance_repo: AttendanceRepository
    marks_repo: MarksRepository

    policy: AccessPolicy
    tokens: TokenService
    auth_service: AuthService
    course_service: CourseService
    student_service: StudentService
    attendance_service: AttendanceService
    marks_service: MarksService
    faculty_service: FacultyService
    metrics_service: MetricsService


def wire(
    *,
    principals_repo: PrincipalRepository,
    courses_repo: CourseRepository,
    students_repo: StudentRepository,
    attendance_repo: AttendanceRepository,
    marks_repo: MarksRepository,
    tokens: TokenService,
    conn: Optional[DatabaseConnection] = None,
    allow_privileged_registration: bool = False,
    default_student_password: str = DEFAULT_STUDENT_PASSWORD,
) -> Container:
    """Build every service on top of the given repositories (MySQL or in-memory)."""
    policy = AccessPolicy()
    metrics_service = MetricsService(students_repo, attendance_repo, marks_repo)

    auth_service = AuthService(
        principals_repo,
        tokens,
        allow_privileged_registration=allow_privileged_registration,
    )
    course_service = CourseService(courses_repo, students_repo, policy)
    student_service = StudentService(
        students_repo,
        principals_repo,
        courses_repo,
        attendance_repo,
        marks_repo,
        metrics_service,
        policy,
        default_password=default_student_password,
    )
    attendance_service = AttendanceService(attendance_repo, student_service.directory, metrics_service, policy)
    marks_service = MarksService(marks_repo, student_service.directory, courses_repo, metrics_service, policy)
    faculty_service = FacultyService(principals_repo, students_repo, policy)

    return Container(
        conn=conn,
        principals_repo=principals_repo,
        courses_repo=courses_repo,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        marks_repo=marks_repo,
        policy=policy,
        tokens=tokens,
        auth_service=auth_service,
        course_service=course_service,
        student_service=student_service,
        attendance_service=attendance_service,
        marks_service=marks_service,
        faculty_service=faculty_service,
        metrics_service=metrics_service,
    )


def build_container(
    *,
    db_config: dict,
    jwt_secret: str,
    jwt_algorithm: str = DEFAULT_JWT_ALGORITHM,
    jwt_expires_minutes: int = DEFAULT_TOKEN_MINUTES,
    allow_privileged_registration: bool = False,
    default_student_password: str = DEFAULT_STUDENT_PASSWORD,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        conn=conn,
        principals_repo=MySQLPrincipalRepository(conn),
        courses_repo=MySQLCourseRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        marks_repo=MySQLMarksRepository(conn),
        tokens=TokenService(jwt_secret, algorithm=jwt_algorithm, expires_minutes=jwt_expires_minutes),
        allow_privileged_registration=allow_privileged_registration,
        default_student_password=default_student_password,
    )
