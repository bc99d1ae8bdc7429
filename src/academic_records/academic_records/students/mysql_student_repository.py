from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_entry_as, fetchall, fetchone
from .model import Student
from .repository import StudentRepository

_COLUMNS = (
    "student_id, user_id, course_id, faculty_id, overall_grade, average_marks, attendance_percentage, created_at"
)


def _to_student(row: dict) -> Student:
    return Student(
        student_id=int(row["student_id"]),
        user_id=int(row["user_id"]),
        course_id=int(row["course_id"]),
        faculty_id=int(row["faculty_id"]),
        overall_grade=row["overall_grade"],
        average_marks=int(row["average_marks"]),
        attendance_percentage=int(row["attendance_percentage"]),
        created_at=row.get("created_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _one(self, where: str, value: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE {where}=%s", (int(value),))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._one("student_id", student_id)

    def get_by_user_id(self, user_id: int) -> Optional[Student]:
        return self._one("user_id", user_id)

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students ORDER BY student_id")
            return [_to_student(r) for r in fetchall(cur)]

    def list_by_faculty(self, faculty_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE faculty_id=%s ORDER BY student_id",
                (int(faculty_id),),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def _count(self, where: str, value: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM students WHERE {where}=%s", (int(value),))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def count_by_faculty(self, faculty_id: int) -> int:
        return self._count("faculty_id", faculty_id)

    def count_by_course(self, course_id: int) -> int:
        return self._count("course_id", course_id)

    def create(self, *, user_id: int, course_id: int, faculty_id: int) -> int:
        with duplicate_entry_as("This user already has a student record"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO students(user_id, course_id, faculty_id) VALUES(%s,%s,%s)",
                    (int(user_id), int(course_id), int(faculty_id)),
                )
                return int(cur.lastrowid)

    def _update(self, student_id: int, values: dict) -> bool:
        values = {k: v for k, v in values.items() if v is not None}
        if not values:
            return self.get_by_id(student_id) is not None
        sets = ", ".join(f"{column}=%s" for column in values)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE students SET {sets} WHERE student_id=%s",
                (*values.values(), int(student_id)),
            )
            cur.execute("SELECT 1 AS ok FROM students WHERE student_id=%s", (int(student_id),))
            return fetchone(cur) is not None

    def update_assignment(
        self,
        student_id: int,
        *,
        course_id: Optional[int] = None,
        faculty_id: Optional[int] = None,
    ) -> bool:
        return self._update(student_id, {"course_id": course_id, "faculty_id": faculty_id})

    def update_metrics(
        self,
        student_id: int,
        *,
        attendance_percentage: Optional[int] = None,
        average_marks: Optional[int] = None,
        overall_grade: Optional[str] = None,
    ) -> bool:
        return self._update(
            student_id,
            {
                "attendance_percentage": attendance_percentage,
                "average_marks": average_marks,
                "overall_grade": overall_grade,
            },
        )

    def reassign_faculty(self, *, from_faculty_id: int, to_faculty_id: int) -> int:
        # Single statement: either every dependent moves or none does.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET faculty_id=%s WHERE faculty_id=%s",
                (int(to_faculty_id), int(from_faculty_id)),
            )
            return int(cur.rowcount)

    def delete_by_id(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (int(student_id),))
            return cur.rowcount > 0
