from __future__ import annotations

import json
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_entry_as, fetchall, fetchone, load_json_list
from .model import Course
from .repository import CourseRepository


def _to_course(row: dict) -> Course:
    return Course(
        course_id=int(row["course_id"]),
        name=row["name"],
        subjects=tuple(load_json_list(row.get("subjects"))),
        created_at=row.get("created_at"),
    )


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT course_id, name, subjects, created_at FROM courses ORDER BY name")
            return [_to_course(r) for r in fetchall(cur)]

    def get_by_id(self, course_id: int) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT course_id, name, subjects, created_at FROM courses WHERE course_id=%s",
                (int(course_id),),
            )
            row = fetchone(cur)
            return _to_course(row) if row else None

    def get_by_name(self, name: str) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT course_id, name, subjects, created_at FROM courses WHERE name=%s", (name,))
            row = fetchone(cur)
            return _to_course(row) if row else None

    def create(self, *, name: str, subjects: Sequence[str]) -> int:
        with duplicate_entry_as("Course with this name already exists"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO courses(name, subjects) VALUES(%s, %s)",
                    (name, json.dumps(list(subjects))),
                )
                return int(cur.lastrowid)

    def update(self, course_id: int, *, name: str, subjects: Sequence[str]) -> bool:
        with duplicate_entry_as("Course with this name already exists"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE courses SET name=%s, subjects=%s WHERE course_id=%s",
                    (name, json.dumps(list(subjects)), int(course_id)),
                )
                cur.execute("SELECT 1 AS ok FROM courses WHERE course_id=%s", (int(course_id),))
                return fetchone(cur) is not None

    def delete_by_id(self, course_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM courses WHERE course_id=%s", (int(course_id),))
            return cur.rowcount > 0
