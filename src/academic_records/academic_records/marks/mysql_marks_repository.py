from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ExamType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import MarksEntry, MarksRecord
from .repository import MarksRepository

_COLUMNS = (
    "mark_id, student_id, subject, exam_type, max_marks, marks_obtained, percentage, grade, "
    "exam_date, created_by, created_at, updated_at"
)


def _to_record(r: dict) -> MarksRecord:
    return MarksRecord(
        mark_id=int(r["mark_id"]),
        student_id=int(r["student_id"]),
        subject=r["subject"],
        exam_type=ExamType(r["exam_type"]),
        # DECIMAL columns come back as Decimal.
        max_marks=float(r["max_marks"]),
        marks_obtained=float(r["marks_obtained"]),
        percentage=int(r["percentage"]),
        grade=r["grade"],
        exam_date=r["exam_date"],
        created_by=int(r["created_by"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLMarksRepository(MarksRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, mark_id: int) -> Optional[MarksRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM marks WHERE mark_id=%s", (int(mark_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_all(self) -> Sequence[MarksRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM marks ORDER BY exam_date DESC, mark_id DESC")
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_students(
        self,
        student_ids: Sequence[int],
        *,
        created_by: Optional[int] = None,
        subject: Optional[str] = None,
        exam_type: Optional[ExamType] = None,
    ) -> Sequence[MarksRecord]:
        ids = [int(s) for s in student_ids]
        if not ids:
            return []

        clauses = [f"student_id IN ({in_clause(ids)})"]
        params: list[object] = list(ids)
        if created_by is not None:
            clauses.append("created_by=%s")
            params.append(int(created_by))
        if subject:
            clauses.append("subject=%s")
            params.append(subject)
        if exam_type is not None:
            clauses.append("exam_type=%s")
            params.append(exam_type.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM marks WHERE {where} ORDER BY exam_date DESC, mark_id DESC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create(self, *, student_id: int, created_by: int, entry: MarksEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO marks(student_id, subject, exam_type, max_marks, marks_obtained,
                                  percentage, grade, exam_date, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(student_id),
                    entry.subject,
                    entry.exam_type.value,
                    entry.max_marks,
                    entry.marks_obtained,
                    entry.percentage,
                    entry.grade,
                    entry.exam_date,
                    int(created_by),
                ),
            )
            return int(cur.lastrowid)

    def update(self, mark_id: int, *, entry: MarksEntry) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE marks
                SET subject=%s, exam_type=%s, max_marks=%s, marks_obtained=%s,
                    percentage=%s, grade=%s, exam_date=%s
                WHERE mark_id=%s
                """,
                (
                    entry.subject,
                    entry.exam_type.value,
                    entry.max_marks,
                    entry.marks_obtained,
                    entry.percentage,
                    entry.grade,
                    entry.exam_date,
                    int(mark_id),
                ),
            )
            cur.execute("SELECT 1 AS ok FROM marks WHERE mark_id=%s", (int(mark_id),))
            return fetchone(cur) is not None

    def delete_by_id(self, mark_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM marks WHERE mark_id=%s", (int(mark_id),))
            return cur.rowcount > 0

    def delete_for_student(self, student_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM marks WHERE student_id=%s", (int(student_id),))
            return int(cur.rowcount)
