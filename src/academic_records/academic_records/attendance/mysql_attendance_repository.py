from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_entry_as, fetchall, fetchone, in_clause
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, student_id, faculty_id, attendance_date, status, remarks, created_at"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        faculty_id=int(r["faculty_id"]),
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        remarks=r.get("remarks") or "",
        created_at=r.get("created_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE student_id=%s AND attendance_date=%s",
                (int(student_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_all(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records ORDER BY attendance_date DESC, attendance_id DESC")
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_students(self, student_ids: Sequence[int]) -> Sequence[AttendanceRecord]:
        ids = [int(s) for s in student_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id IN ({in_clause(ids)})
                ORDER BY attendance_date DESC, attendance_id DESC
                """,
                tuple(ids),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_student(self, student_id: int) -> Sequence[AttendanceRecord]:
        return self.list_for_students([student_id])

    def create(
        self,
        *,
        student_id: int,
        faculty_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        remarks: str = "",
    ) -> int:
        # A concurrent writer can get past the service pre-check.
        with duplicate_entry_as("Attendance already marked for this date"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(student_id, faculty_id, attendance_date, status, remarks)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(student_id), int(faculty_id), attendance_date, status.value, remarks or ""),
                )
                return int(cur.lastrowid)

    def update(self, attendance_id: int, *, status: AttendanceStatus, remarks: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET status=%s, remarks=%s WHERE attendance_id=%s",
                (status.value, remarks or "", int(attendance_id)),
            )
            cur.execute("SELECT 1 AS ok FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return fetchone(cur) is not None

    def delete_by_id(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def delete_for_student(self, student_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE student_id=%s", (int(student_id),))
            return int(cur.rowcount)
