from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_entry_as, fetchall, fetchone
from .model import Principal
from .repository import PrincipalRepository

_COLUMNS = "principal_id, name, email, password_hash, role, created_at"


def _to_principal(row: dict) -> Principal:
    return Principal(
        principal_id=int(row["principal_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        created_at=row.get("created_at"),
    )


class MySQLPrincipalRepository(PrincipalRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, principal_id: int) -> Optional[Principal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM principals WHERE principal_id=%s", (int(principal_id),))
            row = fetchone(cur)
            return _to_principal(row) if row else None

    def get_by_email(self, email: str) -> Optional[Principal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM principals WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_principal(row) if row else None

    def list_by_role(self, role: Role) -> Sequence[Principal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM principals WHERE role=%s ORDER BY name", (role.value,))
            return [_to_principal(r) for r in fetchall(cur)]

    def create(self, *, name: str, email: str, password_hash: str, role: Role) -> int:
        with duplicate_entry_as("Email already exists"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO principals(name, email, password_hash, role) VALUES(%s,%s,%s,%s)",
                    (name, email, password_hash, role.value),
                )
                return int(cur.lastrowid)

    def update(
        self,
        principal_id: int,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> bool:
        sets: list[str] = []
        params: list[object] = []
        for column, value in (("name", name), ("email", email), ("password_hash", password_hash)):
            if value is not None:
                sets.append(f"{column}=%s")
                params.append(value)
        if not sets:
            return self.get_by_id(principal_id) is not None

        params.append(int(principal_id))
        with duplicate_entry_as("Email already exists"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE principals SET {', '.join(sets)} WHERE principal_id=%s", tuple(params))
                # MySQL reports 0 affected rows when values are unchanged.
                cur.execute("SELECT 1 AS ok FROM principals WHERE principal_id=%s", (int(principal_id),))
                return fetchone(cur) is not None

    def delete_by_id(self, principal_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM principals WHERE principal_id=%s", (int(principal_id),))
            return cur.rowcount > 0
