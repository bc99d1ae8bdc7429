from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.logger import get_logger
from .connection import DBConfig

logger = get_logger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _run_script(db_config: dict, sql: str) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(_strip_comments(_strip_create_db_and_use(sql))):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _run_script(db_config, Path(schema_path).read_text(encoding="utf-8"))
    logger.info("schema applied from %s", schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_script(db_config, Path(seed_path).read_text(encoding="utf-8"))
    logger.info("seed applied from %s", seed_path)


def ensure_demo_accounts(db_config: dict) -> None:
    """Create (or reset) one admin, one faculty and one student with a profile."""

    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)

        def upsert_principal(name: str, email: str, password: str, role: str) -> int:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT principal_id FROM principals WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    "UPDATE principals SET name=%s, password_hash=%s, role=%s WHERE principal_id=%s",
                    (name, password_hash, role, existing["principal_id"]),
                )
                return int(existing["principal_id"])
            cur.execute(
                "INSERT INTO principals (name, email, password_hash, role) VALUES (%s, %s, %s, %s)",
                (name, email, password_hash, role),
            )
            return int(cur.lastrowid)

        upsert_principal("Admin Demo", "admin@example.edu", "admin123", "admin")
        faculty_id = upsert_principal("Faculty Demo", "faculty@example.edu", "faculty123", "faculty")
        student_user_id = upsert_principal("Student Demo", "student@example.edu", "student123", "student")

        cur.execute("SELECT course_id FROM courses ORDER BY course_id LIMIT 1")
        course = cur.fetchone()
        if not course:
            raise RuntimeError("Missing demo course; apply seed.sql first")

        cur.execute("SELECT student_id FROM students WHERE user_id=%s", (student_user_id,))
        if not cur.fetchone():
            cur.execute(
                "INSERT INTO students (user_id, course_id, faculty_id) VALUES (%s, %s, %s)",
                (student_user_id, int(course["course_id"]), faculty_id),
            )

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
