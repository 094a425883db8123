from __future__ import annotations

from sqlite3 import Connection
from typing import Optional

_COLS = "id, name, description, student_count, created_at"


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS classes (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            student_count INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL
        )
        """
    )


def count_all(conn: Connection) -> int:
    return int(conn.execute("SELECT COUNT(1) AS c FROM classes").fetchone()["c"])


def list_all(conn: Connection):
    return conn.execute(f"SELECT {_COLS} FROM classes ORDER BY created_at DESC, rowid DESC").fetchall()


def get_one(conn: Connection, class_id: str):
    return conn.execute(f"SELECT {_COLS} FROM classes WHERE id=?", (class_id,)).fetchone()


def get_name(conn: Connection, class_id: str) -> Optional[str]:
    row = conn.execute("SELECT name FROM classes WHERE id=?", (class_id,)).fetchone()
    return row["name"] if row else None


def insert(conn: Connection, class_id: str, name: str, description: str | None, created_at: str, student_count: int = 0):
    conn.execute(
        "INSERT INTO classes(id, name, description, student_count, created_at) VALUES(?,?,?,?,?)",
        (class_id, name, description, int(student_count), created_at),
    )


def set_name(conn: Connection, class_id: str, name: str) -> int:
    return conn.execute("UPDATE classes SET name=? WHERE id=?", (name, class_id)).rowcount


def set_description(conn: Connection, class_id: str, description: str) -> int:
    return conn.execute("UPDATE classes SET description=? WHERE id=?", (description, class_id)).rowcount


def refresh_student_count(conn: Connection, class_id: str):
    """student_count 永远由 COUNT 重新计算，不做增量加减。"""
    conn.execute(
        "UPDATE classes SET student_count = (SELECT COUNT(*) FROM students WHERE class_id=?) WHERE id=?",
        (class_id, class_id),
    )


def refresh_all_student_counts(conn: Connection) -> int:
    return conn.execute(
        "UPDATE classes SET student_count = "
        "(SELECT COUNT(*) FROM students s WHERE s.class_id = classes.id)"
    ).rowcount


def delete(conn: Connection, class_id: str) -> int:
    return conn.execute("DELETE FROM classes WHERE id=?", (class_id,)).rowcount
