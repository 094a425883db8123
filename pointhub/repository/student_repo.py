from __future__ import annotations

from sqlite3 import Connection

_COLS = "id, name, student_number, points, class_id, class_name, created_at"

# 学号按“纯数字优先、数值升序；其余按文本排序；最后按创建时间”排序。
# 非数字学号不会再被 CAST 成 0 混进数字学号中间。
_IS_NUMERIC = "student_number <> '' AND student_number NOT GLOB '*[^0-9]*'"
ORDER_BY_NUMBER = (
    f" ORDER BY CASE WHEN {_IS_NUMERIC} THEN 0 ELSE 1 END,"
    f" CASE WHEN {_IS_NUMERIC} THEN CAST(student_number AS INTEGER) END,"
    " student_number, created_at, rowid"
)


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS students (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            student_number TEXT NOT NULL DEFAULT '',
            points INTEGER NOT NULL DEFAULT 0,
            class_id TEXT NOT NULL,
            class_name TEXT NOT NULL,
            created_at TEXT NOT NULL,
            FOREIGN KEY(class_id) REFERENCES classes(id)
        )
        """
    )


def ensure_indexes(conn: Connection):
    conn.execute("CREATE INDEX IF NOT EXISTS idx_students_class ON students(class_id)")


def list_all(conn: Connection):
    return conn.execute(f"SELECT {_COLS} FROM students" + ORDER_BY_NUMBER).fetchall()


def list_by_class(conn: Connection, class_id: str):
    return conn.execute(f"SELECT {_COLS} FROM students WHERE class_id=?" + ORDER_BY_NUMBER, (class_id,)).fetchall()


def get_one(conn: Connection, student_id: str):
    return conn.execute(f"SELECT {_COLS} FROM students WHERE id=?", (student_id,)).fetchone()


def insert(
    conn: Connection,
    student_id: str,
    name: str,
    student_number: str,
    points: int,
    class_id: str,
    class_name: str,
    created_at: str,
):
    conn.execute(
        "INSERT INTO students(id, name, student_number, points, class_id, class_name, created_at) "
        "VALUES(?,?,?,?,?,?,?)",
        (student_id, name, student_number, int(points), class_id, class_name, created_at),
    )


def set_name(conn: Connection, student_id: str, name: str):
    conn.execute("UPDATE students SET name=? WHERE id=?", (name, student_id))


def set_student_number(conn: Connection, student_id: str, student_number: str):
    conn.execute("UPDATE students SET student_number=? WHERE id=?", (student_number, student_id))


def set_points(conn: Connection, student_id: str, points: int):
    conn.execute("UPDATE students SET points=? WHERE id=?", (int(points), student_id))


def add_points(conn: Connection, student_id: str, delta: int) -> int:
    return conn.execute("UPDATE students SET points = points + ? WHERE id=?", (int(delta), student_id)).rowcount


def set_class(conn: Connection, student_id: str, class_id: str, class_name: str):
    conn.execute("UPDATE students SET class_id=?, class_name=? WHERE id=?", (class_id, class_name, student_id))


def rename_class(conn: Connection, class_id: str, class_name: str) -> int:
    return conn.execute("UPDATE students SET class_name=? WHERE class_id=?", (class_name, class_id)).rowcount


def delete(conn: Connection, student_id: str) -> int:
    return conn.execute("DELETE FROM students WHERE id=?", (student_id,)).rowcount


def delete_by_class(conn: Connection, class_id: str) -> int:
    return conn.execute("DELETE FROM students WHERE class_id=?", (class_id,)).rowcount
