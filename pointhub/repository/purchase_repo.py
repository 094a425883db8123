from __future__ import annotations

from sqlite3 import Connection

_COLS = (
    "id, product_id, product_name, points, student_id, student_name, "
    "quantity, class_id, created_at, shipping_status"
)


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS purchase_records (
            id TEXT PRIMARY KEY,
            product_id TEXT NOT NULL,
            product_name TEXT NOT NULL,
            points INTEGER NOT NULL DEFAULT 0,
            student_id TEXT NOT NULL,
            student_name TEXT NOT NULL,
            quantity INTEGER NOT NULL DEFAULT 1,
            class_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            shipping_status TEXT NOT NULL DEFAULT 'pending'
        )
        """
    )


def ensure_indexes(conn: Connection):
    conn.execute("CREATE INDEX IF NOT EXISTS idx_purchase_class ON purchase_records(class_id, created_at)")


def insert(
    conn: Connection,
    record_id: str,
    product_id: str,
    product_name: str,
    points: int,
    student_id: str,
    student_name: str,
    quantity: int,
    class_id: str,
    created_at: str,
    shipping_status: str,
):
    conn.execute(
        "INSERT INTO purchase_records(id, product_id, product_name, points, student_id, student_name, "
        "quantity, class_id, created_at, shipping_status) VALUES(?,?,?,?,?,?,?,?,?,?)",
        (record_id, product_id, product_name, int(points), student_id, student_name,
         int(quantity), class_id, created_at, shipping_status),
    )


def get_one(conn: Connection, record_id: str):
    return conn.execute(f"SELECT {_COLS} FROM purchase_records WHERE id=?", (record_id,)).fetchone()


def count_by_class(conn: Connection, class_id: str) -> int:
    return int(conn.execute(
        "SELECT COUNT(1) AS c FROM purchase_records WHERE class_id=?", (class_id,)
    ).fetchone()["c"])


def list_by_class(conn: Connection, class_id: str):
    return conn.execute(
        f"SELECT {_COLS} FROM purchase_records WHERE class_id=? ORDER BY created_at DESC, rowid DESC",
        (class_id,),
    ).fetchall()


def list_page_by_class(conn: Connection, class_id: str, page: int, size: int):
    return conn.execute(
        f"SELECT {_COLS} FROM purchase_records WHERE class_id=? "
        "ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
        (class_id, size, (page - 1) * size),
    ).fetchall()


def set_shipping_status(conn: Connection, record_id: str, status: str) -> int:
    return conn.execute(
        "UPDATE purchase_records SET shipping_status=? WHERE id=?", (status, record_id)
    ).rowcount


def delete_by_class(conn: Connection, class_id: str) -> int:
    return conn.execute("DELETE FROM purchase_records WHERE class_id=?", (class_id,)).rowcount
