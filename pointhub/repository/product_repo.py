from __future__ import annotations

from sqlite3 import Connection

_COLS = "id, name, points, stock, class_id, created_at"


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS products (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            points INTEGER NOT NULL DEFAULT 0,
            stock INTEGER NOT NULL DEFAULT 0,
            class_id TEXT NOT NULL,
            created_at TEXT NOT NULL
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_products_class ON products(class_id)")


def list_by_class(conn: Connection, class_id: str):
    return conn.execute(
        f"SELECT {_COLS} FROM products WHERE class_id=? ORDER BY created_at DESC, rowid DESC", (class_id,)
    ).fetchall()


def get_one(conn: Connection, product_id: str):
    return conn.execute(f"SELECT {_COLS} FROM products WHERE id=?", (product_id,)).fetchone()


def insert(conn: Connection, product_id: str, name: str, points: int, stock: int, class_id: str, created_at: str):
    conn.execute(
        "INSERT INTO products(id, name, points, stock, class_id, created_at) VALUES(?,?,?,?,?,?)",
        (product_id, name, int(points), int(stock), class_id, created_at),
    )


def set_name(conn: Connection, product_id: str, name: str):
    conn.execute("UPDATE products SET name=? WHERE id=?", (name, product_id))


def set_points(conn: Connection, product_id: str, points: int):
    conn.execute("UPDATE products SET points=? WHERE id=?", (int(points), product_id))


def set_stock(conn: Connection, product_id: str, stock: int):
    conn.execute("UPDATE products SET stock=? WHERE id=?", (int(stock), product_id))


def delete(conn: Connection, product_id: str) -> int:
    return conn.execute("DELETE FROM products WHERE id=?", (product_id,)).rowcount


def delete_by_class(conn: Connection, class_id: str) -> int:
    return conn.execute("DELETE FROM products WHERE class_id=?", (class_id,)).rowcount
