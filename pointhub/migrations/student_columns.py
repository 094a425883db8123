#!/usr/bin/env python3
"""
Migration: add created_at / student_number to legacy students rows (and
shipping_status to legacy purchase_records), then backfill empty values.
Idempotent; runs on every startup.
"""
from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)


def _columns(conn: sqlite3.Connection, table: str) -> set[str]:
    return {row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()}


def add_column_if_missing(conn: sqlite3.Connection, table: str, column: str, decl: str) -> bool:
    """补列；列已存在（包括并发/重复执行导致的 duplicate column）时静默跳过。"""
    if column in _columns(conn, table):
        return False
    try:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {decl}")
    except sqlite3.OperationalError as e:
        if "duplicate column" in str(e).lower():
            return False
        raise
    logger.info("added column %s.%s", table, column)
    return True


def migrate_student_columns(conn: sqlite3.Connection, now_ts: str) -> dict:
    add_column_if_missing(conn, "students", "created_at", "TEXT DEFAULT ''")
    add_column_if_missing(conn, "students", "student_number", "TEXT DEFAULT ''")
    add_column_if_missing(conn, "purchase_records", "shipping_status", "TEXT NOT NULL DEFAULT 'pending'")

    filled_ts = conn.execute(
        "UPDATE students SET created_at = ? WHERE created_at = '' OR created_at IS NULL",
        (now_ts,),
    ).rowcount
    filled_no = conn.execute(
        "UPDATE students SET student_number = 'STU' || substr(id, 1, 8) "
        "WHERE student_number = '' OR student_number IS NULL"
    ).rowcount
    filled_status = conn.execute(
        "UPDATE purchase_records SET shipping_status = 'pending' "
        "WHERE shipping_status = '' OR shipping_status IS NULL"
    ).rowcount
    if filled_ts or filled_no or filled_status:
        logger.info(
            "backfilled legacy rows: created_at=%d student_number=%d shipping_status=%d",
            filled_ts, filled_no, filled_status,
        )
    return {"created_at": filled_ts, "student_number": filled_no, "shipping_status": filled_status}


if __name__ == "__main__":
    import sys

    from pointhub.db import get_db_path
    from pointhub.domain.models import now_utc, to_db_ts

    db_path = sys.argv[1] if len(sys.argv) > 1 else get_db_path()
    print(f"Running student column migration on {db_path}")
    conn = sqlite3.connect(db_path)
    try:
        res = migrate_student_columns(conn, to_db_ts(now_utc()))
        conn.commit()
        print(f"Migration completed successfully: {res}")
    except Exception as e:
        conn.rollback()
        print(f"Migration failed: {e}")
        raise
    finally:
        conn.close()
