from __future__ import annotations

# pointhub/services/setup_svc.py
import logging

from ..db import Store
from ..domain.models import now_utc, to_db_ts
from ..logs import ensure_log_schema
from ..migrations.student_columns import migrate_student_columns
from ..repository import class_repo, student_repo, product_repo, purchase_repo

logger = logging.getLogger(__name__)


def ensure_schema(store: Store) -> dict:
    """
    建表 + 补列 + 回填，每次启动都可以安全执行。
    顺带用 COUNT 重算所有班级的 student_count，修复旧版本遗留的计数漂移。
    """
    with store.transaction() as conn:
        class_repo.ensure_schema(conn)
        student_repo.ensure_schema(conn)
        product_repo.ensure_schema(conn)
        purchase_repo.ensure_schema(conn)
        backfilled = migrate_student_columns(conn, to_db_ts(now_utc()))
        student_repo.ensure_indexes(conn)
        purchase_repo.ensure_indexes(conn)
        class_repo.refresh_all_student_counts(conn)
    ensure_log_schema(store)
    logger.debug("schema ready at %s", store.db_path)
    return backfilled
