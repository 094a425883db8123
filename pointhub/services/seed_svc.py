from __future__ import annotations

# pointhub/services/seed_svc.py
import io
import logging
import math
import uuid

import pandas as pd

from ..db import Store
from ..domain.models import CreateProductRequest, CreateStudentRequest, now_utc, to_db_ts
from ..errors import InvalidArgumentError, StoreError
from ..logs import LogContext
from ..repository import class_repo, student_repo
from . import class_svc, product_svc, student_svc

logger = logging.getLogger(__name__)

DEMO_CLASS_NAME = "计算机科学与技术2021级1班"
DEMO_CLASS_DESCRIPTION = "计算机科学与技术专业"
DEMO_STUDENT_NAME = "张三"
DEMO_STUDENT_NUMBER = "2021001"
DEMO_STUDENT_POINTS = 85


def load_demo_data(store: Store) -> bool:
    """首次运行（班级表为空）时写入一个演示班级和一个演示学生；否则什么都不做。"""
    with store.transaction() as conn:
        if class_repo.count_all(conn) > 0:
            return False
        now = to_db_ts(now_utc())
        class_id = str(uuid.uuid4())
        class_repo.insert(conn, class_id, DEMO_CLASS_NAME, DEMO_CLASS_DESCRIPTION, now)
        student_repo.insert(
            conn, str(uuid.uuid4()), DEMO_STUDENT_NAME, DEMO_STUDENT_NUMBER,
            DEMO_STUDENT_POINTS, class_id, DEMO_CLASS_NAME, now,
        )
        class_repo.refresh_student_count(conn, class_id)
    logger.info("seeded demo class %s", class_id)
    return True


# Excel 另存的中文 CSV 常见为 GBK；先按 UTF-8（含 BOM）读，失败再按 GBK
CSV_ENCODINGS = ("utf-8-sig", "gbk")
_SQLITE_INT_MIN, _SQLITE_INT_MAX = -(2 ** 63), 2 ** 63 - 1


def _read_table(source) -> pd.DataFrame:
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    for encoding in CSV_ENCODINGS:
        if isinstance(source, io.BytesIO):
            source.seek(0)
        try:
            df = pd.read_csv(source, dtype=str, keep_default_na=False, encoding=encoding)
        except UnicodeDecodeError:
            logger.debug("CSV is not %s, trying next encoding", encoding)
            continue
        except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
            raise InvalidArgumentError(f"cannot parse CSV: {e}") from e
        return df.fillna("")
    raise InvalidArgumentError("CSV must be UTF-8 or GBK")


def _to_int(raw: str, field: str) -> int:
    """空单元格视为 0；其余必须是整数（允许 Excel 的 85.0 写法），否则报 InvalidArgumentError。"""
    raw = (raw or "").strip()
    if not raw:
        return 0
    try:
        value = int(raw)
    except ValueError:
        try:
            f = float(raw)
        except ValueError:
            raise InvalidArgumentError(f"{field} is not a number: {raw!r}")
        if not math.isfinite(f) or not f.is_integer():
            raise InvalidArgumentError(f"{field} must be a whole number: {raw!r}")
        value = int(f)
    if not _SQLITE_INT_MIN <= value <= _SQLITE_INT_MAX:
        raise InvalidArgumentError(f"{field} out of range: {raw!r}")
    return value


def import_students_csv(store: Store, class_id: str, source, log: LogContext | None = None) -> dict:
    """
    从 CSV 导入学生名单。按列位置读取（首行为标题）：
       学号, 学生姓名, 积分
    姓名为空的行跳过；积分缺省为 0。
    每个学生单独创建，失败的行记入 errors，不影响其他行。
    """
    class_svc.get_class(store, class_id)
    df = _read_table(source)
    if df.shape[1] < 2:
        raise InvalidArgumentError("roster needs at least 2 columns: student_number, name")

    created, errors = 0, []
    for i, r in enumerate(df.itertuples(index=False)):
        number = str(r[0]).strip()
        name = str(r[1]).strip()
        if not name:
            continue
        try:
            points = _to_int(str(r[2]), "points") if len(r) > 2 else 0
            student_svc.create_student(
                store, CreateStudentRequest(name=name, student_number=number, points=points, class_id=class_id)
            )
            created += 1
        except StoreError as e:
            logger.warning("roster row %d (%s) skipped: %s", i + 2, name, e)
            errors.append({"row": i + 2, "name": name, "error": str(e)})

    res = {"created": created, "failed": len(errors), "errors": errors}
    if log:
        log.set_entity("CLASS", class_id)
        log.set_after({"created": created, "failed": len(errors)})
    return res


def import_products_csv(store: Store, class_id: str, source, log: LogContext | None = None) -> dict:
    """
    从 CSV 导入商品。按列位置读取（首行为标题）：
       商品名称, 所需积分, 库存数量
    """
    class_svc.get_class(store, class_id)
    df = _read_table(source)
    if df.shape[1] < 1:
        raise InvalidArgumentError("catalog needs at least 1 column: name")

    created, errors = 0, []
    for i, r in enumerate(df.itertuples(index=False)):
        name = str(r[0]).strip()
        if not name:
            continue
        try:
            points = _to_int(str(r[1]), "points") if len(r) > 1 else 0
            stock = _to_int(str(r[2]), "stock") if len(r) > 2 else 0
            product_svc.create_product(
                store, CreateProductRequest(name=name, points=points, stock=stock, class_id=class_id)
            )
            created += 1
        except StoreError as e:
            logger.warning("catalog row %d (%s) skipped: %s", i + 2, name, e)
            errors.append({"row": i + 2, "name": name, "error": str(e)})

    res = {"created": created, "failed": len(errors), "errors": errors}
    if log:
        log.set_entity("CLASS", class_id)
        log.set_after({"created": created, "failed": len(errors)})
    return res
