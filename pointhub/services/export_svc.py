from __future__ import annotations

# pointhub/services/export_svc.py
import os

import pandas as pd

from ..db import Store, read_config_yaml
from ..errors import InvalidArgumentError, StorageError
from . import product_svc, student_svc

STUDENT_COLUMNS = ["学号", "学生姓名", "积分"]
PRODUCT_COLUMNS = ["商品名称", "所需积分", "库存数量"]


def resolve_desktop_dir() -> str:
    cfg_dir = read_config_yaml().get("desktop_dir")
    if isinstance(cfg_dir, str) and cfg_dir.strip():
        path = os.path.expanduser(cfg_dir.strip())
    else:
        path = os.path.join(os.path.expanduser("~"), "Desktop")
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise StorageError(f"无法获取桌面路径: {e}") from e
    return path


def save_file_to_desktop(filename: str, data: bytes) -> str:
    """把字节写到桌面目录，返回绝对路径。"""
    name = (filename or "").strip()
    if not name or name in (".", "..") or os.path.basename(name) != name or "\\" in name:
        raise InvalidArgumentError(f"Invalid filename: {filename!r}")
    path = os.path.abspath(os.path.join(resolve_desktop_dir(), name))
    try:
        with open(path, "wb") as f:
            f.write(bytes(data))
    except OSError as e:
        raise StorageError(f"文件保存失败: {e}") from e
    return path


def export_students_csv(store: Store, class_id: str) -> bytes:
    students = student_svc.list_students_by_class(store, class_id)
    df = pd.DataFrame(
        [[s.student_number, s.name, s.points] for s in students],
        columns=STUDENT_COLUMNS,
    )
    # utf-8-sig：Excel 打开中文表头不乱码
    return df.to_csv(index=False).encode("utf-8-sig")


def export_products_csv(store: Store, class_id: str) -> bytes:
    products = product_svc.list_products_by_class(store, class_id)
    df = pd.DataFrame(
        [[p.name, p.points, p.stock] for p in products],
        columns=PRODUCT_COLUMNS,
    )
    return df.to_csv(index=False).encode("utf-8-sig")
