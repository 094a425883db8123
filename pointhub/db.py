from __future__ import annotations

# pointhub/db.py
import os
import sqlite3
import sys
import threading
from contextlib import contextmanager
from pathlib import PureWindowsPath
from typing import Iterator
import yaml

from .errors import StorageError

# DB 路径解析顺序：
# 1) 环境变量 POINTHUB_DB_PATH（最高优先级）
# 2) config.yaml 的 db_path
# 3) 候选数据目录（第一个父目录存在的候选）下的 pointhub.db
# 4) 兜底：应用数据目录
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DB_FILENAME = "pointhub.db"
DEFAULT_CANDIDATES = ["D:\\PointHub", "E:\\PointHub", "F:\\PointHub"]


def read_config_yaml() -> dict:
    cfg_path = os.environ.get("POINTHUB_CONFIG") or os.path.join(_PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return cfg if isinstance(cfg, dict) else {}


def app_data_dir() -> str:
    env_dir = os.environ.get("POINTHUB_DATA_DIR")
    if env_dir:
        return env_dir
    if sys.platform.startswith("win") and os.environ.get("APPDATA"):
        return os.path.join(os.environ["APPDATA"], "PointHub")
    xdg = os.environ.get("XDG_DATA_HOME") or os.path.join(os.path.expanduser("~"), ".local", "share")
    return os.path.join(xdg, "pointhub")


def _parent_of(candidate: str) -> str:
    # 盘符形式的候选（D:\PointHub）在任何平台上都按 Windows 路径取父目录
    if PureWindowsPath(candidate).drive:
        return str(PureWindowsPath(candidate).parent)
    return os.path.dirname(os.path.normpath(candidate))


def resolve_data_dir(candidates: list[str] | None = None, fallback: str | None = None) -> str:
    """按顺序选第一个“父目录存在”的候选目录；都不满足时退回应用数据目录。"""
    if candidates is None:
        cfg_candidates = read_config_yaml().get("data_dir_candidates")
        candidates = cfg_candidates if isinstance(cfg_candidates, list) else DEFAULT_CANDIDATES
    for cand in candidates:
        if not isinstance(cand, str) or not cand.strip():
            continue
        parent = _parent_of(cand.strip())
        if parent and parent != cand.strip() and os.path.isdir(parent):
            return cand.strip()
    return fallback or app_data_dir()


def get_db_path() -> str:
    env_path = os.environ.get("POINTHUB_DB_PATH")
    cfg_db = read_config_yaml().get("db_path")
    if env_path:
        path = env_path
    elif isinstance(cfg_db, str) and cfg_db.strip():
        path = cfg_db.strip()
    else:
        path = os.path.join(resolve_data_dir(), DB_FILENAME)

    # 确保目录存在
    dirn = os.path.dirname(path) or "."
    try:
        os.makedirs(dirn, exist_ok=True)
    except OSError as e:
        raise StorageError(f"无法创建数据目录 {dirn}: {e}") from e
    return path


class Store:
    """
    单连接存储句柄：所有读写都在同一把锁内串行执行。
    多语句写操作走 transaction()，任何一步失败都会整体回滚。
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(
                db_path,
                check_same_thread=False,
                isolation_level=None,
            )
        except sqlite3.Error as e:
            raise StorageError(f"无法打开数据库 {db_path}: {e}") from e
        self._conn.row_factory = sqlite3.Row

    @contextmanager
    def read(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
            except sqlite3.Error as e:
                raise StorageError(str(e)) from e

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                self._conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise StorageError(str(e)) from e
            try:
                yield self._conn
                self._conn.execute("COMMIT")
            except sqlite3.Error as e:
                self._rollback()
                raise StorageError(str(e)) from e
            except BaseException:
                self._rollback()
                raise

    def _rollback(self):
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    def close(self):
        with self._lock:
            self._conn.close()


def open_store(db_path: str | None = None, seed: bool | None = None) -> Store:
    """打开存储、建表/补列，并在首次运行时写入演示数据。"""
    from .services.setup_svc import ensure_schema
    from .services.seed_svc import load_demo_data

    store = Store(db_path or get_db_path())
    ensure_schema(store)
    if seed is None:
        seed = bool(read_config_yaml().get("seed_demo_data", True))
    if seed:
        load_demo_data(store)
    return store
