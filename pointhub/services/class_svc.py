from __future__ import annotations

# pointhub/services/class_svc.py
import logging
import uuid

from ..db import Store
from ..domain.models import Class, CreateClassRequest, UpdateClassRequest, class_from_row, now_utc, to_db_ts
from ..errors import InvalidArgumentError, NotFoundError
from ..logs import LogContext
from ..repository import class_repo, student_repo, product_repo, purchase_repo

logger = logging.getLogger(__name__)


def list_classes(store: Store) -> list[Class]:
    with store.read() as conn:
        return [class_from_row(r) for r in class_repo.list_all(conn)]


def get_class(store: Store, class_id: str) -> Class:
    with store.read() as conn:
        row = class_repo.get_one(conn, class_id)
    if row is None:
        raise NotFoundError(f"Class not found: {class_id}")
    return class_from_row(row)


def create_class(store: Store, req: CreateClassRequest, log: LogContext | None = None) -> Class:
    name = (req.name or "").strip()
    if not name:
        raise InvalidArgumentError("Class name must not be empty")
    created = now_utc()
    new_class = Class(id=str(uuid.uuid4()), name=name, description=req.description, student_count=0, created_at=created)
    with store.transaction() as conn:
        class_repo.insert(conn, new_class.id, new_class.name, new_class.description, to_db_ts(created))
    if log:
        log.set_entity("CLASS", new_class.id)
        log.set_after(new_class.model_dump(mode="json"))
    return new_class


def update_class(store: Store, class_id: str, req: UpdateClassRequest, log: LogContext | None = None) -> Class:
    """
    只写调用方给出的字段；改名时在同一事务内把新名字同步到该班所有学生的 class_name。
    """
    changes = req.changes()
    if not changes:
        raise InvalidArgumentError("No fields to update")
    if "name" in changes and not changes["name"].strip():
        raise InvalidArgumentError("Class name must not be empty")

    with store.transaction() as conn:
        before = class_repo.get_one(conn, class_id)
        if before is None:
            raise NotFoundError(f"Class not found: {class_id}")
        if "name" in changes:
            new_name = changes["name"].strip()
            class_repo.set_name(conn, class_id, new_name)
            synced = student_repo.rename_class(conn, class_id, new_name)
            logger.debug("class %s renamed, synced class_name on %d students", class_id, synced)
        if "description" in changes:
            class_repo.set_description(conn, class_id, changes["description"])
        after = class_repo.get_one(conn, class_id)

    updated = class_from_row(after)
    if log:
        log.set_entity("CLASS", class_id)
        log.set_before(class_from_row(before).model_dump(mode="json"))
        log.set_after(updated.model_dump(mode="json"))
    return updated


def delete_class(store: Store, class_id: str, log: LogContext | None = None) -> None:
    """删除班级及其学生、商品和兑换记录（同一事务）。"""
    with store.transaction() as conn:
        before = class_repo.get_one(conn, class_id)
        if before is None:
            raise NotFoundError(f"Class not found: {class_id}")
        removed = {
            "students": student_repo.delete_by_class(conn, class_id),
            "purchase_records": purchase_repo.delete_by_class(conn, class_id),
            "products": product_repo.delete_by_class(conn, class_id),
        }
        class_repo.delete(conn, class_id)
    logger.info("deleted class %s with %s", class_id, removed)
    if log:
        log.set_entity("CLASS", class_id)
        log.set_before(class_from_row(before).model_dump(mode="json"))
        log.set_after({"removed": removed})
