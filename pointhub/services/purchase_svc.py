from __future__ import annotations

# pointhub/services/purchase_svc.py
import logging
import uuid
from sqlite3 import Connection

from ..db import Store
from ..domain.models import (
    CreatePurchaseRequest,
    PurchaseRecord,
    PurchaseRecordPage,
    ShippingStatus,
    now_utc,
    purchase_from_row,
    to_db_ts,
)
from ..domain.reward_engine import compute_redemption, page_count
from ..errors import InvalidArgumentError, NotFoundError
from ..logs import LogContext
from ..repository import product_repo, purchase_repo, student_repo

logger = logging.getLogger(__name__)


def _insert_record(conn: Connection, req: CreatePurchaseRequest):
    """解析商品/学生并写入一条兑换记录（不动库存和积分）。返回 (record_id, product_row, student_row)。"""
    if int(req.quantity) < 1:
        raise InvalidArgumentError("Quantity must be at least 1")
    product = product_repo.get_one(conn, req.product_id)
    if product is None:
        raise NotFoundError(f"Product not found: {req.product_id}")
    student = student_repo.get_one(conn, req.student_id)
    if student is None:
        raise NotFoundError(f"Student not found: {req.student_id}")

    record_id = str(uuid.uuid4())
    purchase_repo.insert(
        conn,
        record_id,
        product["id"],
        product["name"],
        product["points"],
        student["id"],
        student["name"],
        req.quantity,
        product["class_id"],
        to_db_ts(now_utc()),
        ShippingStatus.PENDING.value,
    )
    return record_id, product, student


def create_purchase_record(store: Store, req: CreatePurchaseRequest, log: LogContext | None = None) -> PurchaseRecord:
    """
    只记录兑换流水：库存扣减和学生积分扣除不在这里做。
    需要连带扣减时用 redeem()。
    """
    with store.transaction() as conn:
        record_id, _, _ = _insert_record(conn, req)
        row = purchase_repo.get_one(conn, record_id)
    record = purchase_from_row(row)
    if log:
        log.set_entity("PURCHASE", record.id)
        log.set_after(record.model_dump(mode="json", by_alias=True))
    return record


def redeem(store: Store, req: CreatePurchaseRequest, log: LogContext | None = None) -> PurchaseRecord:
    """兑换：校验库存与积分，扣库存、扣积分、写记录，三步同一事务。"""
    with store.transaction() as conn:
        record_id, product, student = _insert_record(conn, req)
        new_points, new_stock, cost = compute_redemption(
            student["points"], product["stock"], product["points"], req.quantity
        )
        if new_stock < 0:
            raise InvalidArgumentError(
                f"Insufficient stock for {product['name']}: {product['stock']} left, {req.quantity} requested"
            )
        if new_points < 0:
            raise InvalidArgumentError(
                f"Insufficient points for {student['name']}: has {student['points']}, needs {cost}"
            )
        product_repo.set_stock(conn, product["id"], new_stock)
        student_repo.set_points(conn, student["id"], new_points)
        row = purchase_repo.get_one(conn, record_id)

    record = purchase_from_row(row)
    logger.info("student %s redeemed %d x %s for %d points", record.student_id, record.quantity, record.product_id, cost)
    if log:
        log.set_entity("PURCHASE", record.id)
        log.set_after({"record": record.model_dump(mode="json", by_alias=True),
                       "student_points": new_points, "product_stock": new_stock})
    return record


def list_purchase_records_by_class(store: Store, class_id: str) -> list[PurchaseRecord]:
    with store.read() as conn:
        return [purchase_from_row(r) for r in purchase_repo.list_by_class(conn, class_id)]


def list_purchase_records_page(store: Store, class_id: str, page: int = 1, page_size: int = 10) -> PurchaseRecordPage:
    if page < 1 or page_size < 1:
        raise InvalidArgumentError("page and page_size must be >= 1")
    with store.read() as conn:
        total = purchase_repo.count_by_class(conn, class_id)
        rows = purchase_repo.list_page_by_class(conn, class_id, page, page_size)
    return PurchaseRecordPage(
        records=[purchase_from_row(r) for r in rows],
        total=total,
        total_pages=page_count(total, page_size),
        current_page=page,
        page_size=page_size,
    )


def update_shipping_status(store: Store, record_id: str, status: str, log: LogContext | None = None) -> None:
    if status not in ShippingStatus._value2member_map_:
        allowed = ", ".join(s.value for s in ShippingStatus)
        raise InvalidArgumentError(f"Unknown shipping status {status!r}; expected one of: {allowed}")
    with store.transaction() as conn:
        before = purchase_repo.get_one(conn, record_id)
        if before is None:
            raise NotFoundError(f"Purchase record not found: {record_id}")
        purchase_repo.set_shipping_status(conn, record_id, status)
    if log:
        log.set_entity("PURCHASE", record_id)
        log.set_before({"shipping_status": before["shipping_status"]})
        log.set_after({"shipping_status": status})
