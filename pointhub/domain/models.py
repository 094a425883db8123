"""
Typed request/response records.

Responses serialize with camelCase aliases (studentCount, createdAt, ...),
which is the field naming the UI shell already consumes. Requests keep the
snake_case keys the shell sends (class_id, student_number, ...).
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from sqlite3 import Row
from typing import Optional

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def to_db_ts(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat()


def parse_db_ts(raw: Optional[str], *, entity: str = "", entity_id: str = "") -> datetime:
    """解析库中的 RFC 3339 时间；格式错误时记 WARNING 并以当前时间代替。"""
    try:
        dt = datetime.fromisoformat((raw or "").replace("Z", "+00:00"))
    except ValueError:
        logger.warning("malformed created_at %r on %s %s; using current time", raw, entity, entity_id)
        return now_utc()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class ShippingStatus(str, Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ===== Responses =====
class Class(_Record):
    id: str
    name: str
    description: Optional[str] = None
    student_count: int = 0
    created_at: datetime


class Student(_Record):
    id: str
    name: str
    student_number: str
    points: int
    class_id: str
    class_name: str
    created_at: datetime


class Product(_Record):
    id: str
    name: str
    points: int
    stock: int
    class_id: str
    created_at: datetime


class PurchaseRecord(_Record):
    id: str
    product_id: str
    product_name: str
    points: int
    student_id: str
    student_name: str
    quantity: int
    class_id: str
    created_at: datetime
    shipping_status: ShippingStatus = ShippingStatus.PENDING

    @computed_field(alias="totalPoints")
    @property
    def total_points(self) -> int:
        return self.points * self.quantity


class PurchaseRecordPage(_Record):
    records: list[PurchaseRecord]
    total: int
    total_pages: int
    current_page: int
    page_size: int


# ===== Requests =====
class _Patch(BaseModel):
    def changes(self) -> dict:
        """只返回调用方实际给出的字段（None 视为未提供）。"""
        return {k: v for k, v in self.model_dump().items() if v is not None}


class CreateClassRequest(BaseModel):
    name: str
    description: Optional[str] = None


class UpdateClassRequest(_Patch):
    name: Optional[str] = None
    description: Optional[str] = None


class CreateStudentRequest(BaseModel):
    name: str
    student_number: str = ""
    points: int = 0
    class_id: str


class UpdateStudentRequest(_Patch):
    name: Optional[str] = None
    student_number: Optional[str] = None
    points: Optional[int] = None
    class_id: Optional[str] = None


class CreateProductRequest(BaseModel):
    name: str
    points: int = 0
    stock: int = 0
    class_id: str


class UpdateProductRequest(_Patch):
    name: Optional[str] = None
    points: Optional[int] = None
    stock: Optional[int] = None


class CreatePurchaseRequest(BaseModel):
    product_id: str
    student_id: str
    quantity: int = 1


class UpdateShippingStatusRequest(BaseModel):
    shipping_status: str


# ===== Row mapping =====
def class_from_row(r: Row) -> Class:
    return Class(
        id=r["id"],
        name=r["name"],
        description=r["description"],
        student_count=int(r["student_count"] or 0),
        created_at=parse_db_ts(r["created_at"], entity="class", entity_id=r["id"]),
    )


def student_from_row(r: Row) -> Student:
    return Student(
        id=r["id"],
        name=r["name"],
        student_number=r["student_number"] or "",
        points=int(r["points"] or 0),
        class_id=r["class_id"],
        class_name=r["class_name"] or "",
        created_at=parse_db_ts(r["created_at"], entity="student", entity_id=r["id"]),
    )


def product_from_row(r: Row) -> Product:
    return Product(
        id=r["id"],
        name=r["name"],
        points=int(r["points"] or 0),
        stock=int(r["stock"] or 0),
        class_id=r["class_id"],
        created_at=parse_db_ts(r["created_at"], entity="product", entity_id=r["id"]),
    )


def purchase_from_row(r: Row) -> PurchaseRecord:
    status = r["shipping_status"] or ShippingStatus.PENDING.value
    return PurchaseRecord(
        id=r["id"],
        product_id=r["product_id"],
        product_name=r["product_name"],
        points=int(r["points"] or 0),
        student_id=r["student_id"],
        student_name=r["student_name"],
        quantity=int(r["quantity"] or 0),
        class_id=r["class_id"],
        created_at=parse_db_ts(r["created_at"], entity="purchase_record", entity_id=r["id"]),
        shipping_status=ShippingStatus(status) if status in ShippingStatus._value2member_map_ else ShippingStatus.PENDING,
    )
