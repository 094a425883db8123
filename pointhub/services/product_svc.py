from __future__ import annotations

# pointhub/services/product_svc.py
import uuid

from ..db import Store
from ..domain.models import (
    CreateProductRequest,
    Product,
    UpdateProductRequest,
    now_utc,
    product_from_row,
    to_db_ts,
)
from ..errors import InvalidArgumentError, NotFoundError
from ..logs import LogContext
from ..repository import class_repo, product_repo


def _check_non_negative(field: str, value: int | None):
    if value is not None and int(value) < 0:
        raise InvalidArgumentError(f"Product {field} must not be negative")


def list_products_by_class(store: Store, class_id: str) -> list[Product]:
    with store.read() as conn:
        return [product_from_row(r) for r in product_repo.list_by_class(conn, class_id)]


def get_product(store: Store, product_id: str) -> Product:
    with store.read() as conn:
        row = product_repo.get_one(conn, product_id)
    if row is None:
        raise NotFoundError(f"Product not found: {product_id}")
    return product_from_row(row)


def create_product(store: Store, req: CreateProductRequest, log: LogContext | None = None) -> Product:
    name = (req.name or "").strip()
    if not name:
        raise InvalidArgumentError("Product name must not be empty")
    _check_non_negative("points", req.points)
    _check_non_negative("stock", req.stock)

    created = now_utc()
    product = Product(
        id=str(uuid.uuid4()), name=name, points=req.points, stock=req.stock,
        class_id=req.class_id, created_at=created,
    )
    with store.transaction() as conn:
        if class_repo.get_name(conn, req.class_id) is None:
            raise NotFoundError(f"Class not found: {req.class_id}")
        product_repo.insert(conn, product.id, product.name, product.points, product.stock,
                            product.class_id, to_db_ts(created))
    if log:
        log.set_entity("PRODUCT", product.id)
        log.set_after(product.model_dump(mode="json"))
    return product


def update_product(store: Store, product_id: str, req: UpdateProductRequest, log: LogContext | None = None) -> Product:
    changes = req.changes()
    if not changes:
        raise InvalidArgumentError("No fields to update")
    if "name" in changes and not changes["name"].strip():
        raise InvalidArgumentError("Product name must not be empty")
    _check_non_negative("points", changes.get("points"))
    _check_non_negative("stock", changes.get("stock"))

    with store.transaction() as conn:
        before = product_repo.get_one(conn, product_id)
        if before is None:
            raise NotFoundError(f"Product not found: {product_id}")
        if "name" in changes:
            product_repo.set_name(conn, product_id, changes["name"].strip())
        if "points" in changes:
            product_repo.set_points(conn, product_id, changes["points"])
        if "stock" in changes:
            product_repo.set_stock(conn, product_id, changes["stock"])
        after = product_repo.get_one(conn, product_id)

    updated = product_from_row(after)
    if log:
        log.set_entity("PRODUCT", product_id)
        log.set_before(product_from_row(before).model_dump(mode="json"))
        log.set_after(updated.model_dump(mode="json"))
    return updated


def delete_product(store: Store, product_id: str, log: LogContext | None = None) -> None:
    # 兑换记录里保存了商品名称快照，删除商品不影响历史记录
    with store.transaction() as conn:
        if product_repo.delete(conn, product_id) == 0:
            raise NotFoundError(f"Product not found: {product_id}")
    if log:
        log.set_entity("PRODUCT", product_id)
