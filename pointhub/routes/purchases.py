from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..db import Store
from ..domain.models import CreatePurchaseRequest, PurchaseRecord, PurchaseRecordPage, UpdateShippingStatusRequest
from ..logs import LogContext
from ..services import purchase_svc
from .deps import fail, get_store

router = APIRouter()


@router.post("/api/purchases", response_model=PurchaseRecord, status_code=201)
def api_purchase_create(body: CreatePurchaseRequest, store: Store = Depends(get_store)):
    log = LogContext("CREATE_PURCHASE")
    log.set_payload(body.model_dump())
    try:
        res = purchase_svc.create_purchase_record(store, body, log)
        log.write(store, "OK")
        return res
    except Exception as e:
        raise fail(store, log, e)


@router.post("/api/purchases/redeem", response_model=PurchaseRecord, status_code=201)
def api_purchase_redeem(body: CreatePurchaseRequest, store: Store = Depends(get_store)):
    log = LogContext("REDEEM")
    log.set_payload(body.model_dump())
    try:
        res = purchase_svc.redeem(store, body, log)
        log.write(store, "OK")
        return res
    except Exception as e:
        raise fail(store, log, e)


@router.get("/api/classes/{class_id}/purchases", response_model=list[PurchaseRecord])
def api_purchase_list_by_class(class_id: str, store: Store = Depends(get_store)):
    try:
        return purchase_svc.list_purchase_records_by_class(store, class_id)
    except Exception as e:
        raise fail(store, None, e)


@router.get("/api/classes/{class_id}/purchases/page", response_model=PurchaseRecordPage)
def api_purchase_page(
    class_id: str,
    page: int = Query(1),
    page_size: int = Query(10),
    store: Store = Depends(get_store),
):
    try:
        return purchase_svc.list_purchase_records_page(store, class_id, page, page_size)
    except Exception as e:
        raise fail(store, None, e)


@router.post("/api/purchases/{record_id}/shipping")
def api_purchase_shipping(record_id: str, body: UpdateShippingStatusRequest, store: Store = Depends(get_store)):
    log = LogContext("UPDATE_SHIPPING_STATUS")
    log.set_payload({"id": record_id, **body.model_dump()})
    try:
        purchase_svc.update_shipping_status(store, record_id, body.shipping_status, log)
        log.write(store, "OK")
        return {"message": "ok"}
    except Exception as e:
        raise fail(store, log, e)
