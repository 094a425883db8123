from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.concurrency import run_in_threadpool

from ..db import Store
from ..domain.models import CreateProductRequest, Product, UpdateProductRequest
from ..logs import LogContext
from ..services import export_svc, product_svc, seed_svc
from .deps import fail, get_store

router = APIRouter()


@router.get("/api/classes/{class_id}/products", response_model=list[Product])
def api_product_list_by_class(class_id: str, store: Store = Depends(get_store)):
    try:
        return product_svc.list_products_by_class(store, class_id)
    except Exception as e:
        raise fail(store, None, e)


@router.get("/api/products/{product_id}", response_model=Product)
def api_product_get(product_id: str, store: Store = Depends(get_store)):
    try:
        return product_svc.get_product(store, product_id)
    except Exception as e:
        raise fail(store, None, e)


@router.post("/api/products", response_model=Product, status_code=201)
def api_product_create(body: CreateProductRequest, store: Store = Depends(get_store)):
    log = LogContext("CREATE_PRODUCT")
    log.set_payload(body.model_dump())
    try:
        res = product_svc.create_product(store, body, log)
        log.write(store, "OK")
        return res
    except Exception as e:
        raise fail(store, log, e)


@router.patch("/api/products/{product_id}", response_model=Product)
def api_product_update(product_id: str, body: UpdateProductRequest, store: Store = Depends(get_store)):
    log = LogContext("UPDATE_PRODUCT")
    log.set_payload(body.model_dump())
    try:
        res = product_svc.update_product(store, product_id, body, log)
        log.write(store, "OK")
        return res
    except Exception as e:
        raise fail(store, log, e)


@router.delete("/api/products/{product_id}")
def api_product_delete(product_id: str, store: Store = Depends(get_store)):
    log = LogContext("DELETE_PRODUCT")
    log.set_payload({"id": product_id})
    try:
        product_svc.delete_product(store, product_id, log)
        log.write(store, "OK")
        return {"message": "ok"}
    except Exception as e:
        raise fail(store, log, e)


@router.post("/api/classes/{class_id}/products/import")
async def api_product_import(class_id: str, request: Request, store: Store = Depends(get_store)):
    """请求体为 CSV 原文（商品名称, 所需积分, 库存数量）。"""
    log = LogContext("IMPORT_PRODUCTS")
    log.set_payload({"class_id": class_id})
    try:
        data = await request.body()
        res = await run_in_threadpool(seed_svc.import_products_csv, store, class_id, data, log)
        log.write(store, "OK")
        return {"message": "ok", **res}
    except Exception as e:
        raise fail(store, log, e)


@router.get("/api/classes/{class_id}/products/export")
def api_product_export(class_id: str, save_to_desktop: bool = Query(False), store: Store = Depends(get_store)):
    try:
        data = export_svc.export_products_csv(store, class_id)
        if save_to_desktop:
            path = export_svc.save_file_to_desktop(f"products_{class_id}.csv", data)
            return {"message": "ok", "path": path}
        return Response(content=data, media_type="text/csv")
    except Exception as e:
        raise fail(store, None, e)
