from __future__ import annotations

from fastapi import APIRouter, Depends

from ..db import Store
from ..domain.models import Class, CreateClassRequest, UpdateClassRequest
from ..logs import LogContext
from ..services import class_svc
from .deps import fail, get_store

router = APIRouter()


@router.get("/api/classes", response_model=list[Class])
def api_class_list(store: Store = Depends(get_store)):
    try:
        return class_svc.list_classes(store)
    except Exception as e:
        raise fail(store, None, e)


@router.get("/api/classes/{class_id}", response_model=Class)
def api_class_get(class_id: str, store: Store = Depends(get_store)):
    try:
        return class_svc.get_class(store, class_id)
    except Exception as e:
        raise fail(store, None, e)


@router.post("/api/classes", response_model=Class, status_code=201)
def api_class_create(body: CreateClassRequest, store: Store = Depends(get_store)):
    log = LogContext("CREATE_CLASS")
    log.set_payload(body.model_dump())
    try:
        res = class_svc.create_class(store, body, log)
        log.write(store, "OK")
        return res
    except Exception as e:
        raise fail(store, log, e)


@router.patch("/api/classes/{class_id}", response_model=Class)
def api_class_update(class_id: str, body: UpdateClassRequest, store: Store = Depends(get_store)):
    log = LogContext("UPDATE_CLASS")
    log.set_payload(body.model_dump())
    try:
        res = class_svc.update_class(store, class_id, body, log)
        log.write(store, "OK")
        return res
    except Exception as e:
        raise fail(store, log, e)


@router.delete("/api/classes/{class_id}")
def api_class_delete(class_id: str, store: Store = Depends(get_store)):
    log = LogContext("DELETE_CLASS")
    log.set_payload({"id": class_id})
    try:
        class_svc.delete_class(store, class_id, log)
        log.write(store, "OK")
        return {"message": "ok"}
    except Exception as e:
        raise fail(store, log, e)
