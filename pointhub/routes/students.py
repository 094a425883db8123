from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query, Request, Response
from fastapi.concurrency import run_in_threadpool

from ..db import Store
from ..domain.models import CreateStudentRequest, Student, UpdateStudentRequest
from ..logs import LogContext
from ..services import export_svc, seed_svc, student_svc
from .deps import fail, get_store

router = APIRouter()


@router.get("/api/students", response_model=list[Student])
def api_student_list(store: Store = Depends(get_store)):
    try:
        return student_svc.list_students(store)
    except Exception as e:
        raise fail(store, None, e)


@router.get("/api/classes/{class_id}/students", response_model=list[Student])
def api_student_list_by_class(class_id: str, store: Store = Depends(get_store)):
    try:
        return student_svc.list_students_by_class(store, class_id)
    except Exception as e:
        raise fail(store, None, e)


@router.get("/api/students/{student_id}", response_model=Student)
def api_student_get(student_id: str, store: Store = Depends(get_store)):
    try:
        return student_svc.get_student(store, student_id)
    except Exception as e:
        raise fail(store, None, e)


@router.post("/api/students", response_model=Student, status_code=201)
def api_student_create(body: CreateStudentRequest, store: Store = Depends(get_store)):
    log = LogContext("CREATE_STUDENT")
    log.set_payload(body.model_dump())
    try:
        res = student_svc.create_student(store, body, log)
        log.write(store, "OK")
        return res
    except Exception as e:
        raise fail(store, log, e)


@router.patch("/api/students/{student_id}", response_model=Student)
def api_student_update(student_id: str, body: UpdateStudentRequest, store: Store = Depends(get_store)):
    log = LogContext("UPDATE_STUDENT")
    log.set_payload(body.model_dump())
    try:
        res = student_svc.update_student(store, student_id, body, log)
        log.write(store, "OK")
        return res
    except Exception as e:
        raise fail(store, log, e)


@router.post("/api/students/{student_id}/points", response_model=Student)
def api_student_points(student_id: str, delta: int = Body(..., embed=True), store: Store = Depends(get_store)):
    log = LogContext("ADJUST_POINTS")
    log.set_payload({"id": student_id, "delta": delta})
    try:
        res = student_svc.adjust_points(store, student_id, delta, log)
        log.write(store, "OK")
        return res
    except Exception as e:
        raise fail(store, log, e)


@router.delete("/api/students/{student_id}")
def api_student_delete(student_id: str, store: Store = Depends(get_store)):
    log = LogContext("DELETE_STUDENT")
    log.set_payload({"id": student_id})
    try:
        student_svc.delete_student(store, student_id, log)
        log.write(store, "OK")
        return {"message": "ok"}
    except Exception as e:
        raise fail(store, log, e)


@router.post("/api/classes/{class_id}/students/import")
async def api_student_import(class_id: str, request: Request, store: Store = Depends(get_store)):
    """请求体为 CSV 原文（学号, 学生姓名, 积分）。"""
    log = LogContext("IMPORT_STUDENTS")
    log.set_payload({"class_id": class_id})
    try:
        data = await request.body()
        res = await run_in_threadpool(seed_svc.import_students_csv, store, class_id, data, log)
        log.write(store, "OK")
        return {"message": "ok", **res}
    except Exception as e:
        raise fail(store, log, e)


@router.get("/api/classes/{class_id}/students/export")
def api_student_export(class_id: str, save_to_desktop: bool = Query(False), store: Store = Depends(get_store)):
    try:
        data = export_svc.export_students_csv(store, class_id)
        if save_to_desktop:
            path = export_svc.save_file_to_desktop(f"students_{class_id}.csv", data)
            return {"message": "ok", "path": path}
        return Response(content=data, media_type="text/csv")
    except Exception as e:
        raise fail(store, None, e)
