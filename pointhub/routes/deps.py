from __future__ import annotations

from fastapi import HTTPException, Request

from ..db import Store
from ..errors import HTTP_STATUS, StoreError
from ..logs import LogContext


def get_store(request: Request) -> Store:
    return request.app.state.store


def fail(store: Store, log: LogContext | None, e: Exception) -> HTTPException:
    """写一条 ERROR 审计日志，并把异常转换成带错误信息的 HTTPException。"""
    if isinstance(e, StoreError):
        status, detail = HTTP_STATUS[e.kind], str(e)
    else:
        status, detail = 500, str(e) or e.__class__.__name__
    if log is not None:
        log.write(store, "ERROR", detail)
    return HTTPException(status_code=status, detail=detail)
