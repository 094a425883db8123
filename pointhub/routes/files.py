from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..db import Store
from ..errors import InvalidArgumentError
from ..logs import LogContext
from ..services.export_svc import save_file_to_desktop
from .deps import fail, get_store

router = APIRouter()


class SaveFileBody(BaseModel):
    filename: str
    data: list[int]  # 原始字节数组（0-255）


@router.post("/api/files/desktop")
def api_save_file_to_desktop(body: SaveFileBody, store: Store = Depends(get_store)):
    log = LogContext("SAVE_FILE")
    log.set_payload({"filename": body.filename, "size": len(body.data)})
    try:
        try:
            data = bytes(body.data)
        except ValueError:
            raise InvalidArgumentError("data must be a byte array (0-255)")
        path = save_file_to_desktop(body.filename, data)
        log.set_after({"path": path})
        log.write(store, "OK")
        return {"message": "ok", "path": path}
    except Exception as e:
        raise fail(store, log, e)
