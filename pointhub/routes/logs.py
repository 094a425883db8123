from __future__ import annotations

from fastapi import APIRouter, Depends

from ..db import Store
from ..logs import search_operation_logs
from .deps import get_store

router = APIRouter()


@router.get("/api/logs/search")
def api_logs_search(
    page: int = 1,
    size: int = 20,
    action: str | None = None,
    query: str | None = None,
    ts_from: str | None = None,
    ts_to: str | None = None,
    store: Store = Depends(get_store),
):
    total, items = search_operation_logs(store, query, action, ts_from, ts_to, page, size)
    return {"total": total, "items": items}
