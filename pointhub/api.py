"""
FastAPI app entry point aggregating per-domain routers under pointhub/routes.
Keep as `uvicorn pointhub.api:app`.

The UI shell talks to this app; the app owns exactly one Store (one SQLite
connection) for its lifetime and hands it to routes via Depends(get_store).
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import open_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = getattr(app.state, "store", None)
    owned = store is None
    if owned:
        store = open_store()
        app.state.store = store
    logger.info("store opened at %s", store.db_path)
    try:
        yield
    finally:
        if owned:
            store.close()
            app.state.store = None


def create_app(store=None) -> FastAPI:
    """store 为 None 时在启动阶段按配置打开；测试可直接注入已打开的 Store。"""
    app = FastAPI(title="pointhub-api", version="0.1.0", lifespan=lifespan)
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:1420",
            "http://127.0.0.1:1420",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "tauri://localhost",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers (split by business domain)
    from .routes import base as base_routes
    from .routes import classes as classes_routes
    from .routes import students as students_routes
    from .routes import products as products_routes
    from .routes import purchases as purchases_routes
    from .routes import files as files_routes
    from .routes import logs as logs_routes

    app.include_router(base_routes.router)
    app.include_router(classes_routes.router)
    app.include_router(students_routes.router)
    app.include_router(products_routes.router)
    app.include_router(purchases_routes.router)
    app.include_router(files_routes.router)
    app.include_router(logs_routes.router)
    return app


app = create_app()
