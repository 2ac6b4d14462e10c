from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from core import config
from core.db import Database
from tables.errors import TableServiceError
from tables.registry import REGISTRY, SchemaRegistry
from tables.router import build_router
from tables.service import TableService

logger = logging.getLogger(__name__)


def create_app(database: Database | None = None, registry: SchemaRegistry = REGISTRY) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One pool per process, owned by the app and closed on shutdown.
        db = database if database is not None else Database.from_env()
        await db.open()
        app.state.database = db
        app.state.table_service = TableService(db, registry)
        try:
            yield
        finally:
            await db.close()

    app = FastAPI(lifespan=lifespan)

    # Allow local frontend dev server to call this API from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TableServiceError)
    async def table_service_error_handler(_: Request, exc: TableServiceError) -> JSONResponse:
        logger.info("table_request_rejected error=%s message=%s", type(exc).__name__, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc)},
        )

    app.include_router(build_router(registry), tags=["tables"])

    @app.get("/check-db-connection", response_class=PlainTextResponse)
    async def check_db_connection(request: Request) -> str:
        if await request.app.state.database.ping():
            return "connected"
        return "unable to connect"

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/")
    def root() -> dict:
        return {"message": "hike tracker api"}

    return app


config.configure_logging()
app = create_app()
