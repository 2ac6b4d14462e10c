"""
FastAPI router for the generic table endpoints.

`build_router` walks the registry once at startup and registers the same
five routes for every table under `/tables/<slug>`. This is also where
failed `OperationResult`s are downgraded to the response shapes clients
already depend on (empty data, success=false, count=-1).
"""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from . import schemas
from .registry import SchemaRegistry, TableSchema
from .service import OperationResult, TableService


def get_table_service(request: Request) -> TableService:
    return request.app.state.table_service


def _write_response(result: OperationResult, *, not_found_on_zero_rows: bool) -> JSONResponse:
    if not result.ok:
        return JSONResponse(status_code=500, content={"success": False})
    if not result.value:
        status_code = 404 if not_found_on_zero_rows else 500
        return JSONResponse(status_code=status_code, content={"success": False})
    return JSONResponse(status_code=200, content={"success": True})


def _add_table_routes(router: APIRouter, schema: TableSchema) -> None:
    table = schema.name
    slug = schema.slug

    async def fetch_rows(service: TableService = Depends(get_table_service)) -> dict:
        # Read failures stay 200 with empty data; `success` tells them apart.
        result = await service.fetch(table)
        return {"success": result.ok, "data": result.value_or([])}

    async def insert_row(
        record: dict[str, schemas.Scalar] = Body(...),
        service: TableService = Depends(get_table_service),
    ) -> JSONResponse:
        result = await service.insert(table, record)
        return _write_response(result, not_found_on_zero_rows=False)

    async def update_rows(
        request: schemas.UpdateRequest,
        service: TableService = Depends(get_table_service),
    ) -> JSONResponse:
        result = await service.update(table, request.criteria, request.updates)
        return _write_response(result, not_found_on_zero_rows=True)

    async def delete_rows(
        request: schemas.DeleteRequest,
        service: TableService = Depends(get_table_service),
    ) -> JSONResponse:
        result = await service.delete(table, request.criteria)
        return _write_response(result, not_found_on_zero_rows=True)

    async def count_rows(service: TableService = Depends(get_table_service)) -> JSONResponse:
        result = await service.count(table)
        count = result.value_or(-1)
        return JSONResponse(
            status_code=200 if count >= 0 else 500,
            content={"success": count >= 0, "count": count},
        )

    router.add_api_route(f"/{slug}", fetch_rows, methods=["GET"], name=f"fetch_{slug}")
    router.add_api_route(f"/{slug}/insert", insert_row, methods=["POST"], name=f"insert_{slug}")
    router.add_api_route(f"/{slug}/update", update_rows, methods=["POST"], name=f"update_{slug}")
    router.add_api_route(f"/{slug}/delete", delete_rows, methods=["POST"], name=f"delete_{slug}")
    router.add_api_route(f"/{slug}/count", count_rows, methods=["GET"], name=f"count_{slug}")


def build_router(registry: SchemaRegistry) -> APIRouter:
    router = APIRouter(prefix="/tables")

    @router.get("")
    async def list_tables() -> dict:
        tables = [
            schemas.TableInfo(
                name=schema.name,
                path=f"/tables/{schema.slug}",
                columns=list(schema.columns),
                primary_key=[c for c in schema.columns if c in schema.primary_key],
            )
            for schema in registry
        ]
        return {"tables": [t.model_dump() for t in tables], "count": len(tables)}

    for schema in registry:
        _add_table_routes(router, schema)

    return router
