"""
Generic table service.

Every operation:
- resolves the table through the registry
- validates and normalizes payloads (raising `TableServiceError` before SQL)
- runs exactly one statement on one pooled connection
- returns an `OperationResult` instead of swallowing driver errors

Choosing a sentinel for failures (empty list, False, -1) is left to the
caller; see `tables/router.py`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from core.db import EXECUTION_ERRORS, Database

from . import sql
from .errors import EmptyCriteria, EmptyRecord, EmptyUpdates
from .registry import REGISTRY, SchemaRegistry, TableSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult:
    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: Any) -> Any:
        return self.value if self.ok else default


class TableService:
    def __init__(self, database: Database, registry: SchemaRegistry = REGISTRY) -> None:
        self.database = database
        self.registry = registry

    def schema(self, table_name: str) -> TableSchema:
        return self.registry.get(table_name)

    async def fetch(self, table_name: str) -> OperationResult:
        """
        All rows of a table, projected onto the declared columns.

        No ORDER BY: callers must not rely on row order.
        """
        schema = self.schema(table_name)
        try:
            rows = await self.database.fetch_all(sql.select_all(schema))
        except EXECUTION_ERRORS as exc:
            logger.exception("table_fetch_failed table=%s", schema.name)
            return OperationResult(error=exc)
        return OperationResult(value=[sql.row_to_record(schema, row) for row in rows])

    async def insert(self, table_name: str, record: Mapping[str, Any] | None) -> OperationResult:
        schema = self.schema(table_name)
        values = sql.normalize_record(schema, record)
        if not values:
            raise EmptyRecord(schema.name)

        statement, args = sql.insert_one(schema, values)
        return await self._execute(schema, "insert", statement, args)

    async def update(
        self,
        table_name: str,
        criteria: Mapping[str, Any] | None,
        updates: Mapping[str, Any] | None,
    ) -> OperationResult:
        schema = self.schema(table_name)
        where = sql.normalize_record(schema, criteria)
        if not where:
            raise EmptyCriteria(schema.name)
        changes = sql.normalize_record(schema, updates)
        if not changes:
            raise EmptyUpdates(schema.name)

        statement, args = sql.update_where(schema, where, changes)
        return await self._execute(schema, "update", statement, args)

    async def delete(self, table_name: str, criteria: Mapping[str, Any] | None) -> OperationResult:
        schema = self.schema(table_name)
        where = sql.normalize_record(schema, criteria)
        if not where:
            raise EmptyCriteria(schema.name)

        statement, args = sql.delete_where(schema, where)
        return await self._execute(schema, "delete", statement, args)

    async def count(self, table_name: str) -> OperationResult:
        schema = self.schema(table_name)
        try:
            n = await self.database.fetch_value(sql.count_rows(schema))
        except EXECUTION_ERRORS as exc:
            logger.exception("table_count_failed table=%s", schema.name)
            return OperationResult(error=exc)
        return OperationResult(value=int(n or 0))

    async def _execute(
        self,
        schema: TableSchema,
        action: str,
        statement: str,
        args: list[Any],
    ) -> OperationResult:
        try:
            status = await self.database.execute(statement, *args)
        except EXECUTION_ERRORS as exc:
            logger.exception("table_%s_failed table=%s", action, schema.name)
            return OperationResult(error=exc)

        affected = sql.rows_affected(status)
        logger.debug("table_%s table=%s rows=%s", action, schema.name, affected)
        return OperationResult(value=affected > 0)
