"""
Statement builders for the generic table layer.

Only identifiers taken from a `TableSchema` are placed into SQL text; every
value is bound as an asyncpg positional parameter.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .errors import InvalidColumn
from .registry import TableSchema

Record = dict[str, Any]


def normalize_record(schema: TableSchema, record: Mapping[str, Any] | None) -> Record:
    """
    Map every key of `record` onto the schema's canonical column name.

    Unknown keys are rejected rather than dropped, and two keys folding onto
    the same column (e.g. "name" and "Name") are rejected as ambiguous.
    Column order follows the schema, not the payload.
    """
    resolved: dict[str, Any] = {}
    for key, value in (record or {}).items():
        column = schema.column_for(key)
        if column is None:
            raise InvalidColumn(schema.name, str(key))
        if column in resolved:
            raise InvalidColumn(schema.name, str(key), reason="duplicates another key for a column of")
        resolved[column] = value
    return {col: resolved[col] for col in schema.columns if col in resolved}


def _where_clause(criteria: Record, start: int) -> tuple[str, list[Any]]:
    """
    AND-combined equality predicate. None matches NULL.
    """
    conditions: list[str] = []
    args: list[Any] = []
    for column, value in criteria.items():
        if value is None:
            conditions.append(f"{column} IS NULL")
            continue
        args.append(value)
        conditions.append(f"{column} = ${start + len(args) - 1}")
    return " AND ".join(conditions), args


def select_all(schema: TableSchema) -> str:
    return f"SELECT {', '.join(schema.columns)} FROM {schema.name}"


def count_rows(schema: TableSchema) -> str:
    return f"SELECT count(*) FROM {schema.name}"


def insert_one(schema: TableSchema, record: Record) -> tuple[str, list[Any]]:
    columns = list(record)
    placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
    sql = f"INSERT INTO {schema.name} ({', '.join(columns)}) VALUES ({placeholders})"
    return sql, [record[c] for c in columns]


def update_where(schema: TableSchema, criteria: Record, updates: Record) -> tuple[str, list[Any]]:
    assignments = [f"{column} = ${i}" for i, column in enumerate(updates, start=1)]
    args = list(updates.values())
    where, where_args = _where_clause(criteria, start=len(args) + 1)
    sql = f"UPDATE {schema.name} SET {', '.join(assignments)} WHERE {where}"
    return sql, args + where_args


def delete_where(schema: TableSchema, criteria: Record) -> tuple[str, list[Any]]:
    where, args = _where_clause(criteria, start=1)
    return f"DELETE FROM {schema.name} WHERE {where}", args


def rows_affected(status: str | None) -> int:
    """
    Row count from an asyncpg status tag: "INSERT 0 1" -> 1, "UPDATE 3" -> 3.
    """
    if not status:
        return 0
    tail = status.strip().rsplit(" ", 1)[-1]
    try:
        return int(tail)
    except ValueError:
        return 0


def row_to_record(schema: TableSchema, row: Mapping[str, Any]) -> Record:
    """
    Re-key a result row with canonical column names.

    PostgreSQL folds unquoted identifiers to lower case, so the driver hands
    back "userid" for UserID. Rows come from `select_all`, whose projection
    order matches `schema.columns`.
    """
    return dict(zip(schema.columns, row.values()))
