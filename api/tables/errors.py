"""
Validation errors for the generic table layer.

All of these are raised before any SQL is sent. The HTTP layer maps them to
4xx responses (see `main.py`).
"""

from __future__ import annotations


class TableServiceError(ValueError):
    status_code = 400


class UnknownTable(TableServiceError):
    status_code = 404

    def __init__(self, table_name: str) -> None:
        super().__init__(f"Unknown table '{table_name}'.")
        self.table_name = table_name


class InvalidColumn(TableServiceError):
    def __init__(self, table_name: str, column: str, reason: str = "is not a column of") -> None:
        super().__init__(f"'{column}' {reason} table '{table_name}'.")
        self.table_name = table_name
        self.column = column


class EmptyRecord(TableServiceError):
    def __init__(self, table_name: str) -> None:
        super().__init__(f"Record for table '{table_name}' has no columns.")
        self.table_name = table_name


class EmptyCriteria(TableServiceError):
    def __init__(self, table_name: str) -> None:
        super().__init__(f"Criteria for table '{table_name}' must not be empty.")
        self.table_name = table_name


class EmptyUpdates(TableServiceError):
    def __init__(self, table_name: str) -> None:
        super().__init__(f"Updates for table '{table_name}' must not be empty.")
        self.table_name = table_name
