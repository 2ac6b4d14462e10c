"""
Static registry of the tables exposed through the generic CRUD layer.

Adding a table means adding one `TableSchema` below (and its DDL in
`db/init.sql`). Identifiers listed here are the only ones ever interpolated
into SQL text.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .errors import UnknownTable

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def validate_identifier(name: str) -> bool:
    """
    Non-empty, at most 63 chars (PostgreSQL limit), letters/digits/underscores,
    not starting with a digit.
    """
    if not isinstance(name, str) or not name or len(name) > 63:
        return False
    return _IDENTIFIER.fullmatch(name) is not None


@dataclass(frozen=True)
class TableSchema:
    name: str
    columns: tuple[str, ...]
    primary_key: frozenset[str]
    _by_folded: dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not validate_identifier(self.name):
            raise ValueError(f"Invalid table name in registry: {self.name!r}")
        if not self.columns:
            raise ValueError(f"Table {self.name} declares no columns.")

        by_folded: dict[str, str] = {}
        for col in self.columns:
            if not validate_identifier(col):
                raise ValueError(f"Invalid column name in registry: {self.name}.{col!r}")
            folded = col.lower()
            if folded in by_folded:
                raise ValueError(f"Duplicate column {self.name}.{col} (case-insensitive).")
            by_folded[folded] = col

        missing = [k for k in self.primary_key if k not in self.columns]
        if missing:
            raise ValueError(f"Primary key of {self.name} references unknown columns: {sorted(missing)}")

        object.__setattr__(self, "_by_folded", by_folded)

    @property
    def slug(self) -> str:
        return self.name.lower()

    def column_for(self, key: str) -> str | None:
        """Canonical column name for `key` (case-insensitive), or None."""
        if not isinstance(key, str):
            return None
        return self._by_folded.get(key.lower())


def table(name: str, columns: Iterable[str], primary_key: Iterable[str]) -> TableSchema:
    return TableSchema(name=name, columns=tuple(columns), primary_key=frozenset(primary_key))


class SchemaRegistry:
    def __init__(self, schemas: Iterable[TableSchema]) -> None:
        self._schemas: dict[str, TableSchema] = {}
        self._by_folded: dict[str, TableSchema] = {}
        for schema in schemas:
            folded = schema.name.lower()
            if folded in self._by_folded:
                raise ValueError(f"Table {schema.name} is registered twice.")
            self._schemas[schema.name] = schema
            self._by_folded[folded] = schema

    def get(self, name: str) -> TableSchema:
        schema = self._schemas.get(name)
        if schema is None and isinstance(name, str):
            schema = self._by_folded.get(name.lower())
        if schema is None:
            raise UnknownTable(str(name))
        return schema

    def names(self) -> list[str]:
        return list(self._schemas)

    def __iter__(self) -> Iterator[TableSchema]:
        return iter(self._schemas.values())

    def __len__(self) -> int:
        return len(self._schemas)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._by_folded


REGISTRY = SchemaRegistry(
    [
        table("Location", ["LocationID", "Name", "Region"], ["LocationID"]),
        table(
            "Preference",
            ["PreferenceID", "Distance", "Duration", "Elevation", "Difficulty"],
            ["PreferenceID"],
        ),
        table(
            "AppUser",
            ["UserID", "Name", "PreferenceID", "Email", "PhoneNumber"],
            ["UserID"],
        ),
        table(
            "Hike1",
            ["Kind", "Distance", "Elevation", "Duration", "Difficulty"],
            ["Kind", "Distance", "Elevation", "Duration"],
        ),
        table(
            "Hike2",
            [
                "HikeID",
                "Name",
                "Season",
                "TrailCondition",
                "Kind",
                "Distance",
                "Elevation",
                "Duration",
                "LocationID",
            ],
            ["HikeID"],
        ),
        table("SafetyHazard", ["SafetyHazardID", "Kind", "Severity"], ["SafetyHazardID"]),
        table("Has", ["HikeID", "SafetyHazardID"], ["HikeID", "SafetyHazardID"]),
        table("Saves", ["UserID", "HikeID"], ["UserID", "HikeID"]),
        table(
            "Feedback",
            ["FeedbackID", "UserID", "HikeID", "Rating", "Comment"],
            ["FeedbackID"],
        ),
    ]
)
