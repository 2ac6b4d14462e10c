"""
Pydantic schemas for the generic table endpoints.
"""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr

# Column values accepted from JSON bodies. Strict, so JSON booleans are rejected.
Scalar = Union[StrictInt, StrictFloat, StrictStr, None]


class UpdateRequest(BaseModel):
    criteria: dict[str, Scalar] = Field(default_factory=dict)
    updates: dict[str, Scalar] = Field(default_factory=dict)


class DeleteRequest(BaseModel):
    criteria: dict[str, Scalar] = Field(default_factory=dict)


class TableInfo(BaseModel):
    name: str
    path: str
    columns: list[str]
    primary_key: list[str]
