"""
Normalized shapes returned by every connector, whatever the engine.
"""
from typing import Any, List, Optional
from pydantic import Field, field_serializer

from datagateway.schemas.base import ApiModel


def binary_to_text(value: Any) -> Any:
    """
    bytea / BLOB / varbinary values as JSON text: UTF-8 when it decodes,
    otherwise a \\x-prefixed hex string.
    """
    if isinstance(value, memoryview):
        value = value.tobytes()
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            return "\\x" + bytes(value).hex()
    return value


class ForeignKeyRef(ApiModel):
    table: str
    column: str


class ColumnSchema(ApiModel):
    name: str
    declared_type: str = Field(alias="type")  # engine-native type name
    nullable: bool
    is_primary_key: bool = False
    is_foreign_key: bool = False
    references: Optional[ForeignKeyRef] = None


class TableSchema(ApiModel):
    name: str
    columns: List[ColumnSchema] = Field(default_factory=list)


class QueryResult(ApiModel):
    columns: List[str] = Field(default_factory=list)
    rows: List[List[Any]] = Field(default_factory=list)
    row_count: int = 0
    error: Optional[str] = None

    @field_serializer("rows")
    def _serialize_rows(self, rows: List[List[Any]]) -> List[List[Any]]:
        return [[binary_to_text(v) for v in row] for row in rows]

    @classmethod
    def failed(cls, message: str) -> "QueryResult":
        return cls(columns=[], rows=[], row_count=0, error=message)


class ConnectionResult(ApiModel):
    success: bool
    error: Optional[str] = None
