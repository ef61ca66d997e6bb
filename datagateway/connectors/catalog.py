"""
Catalog normalisation shared by all engines.

Each connector runs its own catalog query per table and hands the rows here.
Rows must expose: column_name, data_type, is_nullable, is_primary_key,
is_foreign_key, foreign_table_name, foreign_column_name.
"""
from typing import Any, Dict, Iterable, List, Mapping

from datagateway.schemas import ColumnSchema, ForeignKeyRef, TableSchema


def _flag(value: Any) -> bool:
    # drivers return bool, 0/1 or '0'/'1' depending on engine
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "t", "yes"}
    return bool(value)


def build_table_schema(table_name: str, rows: Iterable[Mapping[str, Any]]) -> TableSchema:
    """
    Fold catalog rows into one TableSchema.

    Constraint joins can return a column more than once (composite keys, a
    column that is both PK and FK); duplicates are merged by name, flags are
    OR-ed and the first reference wins. Column order is the order of first
    appearance, which is ordinal order since the queries sort by it.
    """
    columns: Dict[str, Dict[str, Any]] = {}

    for row in rows:
        name = row["column_name"]
        is_fk = _flag(row.get("is_foreign_key"))
        ref = None
        if is_fk and row.get("foreign_table_name"):
            ref = {"table": row["foreign_table_name"], "column": row.get("foreign_column_name")}

        col = columns.get(name)
        if col is None:
            columns[name] = {
                "name": name,
                "declared_type": str(row.get("data_type") or ""),
                "nullable": str(row.get("is_nullable", "")).upper() == "YES",
                "is_primary_key": _flag(row.get("is_primary_key")),
                "is_foreign_key": is_fk,
                "references": ref,
            }
            continue

        col["is_primary_key"] = col["is_primary_key"] or _flag(row.get("is_primary_key"))
        col["is_foreign_key"] = col["is_foreign_key"] or is_fk
        if col["references"] is None and ref is not None:
            col["references"] = ref

    return TableSchema(
        name=table_name,
        columns=[
            ColumnSchema(
                name=c["name"],
                declared_type=c["declared_type"],
                nullable=c["nullable"],
                is_primary_key=c["is_primary_key"],
                is_foreign_key=c["is_foreign_key"],
                references=ForeignKeyRef(**c["references"]) if c["references"] else None,
            )
            for c in columns.values()
        ],
    )


def table_names(rows: Iterable[Any]) -> List[str]:
    """First column of each row, as produced by the per-engine table listing"""
    return [row[0] for row in rows]
