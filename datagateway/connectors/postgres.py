"""
PostgreSQL connector (psycopg2)
"""
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import text as sqltext
from sqlalchemy.engine import Connection

from datagateway.connectors.base import Connector, Engine
from datagateway.connectors.catalog import table_names
from datagateway.connectors.lifecycle import timeout_seconds
from datagateway.dtos import ConnectionConfig

# Only the default schema is introspected
PUBLIC_SCHEMA = "public"

_TABLES_SQL = sqltext("""
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = :schema
      AND table_type = 'BASE TABLE'
    ORDER BY table_name
""")

# Foreign key columns are paired with the referenced columns by position,
# so composite keys map column to column
_COLUMNS_SQL = sqltext("""
    SELECT
        c.column_name,
        c.data_type,
        c.is_nullable,
        (pk.column_name IS NOT NULL) AS is_primary_key,
        (fk.column_name IS NOT NULL) AS is_foreign_key,
        fk.foreign_table_name,
        fk.foreign_column_name
    FROM information_schema.columns c
    LEFT JOIN (
        SELECT kcu.table_name, kcu.column_name
        FROM information_schema.table_constraints tc
        JOIN information_schema.key_column_usage kcu
          ON tc.constraint_name = kcu.constraint_name
         AND tc.table_schema = kcu.table_schema
         AND tc.table_name = kcu.table_name
        WHERE tc.constraint_type = 'PRIMARY KEY'
          AND tc.table_schema = :schema
    ) pk
      ON pk.table_name = c.table_name
     AND pk.column_name = c.column_name
    LEFT JOIN (
        SELECT
            kcu.table_name,
            kcu.column_name,
            ref.table_name AS foreign_table_name,
            ref.column_name AS foreign_column_name
        FROM information_schema.referential_constraints rc
        JOIN information_schema.key_column_usage kcu
          ON rc.constraint_name = kcu.constraint_name
         AND rc.constraint_schema = kcu.constraint_schema
        JOIN information_schema.key_column_usage ref
          ON rc.unique_constraint_name = ref.constraint_name
         AND rc.unique_constraint_schema = ref.constraint_schema
         AND kcu.position_in_unique_constraint = ref.ordinal_position
        WHERE kcu.table_schema = :schema
    ) fk
      ON fk.table_name = c.table_name
     AND fk.column_name = c.column_name
    WHERE c.table_schema = :schema
      AND c.table_name = :table
    ORDER BY c.ordinal_position
""")


class PostgresConnector(Connector):
    engine = Engine.POSTGRESQL
    driver = "postgresql+psycopg2"

    def connect_args(self, config: ConnectionConfig, timeout_ms: Optional[int]) -> Dict[str, Any]:
        args: Dict[str, Any] = {"sslmode": "require" if config.use_tls else "prefer"}
        seconds = timeout_seconds(timeout_ms)
        if seconds:
            args["connect_timeout"] = seconds
        return args

    def list_tables(self, conn: Connection, config: ConnectionConfig) -> List[str]:
        return table_names(conn.execute(_TABLES_SQL, {"schema": PUBLIC_SCHEMA}))

    def describe_table(self, conn: Connection, config: ConnectionConfig, table: str) -> List[Mapping[str, Any]]:
        return list(conn.execute(_COLUMNS_SQL, {"schema": PUBLIC_SCHEMA, "table": table}).mappings())
