"""
SQL Server connector (pymssql)
"""
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import text as sqltext
from sqlalchemy.engine import Connection

from datagateway.connectors.base import Connector, Engine
from datagateway.connectors.catalog import table_names
from datagateway.connectors.lifecycle import timeout_seconds
from datagateway.dtos import ConnectionConfig

DEFAULT_SCHEMA = "dbo"

_TABLES_SQL = sqltext("""
    SELECT TABLE_NAME AS table_name
    FROM INFORMATION_SCHEMA.TABLES
    WHERE TABLE_SCHEMA = :schema
      AND TABLE_TYPE = 'BASE TABLE'
    ORDER BY TABLE_NAME
""")

_COLUMNS_SQL = sqltext("""
    SELECT
        c.COLUMN_NAME AS column_name,
        c.DATA_TYPE AS data_type,
        c.IS_NULLABLE AS is_nullable,
        CASE WHEN pk.COLUMN_NAME IS NOT NULL THEN 1 ELSE 0 END AS is_primary_key,
        CASE WHEN fk.COLUMN_NAME IS NOT NULL THEN 1 ELSE 0 END AS is_foreign_key,
        fk.foreign_table_name,
        fk.foreign_column_name
    FROM INFORMATION_SCHEMA.COLUMNS c
    LEFT JOIN (
        SELECT ku.TABLE_NAME, ku.COLUMN_NAME
        FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc
        JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE ku
          ON tc.CONSTRAINT_NAME = ku.CONSTRAINT_NAME
         AND tc.TABLE_SCHEMA = ku.TABLE_SCHEMA
        WHERE tc.CONSTRAINT_TYPE = 'PRIMARY KEY'
          AND tc.TABLE_SCHEMA = :schema
    ) pk
      ON pk.TABLE_NAME = c.TABLE_NAME
     AND pk.COLUMN_NAME = c.COLUMN_NAME
    LEFT JOIN (
        SELECT
            ku.TABLE_NAME,
            ku.COLUMN_NAME,
            ref.TABLE_NAME AS foreign_table_name,
            ref.COLUMN_NAME AS foreign_column_name
        FROM INFORMATION_SCHEMA.REFERENTIAL_CONSTRAINTS rc
        JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE ku
          ON rc.CONSTRAINT_NAME = ku.CONSTRAINT_NAME
         AND rc.CONSTRAINT_SCHEMA = ku.CONSTRAINT_SCHEMA
        JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE ref
          ON rc.UNIQUE_CONSTRAINT_NAME = ref.CONSTRAINT_NAME
         AND rc.UNIQUE_CONSTRAINT_SCHEMA = ref.CONSTRAINT_SCHEMA
         AND ku.ORDINAL_POSITION = ref.ORDINAL_POSITION
        WHERE ku.TABLE_SCHEMA = :schema
    ) fk
      ON fk.TABLE_NAME = c.TABLE_NAME
     AND fk.COLUMN_NAME = c.COLUMN_NAME
    WHERE c.TABLE_SCHEMA = :schema
      AND c.TABLE_NAME = :table
    ORDER BY c.ORDINAL_POSITION
""")


class SqlServerConnector(Connector):
    engine = Engine.SQLSERVER
    driver = "mssql+pymssql"

    def connect_args(self, config: ConnectionConfig, timeout_ms: Optional[int]) -> Dict[str, Any]:
        args: Dict[str, Any] = {}
        if config.use_tls:
            args["tds_version"] = "7.4"
            args["encryption"] = "require"
        seconds = timeout_seconds(timeout_ms)
        if seconds:
            args["login_timeout"] = seconds
        return args

    def list_tables(self, conn: Connection, config: ConnectionConfig) -> List[str]:
        return table_names(conn.execute(_TABLES_SQL, {"schema": DEFAULT_SCHEMA}))

    def describe_table(self, conn: Connection, config: ConnectionConfig, table: str) -> List[Mapping[str, Any]]:
        return list(conn.execute(_COLUMNS_SQL, {"schema": DEFAULT_SCHEMA, "table": table}).mappings())
