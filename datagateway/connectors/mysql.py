"""
MySQL connector (PyMySQL)
"""
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import text as sqltext
from sqlalchemy.engine import Connection

from datagateway.connectors.base import Connector, Engine
from datagateway.connectors.catalog import table_names
from datagateway.connectors.lifecycle import timeout_seconds
from datagateway.dtos import ConnectionConfig

# information_schema labels come back upper-case on MySQL 8 unless aliased
_TABLES_SQL = sqltext("""
    SELECT TABLE_NAME AS table_name
    FROM information_schema.TABLES
    WHERE TABLE_SCHEMA = :db
      AND TABLE_TYPE = 'BASE TABLE'
    ORDER BY TABLE_NAME
""")

_COLUMNS_SQL = sqltext("""
    SELECT
        c.COLUMN_NAME AS column_name,
        c.DATA_TYPE AS data_type,
        c.IS_NULLABLE AS is_nullable,
        CASE WHEN pk.COLUMN_NAME IS NOT NULL THEN 1 ELSE 0 END AS is_primary_key,
        CASE WHEN fk.REFERENCED_TABLE_NAME IS NOT NULL THEN 1 ELSE 0 END AS is_foreign_key,
        fk.REFERENCED_TABLE_NAME AS foreign_table_name,
        fk.REFERENCED_COLUMN_NAME AS foreign_column_name
    FROM information_schema.COLUMNS c
    LEFT JOIN information_schema.KEY_COLUMN_USAGE pk
      ON pk.TABLE_SCHEMA = c.TABLE_SCHEMA
     AND pk.TABLE_NAME = c.TABLE_NAME
     AND pk.COLUMN_NAME = c.COLUMN_NAME
     AND pk.CONSTRAINT_NAME = 'PRIMARY'
    LEFT JOIN information_schema.KEY_COLUMN_USAGE fk
      ON fk.TABLE_SCHEMA = c.TABLE_SCHEMA
     AND fk.TABLE_NAME = c.TABLE_NAME
     AND fk.COLUMN_NAME = c.COLUMN_NAME
     AND fk.REFERENCED_TABLE_NAME IS NOT NULL
    WHERE c.TABLE_SCHEMA = :db
      AND c.TABLE_NAME = :table
    ORDER BY c.ORDINAL_POSITION
""")


class MySqlConnector(Connector):
    engine = Engine.MYSQL
    driver = "mysql+pymysql"

    def connect_args(self, config: ConnectionConfig, timeout_ms: Optional[int]) -> Dict[str, Any]:
        args: Dict[str, Any] = {"charset": "utf8mb4"}
        if config.use_tls:
            # TLS on, no CA pinning
            args["ssl"] = {"check_hostname": False}
        seconds = timeout_seconds(timeout_ms)
        if seconds:
            args["connect_timeout"] = seconds
        return args

    def list_tables(self, conn: Connection, config: ConnectionConfig) -> List[str]:
        return table_names(conn.execute(_TABLES_SQL, {"db": config.database_name}))

    def describe_table(self, conn: Connection, config: ConnectionConfig, table: str) -> List[Mapping[str, Any]]:
        return list(conn.execute(_COLUMNS_SQL, {"db": config.database_name, "table": table}).mappings())
