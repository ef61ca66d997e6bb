"""
Base connector

One subclass per supported engine. A subclass supplies the SQLAlchemy
driver name, driver-specific connect arguments (timeout, TLS) and its
catalog queries; connection handling, error mapping and result shaping
live here so every engine behaves the same way.
"""
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional

from sqlalchemy.engine import Connection, URL
from sqlalchemy.exc import SQLAlchemyError

from datagateway.core.config import settings
from datagateway.core.errors import DataSourceConnectionError, SchemaIntrospectionError, redact
from datagateway.connectors.catalog import build_table_schema
from datagateway.connectors.executor import execute_statement
from datagateway.connectors.lifecycle import driver_message, with_connection
from datagateway.dtos import ConnectionConfig
from datagateway.schemas import ConnectionResult, QueryResult, TableSchema

logger = logging.getLogger(__name__)


class Engine(str, Enum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLSERVER = "sqlserver"


class Connector(ABC):
    """Per-engine implementation of test / introspect / execute"""

    engine: ClassVar[Engine]
    driver: ClassVar[str]  # SQLAlchemy dialect+driver, e.g. "postgresql+psycopg2"

    # ------------------------------------------------------------------
    # Engine-specific hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def connect_args(self, config: ConnectionConfig, timeout_ms: Optional[int]) -> Dict[str, Any]:
        """DBAPI keyword arguments for connect timeout and TLS"""

    @abstractmethod
    def list_tables(self, conn: Connection, config: ConnectionConfig) -> List[str]:
        """Base tables of the introspected schema/catalog"""

    @abstractmethod
    def describe_table(self, conn: Connection, config: ConnectionConfig, table: str) -> List[Mapping[str, Any]]:
        """Catalog rows for one table, in ordinal column order"""

    def build_url(self, config: ConnectionConfig) -> URL:
        return URL.create(
            self.driver,
            username=config.username,
            password=config.password.get_secret_value(),
            host=config.host,
            port=config.port,
            database=config.database_name,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def _with_connection(self, config: ConnectionConfig, timeout_ms: Optional[int], fn):
        return with_connection(self.build_url(config), self.connect_args(config, timeout_ms), fn)

    def test_connection(self, config: ConnectionConfig) -> ConnectionResult:
        """
        Open a connection with a short timeout and run SELECT 1.

        Never raises for connection problems; the outcome is the result.
        """
        def ping(conn: Connection) -> None:
            conn.exec_driver_sql("SELECT 1").fetchone()

        try:
            self._with_connection(config, settings.TEST_CONNECTION_TIMEOUT_MS, ping)
        except DataSourceConnectionError as e:
            return ConnectionResult(success=False, error=e.message)
        except SQLAlchemyError as e:
            msg = driver_message(e)
            logger.warning(f"Connection test on {config.describe()} failed: {redact(msg)}")
            return ConnectionResult(success=False, error=msg)
        except Exception as e:  # drivers raising outside the DBAPI hierarchy (DNS, TLS setup)
            msg = driver_message(e)
            logger.warning(f"Connection test on {config.describe()} failed: {redact(msg)}")
            return ConnectionResult(success=False, error=msg)

        logger.info(f"Connection test on {config.describe()} succeeded")
        return ConnectionResult(success=True)

    def introspect(self, conn: Connection, config: ConnectionConfig) -> List[TableSchema]:
        """Run the catalog queries on an open connection, one table at a time"""
        tables: List[TableSchema] = []
        for name in self.list_tables(conn, config):
            tables.append(build_table_schema(name, self.describe_table(conn, config, name)))
        return tables

    def fetch_schema(self, config: ConnectionConfig) -> List[TableSchema]:
        """
        Introspect the whole data source.

        Raises:
            DataSourceConnectionError: the database could not be reached
            SchemaIntrospectionError: any catalog query failed; no partial result
        """
        def run(conn: Connection) -> List[TableSchema]:
            try:
                return self.introspect(conn, config)
            except SQLAlchemyError as e:
                msg = driver_message(e)
                logger.error(f"Introspection of {config.describe()} failed: {redact(msg)}")
                raise SchemaIntrospectionError(msg) from e

        tables = self._with_connection(config, settings.QUERY_TIMEOUT_MS, run)
        logger.info(f"Introspected {len(tables)} table(s) on {config.describe()}")
        return tables

    def execute_query(self, config: ConnectionConfig, sql: str) -> QueryResult:
        """
        Run one statement. Failures come back as QueryResult.error, never raised.
        """
        try:
            result = self._with_connection(config, settings.QUERY_TIMEOUT_MS, lambda conn: execute_statement(conn, sql))
        except DataSourceConnectionError as e:
            return QueryResult.failed(e.message)
        except SQLAlchemyError as e:
            msg = driver_message(e)
            logger.info(f"Query on {config.describe()} failed: {redact(msg)}")
            return QueryResult.failed(msg)
        except Exception as e:  # non-DBAPI driver errors, e.g. undecodable values
            msg = driver_message(e)
            logger.warning(f"Query on {config.describe()} failed: {redact(msg)}")
            return QueryResult.failed(msg)

        logger.info(f"Query on {config.describe()} returned {result.row_count} row(s)")
        return result
