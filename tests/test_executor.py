"""
Runs the shared connector pipeline (lifecycle, executor, catalog) against a
real SQLite file, using a small connector that only swaps the driver and the
catalog queries.
"""
import pytest
from sqlalchemy import text as sqltext
from sqlalchemy.engine import URL

from datagateway.connectors.base import Connector, Engine
from datagateway.core.errors import DataSourceConnectionError, SchemaIntrospectionError
from datagateway.dtos import ConnectionConfig


class SqliteConnector(Connector):
    engine = Engine.POSTGRESQL
    driver = "sqlite"

    def build_url(self, config):
        return URL.create(self.driver, database=config.database_name)

    def connect_args(self, config, timeout_ms):
        return {}

    def list_tables(self, conn, config):
        rows = conn.execute(sqltext(
            "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
        ))
        return [r[0] for r in rows]

    def describe_table(self, conn, config, table):
        fks = {
            fk["from"]: fk
            for fk in conn.exec_driver_sql(f"PRAGMA foreign_key_list('{table}')").mappings()
        }
        rows = []
        for col in conn.exec_driver_sql(f"PRAGMA table_info('{table}')").mappings():
            fk = fks.get(col["name"])
            rows.append({
                "column_name": col["name"],
                "data_type": col["type"],
                "is_nullable": "NO" if col["notnull"] or col["pk"] else "YES",
                "is_primary_key": col["pk"] > 0,
                "is_foreign_key": fk is not None,
                "foreign_table_name": fk["table"] if fk else None,
                "foreign_column_name": fk["to"] if fk else None,
            })
        return rows


@pytest.fixture
def config(tmp_path):
    return ConnectionConfig(
        engine="postgresql", host="localhost", port=1, username="u",
        database_name=str(tmp_path / "tenant.db"), organization_id="org",
    )


@pytest.fixture
def connector(config):
    c = SqliteConnector()
    for sql in [
        "CREATE TABLE customers (id INTEGER PRIMARY KEY, name TEXT)",
        "CREATE TABLE orders (id INTEGER PRIMARY KEY, customer_id INTEGER NOT NULL "
        "REFERENCES customers(id), total NUMERIC)",
        "INSERT INTO customers (id, name) VALUES (1, 'Ada'), (2, 'Linus')",
        "INSERT INTO orders (id, customer_id, total) VALUES (10, 1, 99.5)",
    ]:
        assert c.execute_query(config, sql).error is None
    return c


def test_select_keeps_column_order(connector, config):
    result = connector.execute_query(config, "SELECT name, id FROM customers ORDER BY id")

    assert result.error is None
    assert result.columns == ["name", "id"]
    assert result.rows == [["Ada", 1], ["Linus", 2]]
    assert result.row_count == 2


def test_empty_result_set_keeps_columns(connector, config):
    result = connector.execute_query(config, "SELECT id, name FROM customers WHERE id < 0")
    assert result.columns == ["id", "name"]
    assert result.rows == []
    assert result.row_count == 0


def test_statement_is_not_parsed_for_parameters(connector, config):
    result = connector.execute_query(config, "SELECT ':name' AS literal, '%s' AS pct")
    assert result.rows == [[":name", "%s"]]


def test_dml_reports_affected_rows_and_commits(connector, config):
    result = connector.execute_query(config, "UPDATE customers SET name = upper(name)")
    assert result.error is None
    assert result.columns == []
    assert result.row_count == 2

    again = connector.execute_query(config, "SELECT name FROM customers ORDER BY id")
    assert again.rows == [["ADA"], ["LINUS"]]


def test_engine_error_is_returned_as_value(connector, config):
    result = connector.execute_query(config, "SELECT * FROM nope")

    assert result.error == "no such table: nope"
    assert result.columns == []
    assert result.rows == []
    assert result.row_count == 0


def test_fetch_schema(connector, config):
    tables = connector.fetch_schema(config)

    assert [t.name for t in tables] == ["customers", "orders"]
    orders = tables[1]
    assert [c.name for c in orders.columns] == ["id", "customer_id", "total"]
    assert orders.columns[0].is_primary_key
    assert orders.columns[1].is_foreign_key
    assert orders.columns[1].references.table == "customers"
    assert orders.columns[1].nullable is False
    assert orders.columns[2].declared_type == "NUMERIC"


def test_catalog_failure_raises_without_partial_schema(connector, config, monkeypatch):
    def broken(conn, cfg, table):
        if table == "orders":
            conn.exec_driver_sql("SELECT * FROM missing_catalog")
        return []

    monkeypatch.setattr(connector, "describe_table", broken)
    with pytest.raises(SchemaIntrospectionError) as exc:
        connector.fetch_schema(config)
    assert exc.value.status_code == 500


def test_unreachable_database(config, tmp_path):
    missing = config.model_copy(update={"database_name": str(tmp_path / "no" / "such" / "dir.db")})
    connector = SqliteConnector()

    assert connector.test_connection(missing).success is False
    assert connector.execute_query(missing, "SELECT 1").error
    with pytest.raises(DataSourceConnectionError):
        connector.fetch_schema(missing)


def test_connection_test_succeeds(connector, config):
    result = connector.test_connection(config)
    assert result.success is True
    assert result.error is None


def test_blob_columns_serialize(connector, config):
    assert connector.execute_query(config, "CREATE TABLE files (id INTEGER, body BLOB)").error is None
    assert connector.execute_query(config, "INSERT INTO files VALUES (1, x'00ff'), (2, x'6869')").error is None

    result = connector.execute_query(config, "SELECT id, body FROM files ORDER BY id")

    assert result.error is None
    assert result.model_dump(mode="json")["rows"] == [[1, "\\x00ff"], [2, "hi"]]
