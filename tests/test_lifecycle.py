import logging

import pytest
from sqlalchemy.engine import URL
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import NullPool

from datagateway.connectors import lifecycle
from datagateway.connectors.mysql import MySqlConnector
from datagateway.connectors.postgres import PostgresConnector
from datagateway.connectors.sqlserver import SqlServerConnector
from datagateway.core.errors import DataSourceConnectionError
from datagateway.dtos import ConnectionConfig

URL_ = URL.create("postgresql+psycopg2", username="u", password="pw", host="db", port=5432, database="d")


class CountingConnection:
    def __init__(self):
        self.closed = 0

    def close(self):
        self.closed += 1


class CountingEngine:
    def __init__(self, fail_connect=False):
        self.fail_connect = fail_connect
        self.connections = []
        self.disposed = 0

    def connect(self):
        if self.fail_connect:
            raise OperationalError("connect", {}, Exception('password authentication failed for user "u"'))
        conn = CountingConnection()
        self.connections.append(conn)
        return conn

    def dispose(self):
        self.disposed += 1


@pytest.fixture
def engines(monkeypatch):
    created = []

    def fake_create_engine(url, **kwargs):
        assert kwargs["poolclass"] is NullPool
        engine = CountingEngine(fail_connect=url.host == "unreachable")
        engine.kwargs = kwargs
        created.append(engine)
        return engine

    monkeypatch.setattr(lifecycle, "create_engine", fake_create_engine)
    return created


def test_connection_released_once_on_success(engines):
    assert lifecycle.with_connection(URL_, {"connect_timeout": 5}, lambda conn: "ok") == "ok"

    (engine,) = engines
    assert engine.kwargs["connect_args"] == {"connect_timeout": 5}
    assert [c.closed for c in engine.connections] == [1]
    assert engine.disposed == 1


def test_connection_released_once_when_work_fails(engines):
    def boom(conn):
        raise RuntimeError("query blew up")

    with pytest.raises(RuntimeError):
        lifecycle.with_connection(URL_, None, boom)

    (engine,) = engines
    assert [c.closed for c in engine.connections] == [1]
    assert engine.disposed == 1


def test_connect_failure_maps_to_connection_error(engines):
    with pytest.raises(DataSourceConnectionError) as exc:
        lifecycle.with_connection(URL_.set(host="unreachable"), None, lambda conn: None)

    assert exc.value.status_code == 400
    assert exc.value.message == 'password authentication failed for user "u"'
    (engine,) = engines
    assert engine.connections == []
    assert engine.disposed == 1


def test_every_operation_gets_its_own_connection(engines):
    for _ in range(3):
        lifecycle.with_connection(URL_, None, lambda conn: None)
    assert len(engines) == 3
    assert all(e.disposed == 1 for e in engines)


def test_connection_test_never_raises(engines):
    config = ConnectionConfig(
        engine="postgresql", host="unreachable", port=5432, database_name="d",
        username="u", password="pw", organization_id="org",
    )
    result = PostgresConnector().test_connection(config)
    assert result.success is False
    assert "password authentication failed" in result.error


def test_timeout_seconds():
    assert lifecycle.timeout_seconds(None) is None
    assert lifecycle.timeout_seconds(0) is None
    assert lifecycle.timeout_seconds(5000) == 5
    assert lifecycle.timeout_seconds(1500) == 2
    assert lifecycle.timeout_seconds(10) == 1


def test_postgres_connect_args():
    config = ConnectionConfig(engine="postgresql", host="h", port=1, database_name="d", username="u", use_tls=True)
    args = PostgresConnector().connect_args(config, 5000)
    assert args == {"sslmode": "require", "connect_timeout": 5}

    plain = config.model_copy(update={"use_tls": False})
    assert PostgresConnector().connect_args(plain, 0) == {"sslmode": "prefer"}


def test_mysql_connect_args():
    config = ConnectionConfig(engine="mysql", host="h", port=3306, database_name="d", username="u", use_tls=True)
    assert MySqlConnector().connect_args(config, 5000) == {
        "charset": "utf8mb4",
        "ssl": {"check_hostname": False},
        "connect_timeout": 5,
    }
    plain = config.model_copy(update={"use_tls": False})
    assert MySqlConnector().connect_args(plain, None) == {"charset": "utf8mb4"}


def test_sqlserver_connect_args():
    config = ConnectionConfig(engine="sqlserver", host="h", port=1433, database_name="d", username="u", use_tls=True)
    assert SqlServerConnector().connect_args(config, 1500) == {
        "tds_version": "7.4",
        "encryption": "require",
        "login_timeout": 2,
    }
    plain = config.model_copy(update={"use_tls": False})
    assert SqlServerConnector().connect_args(plain, 0) == {}


class RefusingEngine(CountingEngine):
    def connect(self):
        raise OperationalError("connect", {}, Exception("bad login; password=hunter2"))


def test_connect_failure_log_is_redacted(monkeypatch, caplog):
    monkeypatch.setattr(lifecycle, "create_engine", lambda url, **kwargs: RefusingEngine())
    with caplog.at_level(logging.WARNING, logger=lifecycle.__name__):
        with pytest.raises(DataSourceConnectionError):
            lifecycle.with_connection(URL_, None, lambda conn: None)

    assert "hunter2" not in caplog.text
    assert "password=****" in caplog.text
