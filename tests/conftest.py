import os
import uuid

import pytest
from cryptography.fernet import Fernet

# Settings are read at import, so the environment must be in place first
os.environ.setdefault("FERNET_KEY", Fernet.generate_key().decode())
os.environ["CONFIG_DB_URL"] = "sqlite://"
os.environ["AI_API_KEY"] = ""
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from datagateway.main import app  # noqa: E402
from datagateway.connectors import Connector, ConnectorRegistry, Engine, get_registry  # noqa: E402
from datagateway.core.database import get_db  # noqa: E402
from datagateway.core.errors import DataSourceConnectionError  # noqa: E402
from datagateway.schemas import ColumnSchema, ConnectionResult, QueryResult, TableSchema  # noqa: E402


class FakeConnector(Connector):
    """Records every gateway call and answers from canned values; never opens a socket"""

    engine = Engine.POSTGRESQL
    driver = "postgresql+psycopg2"

    def __init__(self):
        self.calls = []
        self.reachable = True
        self.query_result = QueryResult(columns=["n"], rows=[[1]], row_count=1)
        self.tables = [
            TableSchema(name="customers", columns=[
                ColumnSchema(name="id", declared_type="integer", nullable=False, is_primary_key=True),
                ColumnSchema(name="name", declared_type="text", nullable=True),
            ]),
        ]

    def connect_args(self, config, timeout_ms):
        return {}

    def list_tables(self, conn, config):
        return []

    def describe_table(self, conn, config, table):
        return []

    def test_connection(self, config):
        self.calls.append(("test", config))
        if self.reachable:
            return ConnectionResult(success=True)
        return ConnectionResult(success=False, error="connection refused")

    def fetch_schema(self, config):
        self.calls.append(("schema", config))
        if not self.reachable:
            raise DataSourceConnectionError("connection refused")
        return self.tables

    def execute_query(self, config, sql):
        self.calls.append(("execute", config, sql))
        return self.query_result


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(db_engine):
    with Session(db_engine) as s:
        yield s


@pytest.fixture
def fake_connector():
    return FakeConnector()


@pytest.fixture
def client(db_engine, fake_connector):
    def override_get_db():
        with Session(db_engine) as s:
            yield s

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_registry] = lambda: ConnectorRegistry([fake_connector])
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, username=None, password="secret123"):
    username = username or f"user-{uuid.uuid4().hex[:8]}"
    resp = client.post("/api/auth/register", json={"username": username, "password": password})
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return {"id": body["userId"], "username": username, "token": body["accessToken"]}


def create_org(client, user, slug=None):
    slug = slug or f"org-{uuid.uuid4().hex[:8]}"
    resp = client.post(
        "/api/organizations",
        json={"name": slug.title(), "slug": slug},
        headers=auth_headers(user["token"]),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def add_member(client, org_id, by_user, user, role="member"):
    resp = client.post(
        f"/api/organizations/{org_id}/members",
        json={"username": user["username"], "role": role},
        headers=auth_headers(by_user["token"]),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def datasource_payload(**overrides):
    payload = {
        "name": "Warehouse",
        "engine": "postgresql",
        "host": "db.internal",
        "port": 5432,
        "databaseName": "analytics",
        "username": "reader",
        "password": "s3cret-pw",
        "useTls": True,
    }
    payload.update(overrides)
    return payload


def create_datasource(client, org_id, user, **overrides):
    resp = client.post(
        f"/api/organizations/{org_id}/datasources",
        json=datasource_payload(**overrides),
        headers=auth_headers(user["token"]),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
