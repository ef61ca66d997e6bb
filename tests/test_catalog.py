from datagateway.connectors.catalog import build_table_schema
from datagateway.connectors.postgres import PostgresConnector
from datagateway.dtos import ConnectionConfig


def _row(name, data_type, nullable="NO", pk=False, fk=False, ftable=None, fcol=None):
    return {
        "column_name": name,
        "data_type": data_type,
        "is_nullable": nullable,
        "is_primary_key": pk,
        "is_foreign_key": fk,
        "foreign_table_name": ftable,
        "foreign_column_name": fcol,
    }


class CatalogConnection:
    """Answers the table listing and per-table column queries from fixed data"""

    def __init__(self, tables):
        self.tables = tables
        self.described = []

    def execute(self, statement, params=None):
        if "table" not in (params or {}):
            return [(name,) for name in self.tables]
        self.described.append(params["table"])
        return _Rows(self.tables[params["table"]])


class _Rows:
    def __init__(self, rows):
        self.rows = rows

    def mappings(self):
        return list(self.rows)


def _config():
    return ConnectionConfig(
        engine="postgresql", host="h", port=5432, database_name="d", username="u", organization_id="org",
    )


def test_orders_and_customers_shape():
    conn = CatalogConnection({
        "customers": [
            _row("id", "integer", pk=True),
            _row("name", "text", nullable="YES"),
        ],
        "orders": [
            _row("id", "integer", pk=True),
            _row("customer_id", "integer", fk=True, ftable="customers", fcol="id"),
            _row("total", "numeric", nullable="YES"),
        ],
    })

    tables = PostgresConnector().introspect(conn, _config())

    assert [t.name for t in tables] == ["customers", "orders"]
    assert conn.described == ["customers", "orders"]

    orders = tables[1]
    assert [c.name for c in orders.columns] == ["id", "customer_id", "total"]
    customer_id = orders.columns[1]
    assert customer_id.is_foreign_key
    assert not customer_id.is_primary_key
    assert customer_id.references.table == "customers"
    assert customer_id.references.column == "id"
    assert customer_id.nullable is False
    assert orders.columns[2].nullable is True
    assert orders.columns[2].references is None


def test_column_repeated_by_constraint_joins_is_merged():
    rows = [
        _row("order_id", "int", pk=True),
        _row("order_id", "int", fk=True, ftable="orders", fcol="id"),
        _row("product_id", "int", pk=True, fk=True, ftable="products", fcol="id"),
        _row("product_id", "int", fk=True, ftable="catalog_items", fcol="id"),
        _row("qty", "int"),
    ]

    table = build_table_schema("order_items", rows)

    assert [c.name for c in table.columns] == ["order_id", "product_id", "qty"]
    order_id, product_id, qty = table.columns
    assert order_id.is_primary_key and order_id.is_foreign_key
    assert order_id.references.table == "orders"
    assert product_id.references.table == "products"
    assert not qty.is_primary_key and not qty.is_foreign_key


def test_driver_flag_spellings():
    rows = [
        _row("a", "int", pk=1),
        _row("b", "int", pk="0", fk="1", ftable="t", fcol="id"),
        _row("c", "int", pk="true"),
    ]
    a, b, c = build_table_schema("t2", rows).columns
    assert a.is_primary_key and not b.is_primary_key and c.is_primary_key
    assert b.is_foreign_key


def test_empty_database_gives_empty_schema():
    assert PostgresConnector().introspect(CatalogConnection({}), _config()) == []


def test_wire_shape_uses_type_key():
    table = build_table_schema("t", [_row("id", "uuid", pk=True)])
    assert table.model_dump(by_alias=True)["columns"][0] == {
        "name": "id",
        "type": "uuid",
        "nullable": False,
        "isPrimaryKey": True,
        "isForeignKey": False,
        "references": None,
    }


def test_composite_foreign_key_maps_column_to_column():
    conn = CatalogConnection({
        "shipments": [
            _row("id", "integer", pk=True),
            _row("order_region", "text", fk=True, ftable="orders", fcol="region"),
            _row("order_no", "integer", fk=True, ftable="orders", fcol="number"),
        ],
    })

    (shipments,) = PostgresConnector().introspect(conn, _config())

    region, number = shipments.columns[1], shipments.columns[2]
    assert (region.references.table, region.references.column) == ("orders", "region")
    assert (number.references.table, number.references.column) == ("orders", "number")


def test_postgres_foreign_keys_are_paired_by_position():
    from datagateway.connectors.postgres import _COLUMNS_SQL

    sql = " ".join(_COLUMNS_SQL.text.split())
    assert "referential_constraints" in sql
    assert "kcu.position_in_unique_constraint = ref.ordinal_position" in sql
    assert "constraint_column_usage" not in sql
