import pytest

from db_introspection import (
    ColumnArity,
    ColumnTypeFamily,
    ForeignKeyAction,
    MysqlConnector,
    UnrecognizedForeignKeyAction,
)
from db_introspection.adapters.mysql import (
    COLUMNS_QUERY,
    ENUM_COLUMNS_QUERY,
    FOREIGN_KEYS_QUERY,
    INDEXES_QUERY,
    TABLES_QUERY,
    enum_name,
)


def _column(table, name, column_type, nullable="NO", default=None, extra=""):
    return {
        "table_name": table,
        "column_name": name,
        "data_type": column_type.split("(")[0],
        "column_type": column_type,
        "is_nullable": nullable,
        "column_default": default,
        "extra": extra,
    }


def _index_key(table, index, column, seq, non_unique=1):
    return {
        "table_name": table,
        "index_name": index,
        "column_name": column,
        "seq_in_index": seq,
        "non_unique": non_unique,
    }


@pytest.fixture
def catalog():
    """Catalog rows for a shop database with customers and orders."""
    return {
        TABLES_QUERY: [{"table_name": "customers"}, {"table_name": "orders"}],
        ENUM_COLUMNS_QUERY: [
            {"table_name": "orders", "column_name": "status", "column_type": "enum('open','shipped')"},
        ],
        COLUMNS_QUERY: [
            _column("customers", "id", "int(10) unsigned", extra="auto_increment"),
            _column("customers", "email", "varchar(191)"),
            _column("customers", "vip", "tinyint(1)", default=0),
            _column("orders", "id", "bigint(20)", extra="auto_increment"),
            _column("orders", "customer_id", "int(10) unsigned", nullable="YES"),
            _column("orders", "status", "enum('open','shipped')", default="open"),
            _column("orders", "placed_at", "datetime(6)", extra="DEFAULT_GENERATED"),
        ],
        INDEXES_QUERY: [
            _index_key("customers", "PRIMARY", "id", 1, non_unique=0),
            _index_key("customers", "customers_email_uq", "email", 1, non_unique=0),
            _index_key("orders", "PRIMARY", "id", 1, non_unique=0),
            _index_key("orders", "orders_customer_status_ix", "customer_id", 1),
            _index_key("orders", "orders_customer_status_ix", "status", 2),
            _index_key("orders", "orders_functional_ix", None, 1),
        ],
        FOREIGN_KEYS_QUERY: [
            {
                "constraint_name": "orders_customer_fk",
                "table_name": "orders",
                "column_name": "customer_id",
                "referenced_table": "customers",
                "referenced_column": "id",
                "delete_rule": "SET NULL",
            },
        ],
    }


def test_introspect_assembles_canonical_schema(fake_connection, catalog):
    # Validates information_schema assembly because a MySQL schema is a whole database.
    # Act
    schema = MysqlConnector(fake_connection(catalog)).introspect("shop")

    # Assert
    customers = schema.get_table("customers")
    orders = schema.get_table("orders")
    assert customers.column_names == ["id", "email", "vip"]
    assert customers.primary_key.columns == ["id"]
    assert [(i.name, i.unique) for i in customers.indices] == [("customers_email_uq", True)]
    assert [i.name for i in orders.indices] == ["orders_customer_status_ix"]
    assert orders.indices[0].columns == ["customer_id", "status"]
    assert schema.sequences == []


def test_column_types_nullability_and_defaults(fake_connection, catalog):
    schema = MysqlConnector(fake_connection(catalog)).introspect("shop")

    customers = schema.get_table("customers")
    orders = schema.get_table("orders")
    assert customers.get_column("id").tpe.raw == "int(10) unsigned"
    assert customers.get_column("id").auto_increment is True
    assert customers.get_column("vip").tpe.family == ColumnTypeFamily.INT
    assert customers.get_column("vip").default == "0"
    assert orders.get_column("customer_id").arity == ColumnArity.NULLABLE
    assert orders.get_column("placed_at").auto_increment is False
    assert orders.get_column("placed_at").tpe.family == ColumnTypeFamily.DATE_TIME


def test_inline_enums_become_named_enums(fake_connection, catalog):
    # Validates the enum naming rule because MySQL enums have no name of their own.
    # Act
    schema = MysqlConnector(fake_connection(catalog)).introspect("shop")

    # Assert
    assert enum_name("orders", "status") == "orders.status"
    assert schema.get_enum("orders.status").values == {"open", "shipped"}
    assert schema.get_table("orders").get_column("status").tpe.family == ColumnTypeFamily.STRING


def test_delete_rule_maps_to_action(fake_connection, catalog):
    schema = MysqlConnector(fake_connection(catalog)).introspect("shop")

    fk = schema.get_table("orders").foreign_keys[0]
    assert fk.columns == ["customer_id"]
    assert fk.referenced_table == "customers"
    assert fk.on_delete_action == ForeignKeyAction.SET_NULL


def test_unrecognized_delete_rule_fails(fake_connection, catalog):
    # Arrange
    catalog[FOREIGN_KEYS_QUERY][0]["delete_rule"] = "SET ASIDE"

    # Act / Assert
    with pytest.raises(UnrecognizedForeignKeyAction) as exc:
        MysqlConnector(fake_connection(catalog)).introspect("shop")
    assert exc.value.details["table"] == "orders"
    assert exc.value.details["constraint"] == "orders_customer_fk"


def test_rows_for_unlisted_tables_are_ignored(fake_connection, catalog):
    # Validates table scoping because information_schema also lists views.
    # Arrange
    catalog[COLUMNS_QUERY].append(_column("order_totals", "total", "decimal(10,2)"))
    catalog[ENUM_COLUMNS_QUERY].append(
        {"table_name": "order_totals", "column_name": "kind", "column_type": "enum('a')"}
    )

    # Act
    schema = MysqlConnector(fake_connection(catalog)).introspect("shop")

    # Assert
    assert schema.get_table("order_totals") is None
    assert schema.get_enum("order_totals.kind") is None


def test_enum_names_do_not_collide_across_underscored_names(fake_connection):
    # Validates enum naming because table a_b column c and table a column b_c are distinct enums.
    # Arrange
    catalog = {
        TABLES_QUERY: [{"table_name": "a"}, {"table_name": "a_b"}],
        ENUM_COLUMNS_QUERY: [
            {"table_name": "a", "column_name": "b_c", "column_type": "enum('x')"},
            {"table_name": "a_b", "column_name": "c", "column_type": "enum('y')"},
        ],
        COLUMNS_QUERY: [
            _column("a", "b_c", "enum('x')"),
            _column("a_b", "c", "enum('y')"),
        ],
    }

    # Act
    schema = MysqlConnector(fake_connection(catalog)).introspect("shop")

    # Assert
    assert schema.get_enum("a.b_c").values == {"x"}
    assert schema.get_enum("a_b.c").values == {"y"}
