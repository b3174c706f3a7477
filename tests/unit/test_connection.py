import pytest
from sqlalchemy import create_engine

from db_introspection import ConnectionFailure, IntrospectionConnection, ResultSet, SQLAlchemyConnection


@pytest.fixture
def sqlite_connection(tmp_path):
    connection = SQLAlchemyConnection(create_engine(f"sqlite:///{tmp_path / 'catalog.db'}"))
    yield connection
    connection.close()


def test_sqlalchemy_connection_satisfies_protocol(sqlite_connection):
    assert isinstance(sqlite_connection, IntrospectionConnection)
    assert sqlite_connection.dialect == "sqlite"


def test_query_raw_returns_named_columns(sqlite_connection):
    # Act
    result = sqlite_connection.query_raw("SELECT 1 AS one, 'a' AS letter", "main")

    # Assert
    assert result.columns == ["one", "letter"]
    assert len(result) == 1
    assert result.value(0, "letter") == "a"
    assert result.to_row_dicts() == [{"one": 1, "letter": "a"}]


def test_schema_is_bound_when_referenced(sqlite_connection):
    result = sqlite_connection.query_raw("SELECT :schema AS schema_name", "hr")

    assert result.value(0, 0) == "hr"


def test_driver_errors_become_connection_failures(sqlite_connection):
    # Validates error mapping because connectors only handle IntrospectionErrors.
    with pytest.raises(ConnectionFailure) as exc:
        sqlite_connection.query_raw("SELECT * FROM no_such_table", "main")

    assert exc.value.sql == "SELECT * FROM no_such_table"
    assert exc.value.schema == "main"
    assert exc.value.retriable is True


def test_result_set_from_row_dicts():
    result = ResultSet.from_row_dicts([{"a": 1, "b": 2}, {"a": 3}])

    assert result.columns == ["a", "b"]
    assert result.rows == [[1, 2], [3, None]]
    assert ResultSet.from_row_dicts([]).to_row_dicts() == []
