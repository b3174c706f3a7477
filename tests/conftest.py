import json
import pathlib
from typing import Any, Dict, List, Optional

import pytest

from db_introspection import (
    Column,
    ColumnArity,
    ColumnType,
    ColumnTypeFamily,
    DatabaseSchema,
    Enum,
    ForeignKey,
    ForeignKeyAction,
    Index,
    PrimaryKey,
    ResultSet,
    Sequence,
    Table,
)

RESOURCES = pathlib.Path(__file__).parent / "resources"


class FakeConnection:
    """IntrospectionConnection answering catalog queries from canned rows keyed by SQL text."""

    def __init__(self, responses: Optional[Dict[str, List[Dict[str, Any]]]] = None, error: Exception = None):
        self.responses = responses or {}
        self.error = error
        self.calls: List[tuple] = []
        self.closed = False

    def query_raw(self, sql: str, schema: str, params: Optional[Dict[str, Any]] = None) -> ResultSet:
        self.calls.append((sql, schema))
        if self.error is not None:
            raise self.error
        return ResultSet.from_row_dicts(self.responses.get(sql, []))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_connection():
    """Factory for FakeConnection instances."""
    return FakeConnection


def int_column(name: str, arity: ColumnArity = ColumnArity.REQUIRED, auto_increment: bool = False) -> Column:
    return Column(
        name=name,
        tpe=ColumnType(raw="integer", family=ColumnTypeFamily.INT),
        arity=arity,
        auto_increment=auto_increment,
    )


@pytest.fixture
def column_factory():
    return int_column


@pytest.fixture
def reference_schema() -> DatabaseSchema:
    """The schema described by resources/schema.json."""
    return DatabaseSchema(
        tables=[
            Table(
                name="table1",
                columns=[
                    int_column("column1", auto_increment=True),
                    Column(
                        name="column2",
                        tpe=ColumnType(raw="varchar(255)", family=ColumnTypeFamily.STRING),
                        arity=ColumnArity.NULLABLE,
                        default="default value",
                    ),
                    int_column("column3"),
                ],
                indices=[Index(name="column2", columns=["column2"], unique=False)],
                primary_key=PrimaryKey(columns=["column1"]),
                foreign_keys=[
                    ForeignKey(
                        columns=["column3"],
                        referenced_table="table2",
                        referenced_columns=["id"],
                        on_delete_action=ForeignKeyAction.NO_ACTION,
                    )
                ],
            ),
            Table(
                name="table2",
                columns=[int_column("id", auto_increment=True)],
                primary_key=PrimaryKey(columns=["id"]),
            ),
        ],
        enums=[Enum(name="enum1", values=frozenset({"option1", "option2"}))],
        sequences=[Sequence(name="sequence1", initial_value=1, allocation_size=32)],
    )


@pytest.fixture
def reference_json() -> str:
    return (RESOURCES / "schema.json").read_text()


@pytest.fixture
def reference_dict(reference_json) -> Dict[str, Any]:
    return json.loads(reference_json)
