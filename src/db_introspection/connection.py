from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .errors import ConnectionFailure
from .logger import get_logger

logger = get_logger(__name__)


class ResultSet(BaseModel):
    """Rows returned by a catalog query, addressable by column name or position."""

    columns: List[str] = Field(default_factory=list)
    rows: List[List[Any]] = Field(default_factory=list)

    @classmethod
    def from_row_dicts(cls, rows: List[Dict[str, Any]], columns: Optional[List[str]] = None) -> "ResultSet":
        """Create a ResultSet from list-of-dict rows."""
        if columns is None:
            columns = list(rows[0].keys()) if rows else []
        return cls(columns=columns, rows=[[row.get(col) for col in columns] for row in rows])

    def to_row_dicts(self) -> List[Dict[str, Any]]:
        """Convert row values to list-of-dict rows using column order."""
        return [dict(zip(self.columns, row)) for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)

    def value(self, row: int, column: Any) -> Any:
        """Value at a row, by column name or position."""
        index = column if isinstance(column, int) else self.columns.index(column)
        return self.rows[row][index]


@runtime_checkable
class IntrospectionConnection(Protocol):
    """The query surface connectors read catalogs through."""

    def query_raw(self, sql: str, schema: str, params: Optional[Dict[str, Any]] = None) -> ResultSet:
        """Execute a raw catalog statement scoped to a schema."""
        ...


class SQLAlchemyConnection:
    """IntrospectionConnection backed by a SQLAlchemy engine.

    The schema is bound as ``:schema`` when the statement references it;
    engines that address schemas inside the SQL text (SQLite PRAGMAs) ignore it.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def __str__(self):
        return f"SQLAlchemyConnection({self.engine.url.get_backend_name()})"

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def query_raw(self, sql: str, schema: str, params: Optional[Dict[str, Any]] = None) -> ResultSet:
        bind = dict(params or {})
        if ":schema" in sql:
            bind.setdefault("schema", schema)

        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(sql), bind)
                columns = list(result.keys())
                rows = [list(row) for row in result.fetchall()]
        except SQLAlchemyError as e:
            logger.error(f"Catalog query failed for schema {schema} on {self}: {e}")
            raise ConnectionFailure(f"Catalog query failed: {e}", sql=sql, schema=schema) from e

        logger.debug("Catalog query returned %d rows for schema %s", len(rows), schema)
        return ResultSet(columns=columns, rows=rows)

    def close(self) -> None:
        self.engine.dispose()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
