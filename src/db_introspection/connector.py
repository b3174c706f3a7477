from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from .connection import IntrospectionConnection
from .errors import IntrospectionError
from .logger import get_logger, introspection_context
from .models import Column, DatabaseSchema, Enum, ForeignKey, Index, PrimaryKey, Sequence, Table
from .types import TypeNormalizer, get_normalizer

logger = get_logger(__name__)


class IntrospectionConnector(ABC):
    """Canonical interface every engine adapter must implement."""

    @abstractmethod
    def list_schemas(self) -> List[str]:
        """Return the schema names the connection is authorized to introspect."""
        pass

    @abstractmethod
    def introspect(self, schema: str) -> DatabaseSchema:
        """Read the full catalog of one schema.

        Either the complete snapshot is returned or an IntrospectionError is
        raised; a partial schema is never returned. Never mutates the database.
        """
        pass

    def close(self) -> None:
        """Release the underlying connection, if the connector owns one."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class SqlIntrospectionConnector(IntrospectionConnector):
    """
    Base class for adapters that read catalogs with SQL through an IntrospectionConnection.

    Adapters implement the catalog hooks; this class assembles their output
    into a validated DatabaseSchema. Hooks return per-table groupings keyed by
    table name, and rows for tables outside the hook's table list are ignored.
    """

    engine_name: str = "generic"

    def __init__(
        self,
        connection: IntrospectionConnection,
        normalizer: Optional[TypeNormalizer] = None,
        exclude_schemas: Iterable[str] = (),
    ):
        self.connection = connection
        self.normalizer = normalizer or get_normalizer(self.engine_name)
        self.exclude_schemas = set(exclude_schemas)

    def __str__(self):
        return f"{type(self).__name__}({self.engine_name})"

    def close(self) -> None:
        close = getattr(self.connection, "close", None)
        if close is not None:
            close()

    def _rows(self, sql: str, schema: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return self.connection.query_raw(sql, schema, params).to_row_dicts()

    # Catalog hooks

    @abstractmethod
    def _schema_names(self) -> List[str]:
        pass

    @abstractmethod
    def _table_names(self, schema: str) -> List[str]:
        pass

    @abstractmethod
    def _columns(self, schema: str, tables: List[str], enums: List[Enum]) -> Dict[str, List[Column]]:
        pass

    @abstractmethod
    def _indices(self, schema: str, tables: List[str]) -> Dict[str, List[Index]]:
        pass

    @abstractmethod
    def _primary_keys(self, schema: str, tables: List[str]) -> Dict[str, PrimaryKey]:
        pass

    @abstractmethod
    def _foreign_keys(self, schema: str, tables: List[str]) -> Dict[str, List[ForeignKey]]:
        pass

    def _enums(self, schema: str, tables: List[str]) -> List[Enum]:
        return []

    def _sequences(self, schema: str) -> List[Sequence]:
        return []

    # Contract

    def list_schemas(self) -> List[str]:
        with introspection_context(self.engine_name):
            try:
                names = self._schema_names()
            except IntrospectionError as e:
                logger.error(f"Listing schemas failed for {self}: {e}")
                raise
        return [name for name in names if name not in self.exclude_schemas]

    def introspect(self, schema: str) -> DatabaseSchema:
        with introspection_context(self.engine_name, schema):
            logger.info("Introspecting schema %s", schema)
            try:
                snapshot = self._assemble(schema)
            except IntrospectionError as e:
                logger.error(f"Introspection of schema {schema} failed for {self}: {e}")
                raise
            logger.info(
                "Introspected schema %s: %d tables, %d enums, %d sequences",
                schema,
                len(snapshot.tables),
                len(snapshot.enums),
                len(snapshot.sequences),
            )
            return snapshot

    def _assemble(self, schema: str) -> DatabaseSchema:
        tables = self._table_names(schema)
        enums = self._enums(schema, tables)
        columns = self._columns(schema, tables, enums)
        indices = self._indices(schema, tables)
        primary_keys = self._primary_keys(schema, tables)
        foreign_keys = self._foreign_keys(schema, tables)
        sequences = self._sequences(schema)

        return DatabaseSchema(
            tables=[
                Table(
                    name=name,
                    columns=columns.get(name, []),
                    indices=indices.get(name, []),
                    primary_key=primary_keys.get(name),
                    foreign_keys=foreign_keys.get(name, []),
                )
                for name in tables
            ],
            enums=enums,
            sequences=sequences,
        )
