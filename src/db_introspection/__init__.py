from .errors import (
    ErrorCode,
    IntrospectionError,
    IntrospectionFailure,
    ConnectionFailure,
    UnknownRawType,
    UnrecognizedForeignKeyAction,
    InvariantViolation,
    UnsupportedEngineError,
)
from .models import (
    DatabaseSchema,
    Table,
    Column,
    ColumnType,
    ColumnTypeFamily,
    ColumnArity,
    Index,
    PrimaryKey,
    ForeignKey,
    ForeignKeyAction,
    Enum,
    Sequence,
    serialize,
    deserialize,
)
from .types import TypeNormalizer, get_normalizer
from .connection import IntrospectionConnection, ResultSet, SQLAlchemyConnection
from .connector import IntrospectionConnector, SqlIntrospectionConnector
from .adapters import PostgresConnector, MysqlConnector, SqliteConnector
from .config import ConnectorProfile, load_profiles, get_profile
from .factory import make_connector, make_engine
from .logger import configure_logging, configure_logging_from_settings, get_logger
from .settings import Settings

__all__ = [
    # Errors
    "ErrorCode",
    "IntrospectionError",
    "IntrospectionFailure",
    "ConnectionFailure",
    "UnknownRawType",
    "UnrecognizedForeignKeyAction",
    "InvariantViolation",
    "UnsupportedEngineError",
    # Canonical model
    "DatabaseSchema",
    "Table",
    "Column",
    "ColumnType",
    "ColumnTypeFamily",
    "ColumnArity",
    "Index",
    "PrimaryKey",
    "ForeignKey",
    "ForeignKeyAction",
    "Enum",
    "Sequence",
    "serialize",
    "deserialize",
    # Type normalization
    "TypeNormalizer",
    "get_normalizer",
    # Connections and connectors
    "IntrospectionConnection",
    "ResultSet",
    "SQLAlchemyConnection",
    "IntrospectionConnector",
    "SqlIntrospectionConnector",
    "PostgresConnector",
    "MysqlConnector",
    "SqliteConnector",
    # Configuration
    "ConnectorProfile",
    "load_profiles",
    "get_profile",
    "make_connector",
    "make_engine",
    "Settings",
    # Logging
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
]
