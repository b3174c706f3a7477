from __future__ import annotations

from typing import Dict, Type

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from .adapters import MysqlConnector, PostgresConnector, SqliteConnector
from .config import ConnectorProfile
from .connection import SQLAlchemyConnection
from .connector import SqlIntrospectionConnector
from .errors import UnsupportedEngineError
from .logger import get_logger

logger = get_logger(__name__)

CONNECTORS: Dict[str, Type[SqlIntrospectionConnector]] = {
    "postgres": PostgresConnector,
    "postgresql": PostgresConnector,
    "mysql": MysqlConnector,
    "mariadb": MysqlConnector,
    "sqlite": SqliteConnector,
}


def connector_class(engine: str) -> Type[SqlIntrospectionConnector]:
    try:
        return CONNECTORS[engine.lower()]
    except KeyError:
        raise UnsupportedEngineError(engine) from None


def make_engine(profile: ConnectorProfile) -> Engine:
    """
    Create a SQLAlchemy engine for catalog reads.

    Args:
        profile: The connector profile.

    Returns:
        A SQLAlchemy Engine instance.

    Raises:
        UnsupportedEngineError: If the engine type is not supported.
    """
    engine = profile.engine.lower()
    connector_class(engine)

    if engine in {"postgres", "postgresql"}:
        # Catalog reads only: enforce a statement timeout and read-only sessions.
        timeout_ms = max(profile.statement_timeout_ms, 0)
        opts = f"-c statement_timeout={timeout_ms} -c default_transaction_read_only=on"
        return create_engine(profile.sqlalchemy_url, connect_args={"options": opts})

    if engine in {"mysql", "mariadb"}:
        return create_engine(profile.sqlalchemy_url, pool_pre_ping=True)

    return create_engine(profile.sqlalchemy_url)


def make_connector(profile: ConnectorProfile) -> SqlIntrospectionConnector:
    """Build the connector for a profile's engine tag, owning a fresh SQLAlchemy connection."""
    cls = connector_class(profile.engine)
    logger.info("Creating %s connector for profile %s", cls.engine_name, profile.id)
    connection = SQLAlchemyConnection(make_engine(profile))
    return cls(connection, exclude_schemas=profile.exclude_schemas)
