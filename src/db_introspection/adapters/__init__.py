from .mysql import MysqlConnector
from .postgres import PostgresConnector
from .sqlite import SqliteConnector

__all__ = ["MysqlConnector", "PostgresConnector", "SqliteConnector"]
