from typing import Dict, Type

from ..errors import UnsupportedEngineError
from .base import TypeNormalizer, derive_arity
from .mysql import MysqlTypeNormalizer, parse_enum_values
from .postgres import PostgresTypeNormalizer
from .sqlite import SqliteTypeNormalizer

NORMALIZERS: Dict[str, Type[TypeNormalizer]] = {
    "postgres": PostgresTypeNormalizer,
    "postgresql": PostgresTypeNormalizer,
    "mysql": MysqlTypeNormalizer,
    "mariadb": MysqlTypeNormalizer,
    "sqlite": SqliteTypeNormalizer,
}


def get_normalizer(engine: str) -> TypeNormalizer:
    """Return a fresh normalizer for an engine tag."""
    try:
        return NORMALIZERS[engine.lower()]()
    except KeyError:
        raise UnsupportedEngineError(engine) from None


__all__ = [
    "TypeNormalizer",
    "PostgresTypeNormalizer",
    "MysqlTypeNormalizer",
    "SqliteTypeNormalizer",
    "get_normalizer",
    "derive_arity",
    "parse_enum_values",
    "NORMALIZERS",
]
