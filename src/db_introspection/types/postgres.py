"""
PostgreSQL type normalization.

Column types are read with format_type(), so keys are the canonical long
spellings ("character varying", "timestamp with time zone") plus the udt
aliases some catalog views report ("int4", "timestamptz").
"""

from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from ..models import ColumnTypeFamily
from .base import TypeNormalizer

F = ColumnTypeFamily

_TYPE_MAP: Dict[str, ColumnTypeFamily] = {
    "smallint":                     F.INT,
    "integer":                      F.INT,
    "int":                          F.INT,
    "int2":                         F.INT,
    "int4":                         F.INT,
    "bigint":                       F.INT,
    "int8":                         F.INT,
    "smallserial":                  F.INT,
    "serial":                       F.INT,
    "bigserial":                    F.INT,
    "serial2":                      F.INT,
    "serial4":                      F.INT,
    "serial8":                      F.INT,
    "oid":                          F.INT,
    "real":                         F.FLOAT,
    "float4":                       F.FLOAT,
    "double precision":             F.FLOAT,
    "float8":                       F.FLOAT,
    "float":                        F.FLOAT,
    "numeric":                      F.FLOAT,
    "decimal":                      F.FLOAT,
    "money":                        F.FLOAT,
    "boolean":                      F.BOOLEAN,
    "bool":                         F.BOOLEAN,
    "character varying":            F.STRING,
    "varchar":                      F.STRING,
    "character":                    F.STRING,
    "char":                         F.STRING,
    "bpchar":                       F.STRING,
    "\"char\"":                     F.STRING,
    "text":                         F.STRING,
    "citext":                       F.STRING,
    "name":                         F.STRING,
    "bit":                          F.STRING,
    "bit varying":                  F.STRING,
    "varbit":                       F.STRING,
    "inet":                         F.STRING,
    "cidr":                         F.STRING,
    "macaddr":                      F.STRING,
    "macaddr8":                     F.STRING,
    "interval":                     F.STRING,
    "xml":                          F.STRING,
    "date":                         F.DATE_TIME,
    "time":                         F.DATE_TIME,
    "time without time zone":       F.DATE_TIME,
    "time with time zone":          F.DATE_TIME,
    "timetz":                       F.DATE_TIME,
    "timestamp":                    F.DATE_TIME,
    "timestamp without time zone":  F.DATE_TIME,
    "timestamp with time zone":     F.DATE_TIME,
    "timestamptz":                  F.DATE_TIME,
    "bytea":                        F.BINARY,
    "json":                         F.JSON,
    "jsonb":                        F.JSON,
    "uuid":                         F.UUID,
    "point":                        F.GEOMETRIC,
    "line":                         F.GEOMETRIC,
    "lseg":                         F.GEOMETRIC,
    "box":                          F.GEOMETRIC,
    "path":                         F.GEOMETRIC,
    "polygon":                      F.GEOMETRIC,
    "circle":                       F.GEOMETRIC,
    "pg_lsn":                       F.LOG_SEQUENCE_NUMBER,
    "tsvector":                     F.TEXT_SEARCH,
    "tsquery":                      F.TEXT_SEARCH,
    "txid_snapshot":                F.TRANSACTION_ID,
    "pg_snapshot":                  F.TRANSACTION_ID,
    "xid":                          F.TRANSACTION_ID,
    "xid8":                         F.TRANSACTION_ID,
}


def _unqualify(name: str) -> str:
    """public."Status" -> status"""
    return name.rsplit(".", 1)[-1].strip().strip('"').lower()


class PostgresTypeNormalizer(TypeNormalizer):
    engine = "postgres"
    TYPE_MAP = _TYPE_MAP

    def __init__(self, enum_names: Iterable[str] = ()):
        # Columns typed with a user-defined enum are strings restricted to its members.
        self.enum_names: FrozenSet[str] = frozenset(_unqualify(n) for n in enum_names)

    def with_enums(self, enum_names: Iterable[str]) -> "PostgresTypeNormalizer":
        return PostgresTypeNormalizer(enum_names)

    def split_array(self, raw: str) -> Tuple[str, bool]:
        stripped = raw.strip()
        if stripped.endswith("[]"):
            element = stripped
            while element.endswith("[]"):
                element = element[:-2].rstrip()
            return element, True
        # udt_name spelling of array types: _int4, _text
        if stripped.startswith("_") and stripped[1:].lower() in self.TYPE_MAP:
            return stripped[1:], True
        return raw, False

    def base_keyword(self, raw: str) -> str:
        key = super().base_keyword(raw)
        if key == '"char"':
            return key
        if "." in key or key.startswith('"'):
            return _unqualify(key)
        return key

    def fallback_family(self, key: str) -> Optional[ColumnTypeFamily]:
        if key in self.enum_names:
            return ColumnTypeFamily.STRING
        return None
