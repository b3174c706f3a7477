"""
SQLite type normalization.

SQLite accepts any declared type, so the exact map covers the common
spellings and the documented affinity rules
(https://www.sqlite.org/datatype3.html#determination_of_column_affinity)
classify the rest. Declared types matching no rule are still unknown.
"""

from typing import Dict, Optional

from ..models import ColumnTypeFamily
from .base import TypeNormalizer

F = ColumnTypeFamily

_TYPE_MAP: Dict[str, ColumnTypeFamily] = {
    "integer":            F.INT,
    "int":                F.INT,
    "tinyint":            F.INT,
    "smallint":           F.INT,
    "mediumint":          F.INT,
    "bigint":             F.INT,
    "unsigned big int":   F.INT,
    "int2":               F.INT,
    "int8":               F.INT,
    "real":               F.FLOAT,
    "double":             F.FLOAT,
    "double precision":   F.FLOAT,
    "float":              F.FLOAT,
    "numeric":            F.FLOAT,
    "decimal":            F.FLOAT,
    "boolean":            F.BOOLEAN,
    "bool":               F.BOOLEAN,
    "text":               F.STRING,
    "varchar":            F.STRING,
    "character":          F.STRING,
    "varying character":  F.STRING,
    "nchar":              F.STRING,
    "native character":   F.STRING,
    "nvarchar":           F.STRING,
    "char":               F.STRING,
    "clob":               F.STRING,
    "date":               F.DATE_TIME,
    "datetime":           F.DATE_TIME,
    "timestamp":          F.DATE_TIME,
    "time":               F.DATE_TIME,
    "blob":               F.BINARY,
    "":                   F.BINARY,   # no declared type: BLOB affinity
    "json":               F.JSON,
    "uuid":               F.UUID,
}


class SqliteTypeNormalizer(TypeNormalizer):
    engine = "sqlite"
    TYPE_MAP = _TYPE_MAP

    def fallback_family(self, key: str) -> Optional[ColumnTypeFamily]:
        if "int" in key:
            return F.INT
        if "char" in key or "clob" in key or "text" in key:
            return F.STRING
        if "blob" in key:
            return F.BINARY
        if "real" in key or "floa" in key or "doub" in key:
            return F.FLOAT
        return None
