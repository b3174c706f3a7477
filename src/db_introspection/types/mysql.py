"""
MySQL / MariaDB type normalization.

Keys come from information_schema.columns.column_type ("int(10) unsigned",
"enum('a','b')"), reduced to their base keyword.
"""

import re
from typing import Dict, List

from ..models import ColumnTypeFamily
from .base import TypeNormalizer

F = ColumnTypeFamily

_TYPE_MAP: Dict[str, ColumnTypeFamily] = {
    "tinyint":             F.INT,
    "smallint":            F.INT,
    "mediumint":           F.INT,
    "int":                 F.INT,
    "integer":             F.INT,
    "bigint":              F.INT,
    "year":                F.INT,
    "decimal":             F.FLOAT,
    "numeric":             F.FLOAT,
    "dec":                 F.FLOAT,
    "fixed":               F.FLOAT,
    "float":               F.FLOAT,
    "double":              F.FLOAT,
    "double precision":    F.FLOAT,
    "real":                F.FLOAT,
    "bool":                F.BOOLEAN,
    "boolean":             F.BOOLEAN,
    "char":                F.STRING,
    "varchar":             F.STRING,
    "nchar":               F.STRING,
    "nvarchar":            F.STRING,
    "tinytext":            F.STRING,
    "text":                F.STRING,
    "mediumtext":          F.STRING,
    "longtext":            F.STRING,
    "enum":                F.STRING,
    "set":                 F.STRING,
    "date":                F.DATE_TIME,
    "datetime":            F.DATE_TIME,
    "timestamp":           F.DATE_TIME,
    "time":                F.DATE_TIME,
    "bit":                 F.BINARY,
    "binary":              F.BINARY,
    "varbinary":           F.BINARY,
    "tinyblob":            F.BINARY,
    "blob":                F.BINARY,
    "mediumblob":          F.BINARY,
    "longblob":            F.BINARY,
    "json":                F.JSON,
    "geometry":            F.GEOMETRIC,
    "point":               F.GEOMETRIC,
    "linestring":          F.GEOMETRIC,
    "polygon":             F.GEOMETRIC,
    "multipoint":          F.GEOMETRIC,
    "multilinestring":     F.GEOMETRIC,
    "multipolygon":        F.GEOMETRIC,
    "geometrycollection":  F.GEOMETRIC,
}

_ENUM_MEMBER = re.compile(r"'((?:[^']|'')*)'")


def parse_enum_values(column_type: str) -> List[str]:
    """enum('small','it''s') -> ['small', "it's"], in declaration order."""
    start = column_type.find("(")
    end = column_type.rfind(")")
    if start == -1 or end <= start:
        return []
    inner = column_type[start + 1:end]
    return [m.group(1).replace("''", "'") for m in _ENUM_MEMBER.finditer(inner)]


class MysqlTypeNormalizer(TypeNormalizer):
    engine = "mysql"
    TYPE_MAP = _TYPE_MAP
    IGNORED_MODIFIERS = ("unsigned", "signed", "zerofill")

    def base_keyword(self, raw: str) -> str:
        # Enum members may contain parentheses, so match the keyword before the list.
        head = raw.strip().lower()
        for keyword in ("enum", "set"):
            if head.startswith(keyword + "(") or head.startswith(keyword + " ("):
                return keyword
        return super().base_keyword(raw)
