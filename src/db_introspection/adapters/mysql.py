"""
MySQL / MariaDB introspection connector.

Reads information_schema; a MySQL schema is a database. MySQL has no named
enum types or sequences: each inline enum column contributes an Enum named
``<table>.<column>`` and the sequence list is always empty. Unquoted MySQL
identifiers cannot contain a dot, so these names are unique per column.
"""

from collections import OrderedDict, defaultdict
from typing import Dict, List

from ..connector import SqlIntrospectionConnector
from ..models import Column, ColumnTypeFamily, Enum, ForeignKey, ForeignKeyAction, Index, PrimaryKey
from ..types import parse_enum_values

SCHEMAS_QUERY = """
SELECT schema_name AS schema_name
FROM information_schema.schemata
ORDER BY schema_name
"""

TABLES_QUERY = """
SELECT table_name AS table_name
FROM information_schema.tables
WHERE table_schema = :schema AND table_type = 'BASE TABLE'
ORDER BY table_name
"""

COLUMNS_QUERY = """
SELECT table_name AS table_name,
       column_name AS column_name,
       data_type AS data_type,
       column_type AS column_type,
       is_nullable AS is_nullable,
       column_default AS column_default,
       extra AS extra
FROM information_schema.columns
WHERE table_schema = :schema
ORDER BY table_name, ordinal_position
"""

ENUM_COLUMNS_QUERY = """
SELECT table_name AS table_name,
       column_name AS column_name,
       column_type AS column_type
FROM information_schema.columns
WHERE table_schema = :schema AND data_type = 'enum'
ORDER BY table_name, ordinal_position
"""

INDEXES_QUERY = """
SELECT table_name AS table_name,
       index_name AS index_name,
       column_name AS column_name,
       seq_in_index AS seq_in_index,
       non_unique AS non_unique
FROM information_schema.statistics
WHERE table_schema = :schema
ORDER BY table_name, index_name, seq_in_index
"""

FOREIGN_KEYS_QUERY = """
SELECT kcu.constraint_name AS constraint_name,
       kcu.table_name AS table_name,
       kcu.column_name AS column_name,
       kcu.referenced_table_name AS referenced_table,
       kcu.referenced_column_name AS referenced_column,
       rc.delete_rule AS delete_rule
FROM information_schema.key_column_usage kcu
JOIN information_schema.referential_constraints rc
  ON rc.constraint_schema = kcu.constraint_schema
 AND rc.constraint_name = kcu.constraint_name
 AND rc.table_name = kcu.table_name
WHERE kcu.table_schema = :schema AND kcu.referenced_table_name IS NOT NULL
ORDER BY kcu.table_name, kcu.constraint_name, kcu.ordinal_position
"""

PRIMARY_INDEX = "PRIMARY"


def enum_name(table: str, column: str) -> str:
    return f"{table}.{column}"


class MysqlConnector(SqlIntrospectionConnector):
    engine_name = "mysql"

    def _schema_names(self) -> List[str]:
        return [row["schema_name"] for row in self._rows(SCHEMAS_QUERY, "")]

    def _table_names(self, schema: str) -> List[str]:
        return [row["table_name"] for row in self._rows(TABLES_QUERY, schema)]

    def _enums(self, schema: str, tables: List[str]) -> List[Enum]:
        known = set(tables)
        return [
            Enum(
                name=enum_name(row["table_name"], row["column_name"]),
                values=frozenset(parse_enum_values(row["column_type"])),
            )
            for row in self._rows(ENUM_COLUMNS_QUERY, schema)
            if row["table_name"] in known
        ]

    def _columns(self, schema: str, tables: List[str], enums: List[Enum]) -> Dict[str, List[Column]]:
        known = set(tables)
        columns: Dict[str, List[Column]] = defaultdict(list)
        for row in self._rows(COLUMNS_QUERY, schema):
            table = row["table_name"]
            if table not in known:
                continue
            tpe, arity = self.normalizer.normalize(
                row["column_type"],
                nullable=str(row["is_nullable"]).upper() == "YES",
                table=table,
                column=row["column_name"],
            )
            auto_increment = (
                tpe.family == ColumnTypeFamily.INT
                and "auto_increment" in str(row["extra"] or "").lower()
            )
            default = row["column_default"]
            columns[table].append(Column(
                name=row["column_name"],
                tpe=tpe,
                arity=arity,
                default=None if default is None else str(default),
                auto_increment=auto_increment,
            ))
        return columns

    def _index_rows(self, schema: str, tables: List[str]) -> Dict[str, Dict[str, dict]]:
        known = set(tables)
        grouped: Dict[str, Dict[str, dict]] = defaultdict(OrderedDict)
        for row in self._rows(INDEXES_QUERY, schema):
            if row["table_name"] not in known:
                continue
            entry = grouped[row["table_name"]].setdefault(row["index_name"], {
                "unique": not int(row["non_unique"]),
                "columns": [],
            })
            # functional key parts (8.0.13+) have no column name
            if row["column_name"] is not None:
                entry["columns"].append(row["column_name"])
        return grouped

    def _indices(self, schema: str, tables: List[str]) -> Dict[str, List[Index]]:
        indices: Dict[str, List[Index]] = defaultdict(list)
        for table, entries in self._index_rows(schema, tables).items():
            for name, entry in entries.items():
                if name == PRIMARY_INDEX or not entry["columns"]:
                    continue
                indices[table].append(Index(name=name, columns=entry["columns"], unique=entry["unique"]))
        return indices

    def _primary_keys(self, schema: str, tables: List[str]) -> Dict[str, PrimaryKey]:
        return {
            table: PrimaryKey(columns=entries[PRIMARY_INDEX]["columns"])
            for table, entries in self._index_rows(schema, tables).items()
            if PRIMARY_INDEX in entries
        }

    def _foreign_keys(self, schema: str, tables: List[str]) -> Dict[str, List[ForeignKey]]:
        known = set(tables)
        grouped: Dict[tuple, dict] = OrderedDict()
        for row in self._rows(FOREIGN_KEYS_QUERY, schema):
            if row["table_name"] not in known:
                continue
            entry = grouped.setdefault((row["table_name"], row["constraint_name"]), {
                "referenced_table": row["referenced_table"],
                "delete_rule": row["delete_rule"],
                "columns": [],
                "referenced_columns": [],
            })
            entry["columns"].append(row["column_name"])
            entry["referenced_columns"].append(row["referenced_column"])

        foreign_keys: Dict[str, List[ForeignKey]] = defaultdict(list)
        for (table, constraint), entry in grouped.items():
            foreign_keys[table].append(ForeignKey(
                columns=entry["columns"],
                referenced_table=entry["referenced_table"],
                referenced_columns=entry["referenced_columns"],
                on_delete_action=ForeignKeyAction.from_catalog(
                    entry["delete_rule"], table=table, constraint=constraint
                ),
            ))
        return foreign_keys
