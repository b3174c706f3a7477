"""
PostgreSQL introspection connector.

Reads pg_catalog directly; every query is bound to the schema name via
``:schema``.
"""

from collections import OrderedDict, defaultdict
from typing import Dict, List

from ..connector import SqlIntrospectionConnector
from ..errors import UnrecognizedForeignKeyAction
from ..logger import get_logger
from ..models import (
    U32_MAX,
    Column,
    ColumnTypeFamily,
    Enum,
    ForeignKey,
    ForeignKeyAction,
    Index,
    PrimaryKey,
    Sequence,
)
from ..types import PostgresTypeNormalizer

logger = get_logger(__name__)

SCHEMAS_QUERY = """
SELECT schema_name
FROM information_schema.schemata
ORDER BY schema_name
"""

TABLES_QUERY = """
SELECT c.relname AS table_name
FROM pg_class c
JOIN pg_namespace n ON n.oid = c.relnamespace
WHERE n.nspname = :schema AND c.relkind IN ('r', 'p')
ORDER BY c.relname
"""

COLUMNS_QUERY = """
SELECT c.relname AS table_name,
       a.attname AS column_name,
       format_type(a.atttypid, a.atttypmod) AS formatted_type,
       NOT a.attnotnull AS is_nullable,
       pg_get_expr(d.adbin, d.adrelid) AS column_default,
       a.attidentity <> '' AS is_identity
FROM pg_attribute a
JOIN pg_class c ON c.oid = a.attrelid
JOIN pg_namespace n ON n.oid = c.relnamespace
LEFT JOIN pg_attrdef d ON d.adrelid = a.attrelid AND d.adnum = a.attnum
WHERE n.nspname = :schema
  AND c.relkind IN ('r', 'p')
  AND a.attnum > 0
  AND NOT a.attisdropped
ORDER BY c.relname, a.attnum
"""

INDEXES_QUERY = """
SELECT t.relname AS table_name,
       i.relname AS index_name,
       ix.indisunique AS is_unique,
       ix.indisprimary AS is_primary,
       a.attname AS column_name,
       k.ord AS column_position,
       k.attnum AS attnum,
       k.ord > ix.indnkeyatts AS is_included
FROM pg_index ix
JOIN pg_class t ON t.oid = ix.indrelid
JOIN pg_class i ON i.oid = ix.indexrelid
JOIN pg_namespace n ON n.oid = t.relnamespace
CROSS JOIN LATERAL unnest(ix.indkey) WITH ORDINALITY AS k(attnum, ord)
LEFT JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = k.attnum
WHERE n.nspname = :schema
ORDER BY t.relname, i.relname, k.ord
"""

FOREIGN_KEYS_QUERY = """
SELECT con.conname AS constraint_name,
       cl.relname AS table_name,
       att.attname AS column_name,
       ref_cl.relname AS referenced_table,
       ref_att.attname AS referenced_column,
       con.confdeltype AS on_delete
FROM pg_constraint con
JOIN pg_class cl ON cl.oid = con.conrelid
JOIN pg_namespace n ON n.oid = cl.relnamespace
JOIN pg_class ref_cl ON ref_cl.oid = con.confrelid
CROSS JOIN LATERAL unnest(con.conkey, con.confkey) WITH ORDINALITY AS k(col, ref_col, ord)
JOIN pg_attribute att ON att.attrelid = con.conrelid AND att.attnum = k.col
JOIN pg_attribute ref_att ON ref_att.attrelid = con.confrelid AND ref_att.attnum = k.ref_col
WHERE con.contype = 'f' AND n.nspname = :schema
ORDER BY cl.relname, con.conname, k.ord
"""

ENUMS_QUERY = """
SELECT t.typname AS enum_name, e.enumlabel AS enum_value
FROM pg_type t
JOIN pg_enum e ON e.enumtypid = t.oid
JOIN pg_namespace n ON n.oid = t.typnamespace
WHERE n.nspname = :schema
ORDER BY t.typname, e.enumsortorder
"""

SEQUENCES_QUERY = """
SELECT sequencename AS sequence_name, start_value, increment_by
FROM pg_sequences
WHERE schemaname = :schema
ORDER BY sequencename
"""

# pg_constraint.confdeltype codes
ON_DELETE_CODES: Dict[str, ForeignKeyAction] = {
    "a": ForeignKeyAction.NO_ACTION,
    "r": ForeignKeyAction.RESTRICT,
    "c": ForeignKeyAction.CASCADE,
    "n": ForeignKeyAction.SET_NULL,
    "d": ForeignKeyAction.SET_DEFAULT,
}


def _is_sequence_default(default) -> bool:
    return bool(default) and default.lower().startswith("nextval(")


def _clamp(value: int) -> int:
    return min(max(value, 0), U32_MAX)


class PostgresConnector(SqlIntrospectionConnector):
    engine_name = "postgres"

    def _schema_names(self) -> List[str]:
        return [row["schema_name"] for row in self._rows(SCHEMAS_QUERY, "")]

    def _table_names(self, schema: str) -> List[str]:
        return [row["table_name"] for row in self._rows(TABLES_QUERY, schema)]

    def _enums(self, schema: str, tables: List[str]) -> List[Enum]:
        members: Dict[str, List[str]] = OrderedDict()
        for row in self._rows(ENUMS_QUERY, schema):
            members.setdefault(row["enum_name"], []).append(row["enum_value"])
        return [Enum(name=name, values=frozenset(values)) for name, values in members.items()]

    def _columns(self, schema: str, tables: List[str], enums: List[Enum]) -> Dict[str, List[Column]]:
        normalizer = self.normalizer
        if isinstance(normalizer, PostgresTypeNormalizer):
            normalizer = normalizer.with_enums(e.name for e in enums)

        known = set(tables)
        columns: Dict[str, List[Column]] = defaultdict(list)
        for row in self._rows(COLUMNS_QUERY, schema):
            table = row["table_name"]
            if table not in known:
                continue
            tpe, arity = normalizer.normalize(
                row["formatted_type"],
                nullable=bool(row["is_nullable"]),
                table=table,
                column=row["column_name"],
            )
            auto_increment = tpe.family == ColumnTypeFamily.INT and (
                bool(row["is_identity"]) or _is_sequence_default(row["column_default"])
            )
            columns[table].append(Column(
                name=row["column_name"],
                tpe=tpe,
                arity=arity,
                default=row["column_default"],
                auto_increment=auto_increment,
            ))
        return columns

    def _index_rows(self, schema: str, tables: List[str]) -> Dict[str, Dict[str, dict]]:
        """table -> index name -> {"unique", "primary", "columns", "expression"}"""
        known = set(tables)
        grouped: Dict[str, Dict[str, dict]] = defaultdict(OrderedDict)
        for row in self._rows(INDEXES_QUERY, schema):
            if row["table_name"] not in known:
                continue
            entry = grouped[row["table_name"]].setdefault(row["index_name"], {
                "unique": bool(row["is_unique"]),
                "primary": bool(row["is_primary"]),
                "columns": [],
                "expression": False,
            })
            # INCLUDE columns of covering indexes are payload, not key
            if row["is_included"]:
                continue
            # attnum 0 marks an expression key
            if row["column_name"] is None or not row["attnum"]:
                entry["expression"] = True
            else:
                entry["columns"].append(row["column_name"])
        return grouped

    def _indices(self, schema: str, tables: List[str]) -> Dict[str, List[Index]]:
        indices: Dict[str, List[Index]] = defaultdict(list)
        for table, entries in self._index_rows(schema, tables).items():
            for name, entry in entries.items():
                if entry["primary"]:
                    continue
                if entry["expression"]:
                    logger.debug("Skipping expression index %s on %s", name, table)
                    continue
                indices[table].append(Index(name=name, columns=entry["columns"], unique=entry["unique"]))
        return indices

    def _primary_keys(self, schema: str, tables: List[str]) -> Dict[str, PrimaryKey]:
        keys: Dict[str, PrimaryKey] = {}
        for table, entries in self._index_rows(schema, tables).items():
            for entry in entries.values():
                if entry["primary"]:
                    keys[table] = PrimaryKey(columns=entry["columns"])
        return keys

    def _foreign_keys(self, schema: str, tables: List[str]) -> Dict[str, List[ForeignKey]]:
        known = set(tables)
        grouped: Dict[tuple, dict] = OrderedDict()
        for row in self._rows(FOREIGN_KEYS_QUERY, schema):
            if row["table_name"] not in known:
                continue
            entry = grouped.setdefault((row["table_name"], row["constraint_name"]), {
                "referenced_table": row["referenced_table"],
                "on_delete": row["on_delete"],
                "columns": [],
                "referenced_columns": [],
            })
            entry["columns"].append(row["column_name"])
            entry["referenced_columns"].append(row["referenced_column"])

        foreign_keys: Dict[str, List[ForeignKey]] = defaultdict(list)
        for (table, constraint), entry in grouped.items():
            action = ON_DELETE_CODES.get(entry["on_delete"])
            if action is None:
                raise UnrecognizedForeignKeyAction(str(entry["on_delete"]), table=table, constraint=constraint)
            foreign_keys[table].append(ForeignKey(
                columns=entry["columns"],
                referenced_table=entry["referenced_table"],
                referenced_columns=entry["referenced_columns"],
                on_delete_action=action,
            ))
        return foreign_keys

    def _sequences(self, schema: str) -> List[Sequence]:
        return [self._sequence(row) for row in self._rows(SEQUENCES_QUERY, schema)]

    def _sequence(self, row: dict) -> Sequence:
        """
        Map a pg_sequences row onto the unsigned 32-bit model.

        Descending sequences keep their step size as the allocation size; start
        values outside the unsigned range are clamped to its nearest bound.
        """
        name = row["sequence_name"]
        start = int(row["start_value"])
        step = abs(int(row["increment_by"]))
        initial_value = _clamp(start)
        allocation_size = _clamp(step)
        if (initial_value, allocation_size) != (start, step):
            logger.warning(
                "Sequence %s clamped to the unsigned 32-bit range: start %d -> %d, increment %d -> %d",
                name, start, initial_value, step, allocation_size,
            )
        return Sequence(name=name, initial_value=initial_value, allocation_size=allocation_size)
