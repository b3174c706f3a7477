"""
SQLite introspection connector.

Introspects attached SQLite databases using PRAGMA statements. A schema is an
attached database name ("main", "temp", or an ATTACH alias); PRAGMAs do not
take bound parameters, so names are quoted into the SQL text.

SQLite identifiers are case-insensitive and foreign_key_list reports the
REFERENCES clause as written, so referenced names are resolved against the
catalog before they enter the model.
"""

import re
from collections import defaultdict
from typing import Dict, List, Optional

from ..connector import SqlIntrospectionConnector
from ..logger import get_logger
from ..models import Column, ColumnArity, Enum, ForeignKey, ForeignKeyAction, Index, PrimaryKey

logger = get_logger(__name__)

# index_list origin for the implicit index backing a PRIMARY KEY clause
PRIMARY_KEY_ORIGIN = "pk"

# table options follow the closing parenthesis of the column list
_WITHOUT_ROWID = re.compile(r"\bwithout\s+rowid\b[^)]*$", re.IGNORECASE)


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def resolve_name(name: Optional[str], candidates: List[str]) -> Optional[str]:
    """Catalog spelling of ``name`` among ``candidates``, compared case-insensitively."""
    if name is None:
        return None
    if name in candidates:
        return name
    folded = name.lower()
    return next((c for c in candidates if c.lower() == folded), name)


class SqliteConnector(SqlIntrospectionConnector):
    engine_name = "sqlite"

    def _pragma(self, schema: str, pragma: str, argument: str) -> List[dict]:
        sql = f"PRAGMA {quote_identifier(schema)}.{pragma}({quote_identifier(argument)})"
        return self._rows(sql, schema)

    def _table_info(self, schema: str, table: str) -> List[dict]:
        return self._pragma(schema, "table_info", table)

    def _table_sql(self, schema: str, table: str) -> str:
        sql = (
            f"SELECT sql FROM {quote_identifier(schema)}.sqlite_master "
            "WHERE type = 'table' AND name = :table"
        )
        rows = self._rows(sql, schema, {"table": table})
        return (rows[0]["sql"] or "").strip() if rows else ""

    def _primary_key_columns(self, info: List[dict]) -> List[str]:
        return [row["name"] for row in sorted((r for r in info if r["pk"]), key=lambda r: r["pk"])]

    def _rowid_alias(self, schema: str, table: str, info: List[dict]) -> str:
        """Name of the INTEGER PRIMARY KEY column aliasing rowid, or ''.

        WITHOUT ROWID tables have no rowid, and "INTEGER PRIMARY KEY DESC" is
        backed by a separate pk index instead of aliasing it.
        """
        pk = [row for row in info if row["pk"]]
        if len(pk) != 1 or (pk[0]["type"] or "").strip().upper() != "INTEGER":
            return ""
        if any(e.get("origin") == PRIMARY_KEY_ORIGIN for e in self._pragma(schema, "index_list", table)):
            return ""
        if _WITHOUT_ROWID.search(self._table_sql(schema, table)):
            return ""
        return pk[0]["name"]

    def _schema_names(self) -> List[str]:
        return [row["name"] for row in self._rows("PRAGMA database_list", "")]

    def _table_names(self, schema: str) -> List[str]:
        sql = (
            f"SELECT name AS table_name FROM {quote_identifier(schema)}.sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        return [row["table_name"] for row in self._rows(sql, schema)]

    def _columns(self, schema: str, tables: List[str], enums: List[Enum]) -> Dict[str, List[Column]]:
        columns: Dict[str, List[Column]] = {}
        for table in tables:
            info = self._table_info(schema, table)
            rowid_alias = self._rowid_alias(schema, table, info)
            table_columns = []
            for row in sorted(info, key=lambda r: r["cid"]):
                tpe, arity = self.normalizer.normalize(
                    row["type"] or "",
                    nullable=not row["notnull"],
                    table=table,
                    column=row["name"],
                )
                is_rowid = row["name"] == rowid_alias
                table_columns.append(Column(
                    name=row["name"],
                    tpe=tpe,
                    # a rowid alias can never hold NULL, whatever notnull says
                    arity=ColumnArity.REQUIRED if is_rowid else arity,
                    default=row["dflt_value"],
                    auto_increment=is_rowid,
                ))
            columns[table] = table_columns
        return columns

    def _indices(self, schema: str, tables: List[str]) -> Dict[str, List[Index]]:
        indices: Dict[str, List[Index]] = defaultdict(list)
        for table in tables:
            for entry in sorted(self._pragma(schema, "index_list", table), key=lambda r: r["name"]):
                if entry.get("origin") == PRIMARY_KEY_ORIGIN:
                    continue
                keys = sorted(self._pragma(schema, "index_info", entry["name"]), key=lambda r: r["seqno"])
                # cid -2 is an expression, -1 the rowid; neither has a name
                if not keys or any(k["name"] is None for k in keys):
                    logger.debug("Skipping expression index %s on %s", entry["name"], table)
                    continue
                indices[table].append(Index(
                    name=entry["name"],
                    columns=[k["name"] for k in keys],
                    unique=bool(entry["unique"]),
                ))
        return indices

    def _primary_keys(self, schema: str, tables: List[str]) -> Dict[str, PrimaryKey]:
        keys: Dict[str, PrimaryKey] = {}
        for table in tables:
            columns = self._primary_key_columns(self._table_info(schema, table))
            if columns:
                keys[table] = PrimaryKey(columns=columns)
        return keys

    def _foreign_keys(self, schema: str, tables: List[str]) -> Dict[str, List[ForeignKey]]:
        foreign_keys: Dict[str, List[ForeignKey]] = defaultdict(list)
        for table in tables:
            grouped: Dict[int, List[dict]] = defaultdict(list)
            for row in self._pragma(schema, "foreign_key_list", table):
                grouped[row["id"]].append(row)

            local_names = [row["name"] for row in self._table_info(schema, table)]
            for fk_id in sorted(grouped):
                rows = sorted(grouped[fk_id], key=lambda r: r["seq"])
                referenced_table = resolve_name(rows[0]["table"], tables)
                referenced_columns = [r["to"] for r in rows]
                if any(c is None for c in referenced_columns):
                    # REFERENCES parent without a column list targets the parent's primary key
                    referenced_columns = self._primary_key_columns(self._table_info(schema, referenced_table))
                elif referenced_table in tables:
                    parent_names = [row["name"] for row in self._table_info(schema, referenced_table)]
                    referenced_columns = [resolve_name(c, parent_names) for c in referenced_columns]
                foreign_keys[table].append(ForeignKey(
                    columns=[resolve_name(r["from"], local_names) for r in rows],
                    referenced_table=referenced_table,
                    referenced_columns=referenced_columns,
                    on_delete_action=ForeignKeyAction.from_catalog(
                        rows[0]["on_delete"], table=table, constraint=str(fk_id)
                    ),
                ))
        return foreign_keys
