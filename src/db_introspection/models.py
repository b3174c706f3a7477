"""
Canonical, engine-independent schema model.

Every value here is immutable once constructed. Constructors validate the
model invariants and raise InvariantViolation; pydantic does not wrap that
exception because it is not a ValueError.
"""

from __future__ import annotations

import enum
import hashlib
import json
import re
from collections import Counter
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_validator,
)

from .errors import InvariantViolation, UnrecognizedForeignKeyAction

U32_MAX = 2**32 - 1

_CANONICAL = ConfigDict(extra="forbid", frozen=True)


def _duplicates(names: Iterable[str]) -> List[str]:
    return sorted(name for name, count in Counter(names).items() if count > 1)


class ColumnTypeFamily(str, enum.Enum):
    """Closed set of semantic type families every vendor type is classified into."""
    INT = "Int"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    STRING = "String"
    DATE_TIME = "DateTime"
    BINARY = "Binary"
    JSON = "Json"
    UUID = "Uuid"
    GEOMETRIC = "Geometric"
    LOG_SEQUENCE_NUMBER = "LogSequenceNumber"
    TEXT_SEARCH = "TextSearch"
    TRANSACTION_ID = "TransactionId"


class ColumnArity(str, enum.Enum):
    REQUIRED = "Required"
    NULLABLE = "Nullable"
    LIST = "List"   # array-typed column


class ForeignKeyAction(str, enum.Enum):
    """ANSI SQL referential actions (ON DELETE)."""
    NO_ACTION = "NoAction"
    RESTRICT = "Restrict"
    CASCADE = "Cascade"
    SET_NULL = "SetNull"
    SET_DEFAULT = "SetDefault"

    @classmethod
    def from_catalog(
        cls,
        spelling: str,
        table: Optional[str] = None,
        constraint: Optional[str] = None,
    ) -> ForeignKeyAction:
        """Map a catalog spelling ("NO ACTION", "set_null", "SetDefault", ...) onto the vocabulary.

        Raises:
            UnrecognizedForeignKeyAction: If the spelling has no counterpart.
        """
        key = re.sub(r"[\s_\-]+", "", spelling or "").lower()
        action = _ACTION_SPELLINGS.get(key)
        if action is None:
            raise UnrecognizedForeignKeyAction(spelling, table=table, constraint=constraint)
        return action


_ACTION_SPELLINGS: Dict[str, ForeignKeyAction] = {
    "noaction": ForeignKeyAction.NO_ACTION,
    "restrict": ForeignKeyAction.RESTRICT,
    "cascade": ForeignKeyAction.CASCADE,
    "setnull": ForeignKeyAction.SET_NULL,
    "setdefault": ForeignKeyAction.SET_DEFAULT,
}


class ColumnType(BaseModel):
    raw: str = Field(..., description="Verbatim vendor type string, kept for diagnostics.")
    family: ColumnTypeFamily

    model_config = _CANONICAL


class Column(BaseModel):
    name: str
    tpe: ColumnType
    arity: ColumnArity
    default: Optional[str] = Field(default=None, description="Raw default expression, never evaluated.")
    auto_increment: bool = False

    model_config = _CANONICAL

    @model_validator(mode="after")
    def check_auto_increment(self) -> Column:
        if self.auto_increment and self.tpe.family != ColumnTypeFamily.INT:
            raise InvariantViolation(
                f"Column '{self.name}' is auto-increment but its family is {self.tpe.family.value}",
                details={"column": self.name, "family": self.tpe.family.value, "raw": self.tpe.raw},
            )
        return self


class Index(BaseModel):
    name: str
    columns: List[str]
    unique: bool = False

    model_config = _CANONICAL


class PrimaryKey(BaseModel):
    columns: List[str]

    model_config = _CANONICAL

    @model_validator(mode="after")
    def check_not_empty(self) -> PrimaryKey:
        if not self.columns:
            raise InvariantViolation("Primary key must name at least one column")
        return self


class ForeignKey(BaseModel):
    columns: List[str]
    referenced_table: str
    referenced_columns: List[str]
    on_delete_action: ForeignKeyAction = ForeignKeyAction.NO_ACTION

    model_config = _CANONICAL

    @model_validator(mode="after")
    def check_columns_pair_up(self) -> ForeignKey:
        if not self.columns:
            raise InvariantViolation(
                f"Foreign key to '{self.referenced_table}' must name at least one column",
                details={"referenced_table": self.referenced_table},
            )
        if len(self.columns) != len(self.referenced_columns):
            raise InvariantViolation(
                f"Foreign key {self.columns} -> {self.referenced_table}{self.referenced_columns} "
                "pairs columns of different lengths",
                details={
                    "columns": list(self.columns),
                    "referenced_table": self.referenced_table,
                    "referenced_columns": list(self.referenced_columns),
                },
            )
        return self


class Table(BaseModel):
    name: str
    columns: List[Column] = Field(default_factory=list)
    indices: List[Index] = Field(default_factory=list)
    primary_key: Optional[PrimaryKey] = None
    foreign_keys: List[ForeignKey] = Field(default_factory=list)

    model_config = _CANONICAL

    def get_column(self, name: str) -> Optional[Column]:
        return next((c for c in self.columns if c.name == name), None)

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @model_validator(mode="after")
    def check_references(self) -> Table:
        names = self.column_names
        duplicated = _duplicates(names)
        if duplicated:
            raise InvariantViolation(
                f"Table '{self.name}' declares duplicate columns: {', '.join(duplicated)}",
                details={"table": self.name, "columns": duplicated},
            )

        known = set(names)
        if self.primary_key:
            self._require_columns(known, self.primary_key.columns, "primary key")
        for index in self.indices:
            self._require_columns(known, index.columns, f"index '{index.name}'")
        for fk in self.foreign_keys:
            self._require_columns(known, fk.columns, f"foreign key to '{fk.referenced_table}'")
        return self

    def _require_columns(self, known: set, columns: List[str], owner: str) -> None:
        missing = [c for c in columns if c not in known]
        if missing:
            raise InvariantViolation(
                f"The {owner} of table '{self.name}' references unknown columns: {', '.join(missing)}",
                details={"table": self.name, "owner": owner, "missing": missing},
            )


class Enum(BaseModel):
    name: str
    values: FrozenSet[str] = Field(default_factory=frozenset)

    model_config = _CANONICAL

    @field_serializer("values")
    def serialize_values(self, values: FrozenSet[str]) -> List[str]:
        return sorted(values)


class Sequence(BaseModel):
    """A native sequence object (Postgres); engines without sequences report none."""

    name: str
    initial_value: int
    allocation_size: int

    model_config = _CANONICAL

    @field_validator("initial_value", "allocation_size")
    @classmethod
    def check_unsigned_32(cls, value: int, info: ValidationInfo) -> int:
        if value < 0 or value > U32_MAX:
            raise InvariantViolation(
                f"Sequence {info.field_name} {value} is outside the unsigned 32-bit range",
                details={"field": info.field_name, "value": value},
            )
        return value


class DatabaseSchema(BaseModel):
    """Snapshot of one introspected schema."""

    tables: List[Table] = Field(default_factory=list)
    enums: List[Enum] = Field(default_factory=list)
    sequences: List[Sequence] = Field(default_factory=list)

    model_config = _CANONICAL

    def get_table(self, name: str) -> Optional[Table]:
        return next((t for t in self.tables if t.name == name), None)

    def get_enum(self, name: str) -> Optional[Enum]:
        return next((e for e in self.enums if e.name == name), None)

    def get_sequence(self, name: str) -> Optional[Sequence]:
        return next((s for s in self.sequences if s.name == name), None)

    @model_validator(mode="after")
    def check_names(self) -> DatabaseSchema:
        for kind, names in (
            ("table", [t.name for t in self.tables]),
            ("enum", [e.name for e in self.enums]),
            ("sequence", [s.name for s in self.sequences]),
        ):
            duplicated = _duplicates(names)
            if duplicated:
                raise InvariantViolation(
                    f"Duplicate {kind} names in schema: {', '.join(duplicated)}",
                    details={"kind": kind, "names": duplicated},
                )

        # Targets outside this snapshot (other schemas) cannot be checked here.
        for table in self.tables:
            for fk in table.foreign_keys:
                target = self.get_table(fk.referenced_table)
                if target is None:
                    continue
                known = set(target.column_names)
                missing = [c for c in fk.referenced_columns if c not in known]
                if missing:
                    raise InvariantViolation(
                        f"Foreign key {table.name}{fk.columns} references unknown columns "
                        f"{fk.referenced_table}.{missing}",
                        details={
                            "table": table.name,
                            "referenced_table": fk.referenced_table,
                            "missing": missing,
                        },
                    )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> DatabaseSchema:
        return cls.model_validate(payload)

    @classmethod
    def from_json(cls, payload: str) -> DatabaseSchema:
        return cls.model_validate_json(payload)

    def fingerprint(self) -> str:
        """Stable SHA-256 over the canonical JSON form of the snapshot."""
        raw = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(raw.encode()).hexdigest()


def serialize(schema: DatabaseSchema, indent: Optional[int] = None) -> str:
    return schema.to_json(indent=indent)


def deserialize(payload: str) -> DatabaseSchema:
    return DatabaseSchema.from_json(payload)
