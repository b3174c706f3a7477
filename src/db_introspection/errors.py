from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(str, Enum):
    """Standardized error codes for introspection failures."""
    CONNECTION_FAILURE = "CONNECTION_FAILURE"
    UNKNOWN_RAW_TYPE = "UNKNOWN_RAW_TYPE"
    UNRECOGNIZED_FOREIGN_KEY_ACTION = "UNRECOGNIZED_FOREIGN_KEY_ACTION"
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"
    UNSUPPORTED_ENGINE = "UNSUPPORTED_ENGINE"


RETRIABLE_ERRORS = {
    ErrorCode.CONNECTION_FAILURE,
}


class IntrospectionFailure(BaseModel):
    """Serializable envelope for a failed introspection call."""

    code: ErrorCode
    message: str
    retriable: bool = False
    details: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore", frozen=True)


class IntrospectionError(Exception):
    """Base class for every failure surfaced by a connector.

    Attributes:
        error_code (ErrorCode): The standardized error code.
        message (str): A human-readable error message.
        details (Dict[str, Any]): Offending names and raw strings, enough to
            diagnose the failure without querying the database again.
    """

    error_code: ErrorCode = ErrorCode.INVARIANT_VIOLATION

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def retriable(self) -> bool:
        return self.error_code in RETRIABLE_ERRORS

    def to_failure(self) -> IntrospectionFailure:
        return IntrospectionFailure(
            code=self.error_code,
            message=self.message,
            retriable=self.retriable,
            details=self.details,
        )


class ConnectionFailure(IntrospectionError):
    """The connection failed to execute a catalog query."""

    error_code = ErrorCode.CONNECTION_FAILURE

    def __init__(self, message: str, sql: Optional[str] = None, schema: Optional[str] = None):
        super().__init__(message, details={"sql": sql, "schema": schema})
        self.sql = sql
        self.schema = schema


class UnknownRawType(IntrospectionError):
    """A vendor type string is outside the normalizer's known vocabulary."""

    error_code = ErrorCode.UNKNOWN_RAW_TYPE

    def __init__(
        self,
        raw: str,
        table: Optional[str] = None,
        column: Optional[str] = None,
        engine: Optional[str] = None,
    ):
        location = ""
        if table and column:
            location = f" in column {table}.{column}"
        elif column:
            location = f" in column {column}"
        engine_label = f"{engine} " if engine else ""
        super().__init__(
            f"Unknown {engine_label}type '{raw}'{location}",
            details={"raw": raw, "table": table, "column": column, "engine": engine},
        )
        self.raw = raw
        self.table = table
        self.column = column
        self.engine = engine


class UnrecognizedForeignKeyAction(IntrospectionError):
    """A referential action spelling has no ForeignKeyAction counterpart."""

    error_code = ErrorCode.UNRECOGNIZED_FOREIGN_KEY_ACTION

    def __init__(self, action: str, table: Optional[str] = None, constraint: Optional[str] = None):
        location = f" on table {table}" if table else ""
        if constraint:
            location += f" (constraint {constraint})"
        super().__init__(
            f"Unrecognized foreign key action '{action}'{location}",
            details={"action": action, "table": table, "constraint": constraint},
        )
        self.action = action
        self.table = table
        self.constraint = constraint


class InvariantViolation(IntrospectionError):
    """An assembled schema value breaks a canonical model invariant."""

    error_code = ErrorCode.INVARIANT_VIOLATION


class UnsupportedEngineError(IntrospectionError):
    """Raised when the requested database engine is not supported."""

    error_code = ErrorCode.UNSUPPORTED_ENGINE

    def __init__(self, engine: str):
        super().__init__(f"Unsupported engine: {engine}", details={"engine": engine})
        self.engine = engine
