import contextvars
import json
import logging
from contextlib import contextmanager
from typing import Optional

from .settings import Settings

_engine_ctx = contextvars.ContextVar("introspection_engine", default=None)
_schema_ctx = contextvars.ContextVar("introspection_schema", default=None)


class IntrospectionContextFilter(logging.Filter):
    """Injects the engine and schema being introspected into the log record."""
    def filter(self, record):
        record.engine = _engine_ctx.get()
        record.schema = _schema_ctx.get()
        return True


@contextmanager
def introspection_context(engine: str, schema: Optional[str] = None):
    """Context manager tagging every log record emitted inside it with engine and schema."""
    engine_token = _engine_ctx.set(engine)
    schema_token = _schema_ctx.set(schema)
    try:
        yield
    finally:
        _schema_ctx.reset(schema_token)
        _engine_ctx.reset(engine_token)


class JsonFormatter(logging.Formatter):
    """Formatter that outputs JSON strings after parsing the LogRecord."""

    # Standard LogRecord attributes to ignore
    STANDARD_ATTRS = {
        "args", "asctime", "created", "exc_info", "exc_text", "filename",
        "funcName", "levelname", "levelno", "lineno", "module",
        "msecs", "message", "msg", "name", "pathname", "process",
        "processName", "relativeCreated", "stack_info", "thread", "threadName",
        "taskName", "engine", "schema",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Formats the log record as a JSON string.

        Args:
           record (logging.LogRecord): The log record to format.

        Returns:
            str: The JSON-formatted log string.
        """
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        for key in ("engine", "schema"):
            if getattr(record, key, None):
                log_record[key] = getattr(record, key)

        for key, value in record.__dict__.items():
            if key not in self.STANDARD_ATTRS and not key.startswith("_"):
                log_record[key] = value

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


def configure_logging(level: str = "INFO", json_format: bool = False):
    """Configures the root logger.

    Args:
        level (str): The logging level (default: INFO).
        json_format (bool): Whether to use JSON formatting (default: False).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.addFilter(IntrospectionContextFilter())

    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - [%(engine)s:%(schema)s] - %(name)s - %(levelname)s - %(message)s"
        ))

    root_logger.addHandler(handler)

    # Silence pool chatter
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


def configure_logging_from_settings(settings: Optional[Settings] = None):
    """Configures the root logger from LOG_LEVEL and LOG_JSON."""
    settings = settings or Settings()
    configure_logging(level=settings.log_level.upper(), json_format=settings.log_json)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
