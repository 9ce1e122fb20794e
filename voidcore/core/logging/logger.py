"""
Logging for the VOID economy core.

Records are handed to a bounded queue and written by a background
`QueueListener`, so services running on the event loop never wait on stream
or file I/O. Every record is stamped with the operation context bound through
`LogContext`: player, leaderboard category, operation and a correlation id
that ties together the log lines of one player action.

Output
------
- JSON lines when ``LOG_JSON`` is set, or by default in production
- Colored text on an interactive terminal in development, plain text otherwise
- Optional JSON file rotated at UTC midnight (``LOG_TO_FILE``)

If the listener falls behind and the queue fills up, new records are dropped
and counted rather than blocking the caller.

Domain code never logs; services log through `BaseService.log_operation`
and `BaseService.log_error`.
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from voidcore.core.config.config import Config

QUEUE_MAX_SIZE = 10_000
LOG_FILE_NAME = "voidcore.json.log"
TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Record attributes lifted to the top level of a JSON line.
CONTEXT_KEYS = ("player_id", "category", "operation", "correlation_id")
MISSING = "N/A"

_log_context: ContextVar[Dict[str, Any]] = ContextVar("void_log_context", default={})

_log_queue: Optional["queue.Queue[logging.LogRecord]"] = None
_listener: Optional[QueueListener] = None


# ============================================================================
# Settings
# ============================================================================


def _level() -> int:
    return getattr(logging, str(Config.LOG_LEVEL).upper(), logging.INFO)


def _json_output() -> bool:
    if Config.LOG_JSON is not None:
        return bool(Config.LOG_JSON)
    return str(Config.ENVIRONMENT).lower() == "production"


def _colored_output() -> bool:
    return not _json_output() and bool(Config.LOG_COLORS) and sys.stdout.isatty()


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    """Stamp the bound operation context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _log_context.get()
        for key in CONTEXT_KEYS:
            # Values passed with extra= take precedence.
            if getattr(record, key, None) is None:
                setattr(record, key, context.get(key, MISSING))
        return True


class ColoredFormatter(logging.Formatter):
    LEVEL_COLORS = {
        logging.DEBUG: "\033[90m",
        logging.INFO: "\033[94m",
        logging.WARNING: "\033[93m",
        logging.ERROR: "\033[91m",
        logging.CRITICAL: "\033[1;91m",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        plain = record.levelname
        record.levelname = f"{color}{plain}\033[0m"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def _to_json(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return repr(value)


# Attributes every LogRecord carries; anything else came from extra=.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record; ``extra=`` fields go under ``"extra"``."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        line: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        for key in CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value not in (None, MISSING):
                line[key] = value

        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in CONTEXT_KEYS and not key.startswith("_")
        }
        if extra:
            line["extra"] = extra

        return json.dumps(line, ensure_ascii=False, default=_to_json)


# ============================================================================
# Queue plumbing
# ============================================================================


class DroppingQueueHandler(QueueHandler):
    """Queue handler that drops records instead of blocking on a full queue."""

    dropped = 0

    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            DroppingQueueHandler.dropped += 1


@dataclass(frozen=True)
class LoggingHealth:
    initialized: bool
    queue_size: int
    queue_max_size: int
    records_dropped: int


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if _json_output():
        handler.setFormatter(JSONFormatter())
    elif _colored_output():
        handler.setFormatter(ColoredFormatter(TEXT_FORMAT, DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, DATE_FORMAT))
    return handler


def _file_handler() -> logging.Handler:
    logs_dir = Path(Config.LOGS_DIR).resolve()
    logs_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=str(logs_dir / LOG_FILE_NAME),
        when="midnight",
        backupCount=1,
        encoding="utf-8",
        utc=True,
    )
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging() -> None:
    """Route the root logger through the background queue. Idempotent."""
    global _log_queue, _listener

    if _listener is not None:
        return

    handlers = [_console_handler()]
    if Config.LOG_TO_FILE:
        handlers.append(_file_handler())

    _log_queue = queue.Queue(QUEUE_MAX_SIZE)
    _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
    _listener.start()

    queue_handler = DroppingQueueHandler(_log_queue)
    # On the handler rather than a logger so child loggers are stamped too.
    queue_handler.addFilter(ContextFilter())

    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, DroppingQueueHandler):
            root.removeHandler(handler)
    root.addHandler(queue_handler)
    root.setLevel(_level())

    for noisy in ("asyncio", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if Config.DATABASE_ECHO else logging.WARNING
    )

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "level": logging.getLevelName(_level()),
            "json": _json_output(),
            "to_file": bool(Config.LOG_TO_FILE),
        },
    )


def shutdown_logging() -> None:
    """Flush the queue, stop the listener and detach the queue handler."""
    global _log_queue, _listener

    if _listener is None:
        return

    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, DroppingQueueHandler):
            root.removeHandler(handler)

    try:
        _listener.stop()
    finally:
        for handler in _listener.handlers:
            handler.close()
        _listener = None
        _log_queue = None


def get_logging_health() -> LoggingHealth:
    return LoggingHealth(
        initialized=_listener is not None,
        queue_size=_log_queue.qsize() if _log_queue is not None else 0,
        queue_max_size=_log_queue.maxsize if _log_queue is not None else 0,
        records_dropped=DroppingQueueHandler.dropped,
    )


# ============================================================================
# Context API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


def get_log_context() -> Dict[str, Any]:
    """Copy of the context bound to the current task or thread."""
    return dict(_log_context.get())


def _merged(
    base: Dict[str, Any],
    player_id: Optional[Any],
    category: Optional[str],
    operation: Optional[str],
    correlation_id: Optional[str],
    extra: Dict[str, Any],
) -> Dict[str, Any]:
    context = {**base, **extra}
    if player_id is not None:
        context["player_id"] = str(player_id)
    if category is not None:
        context["category"] = category
    if operation is not None:
        context["operation"] = operation
    if correlation_id:
        context["correlation_id"] = correlation_id
    return context


class LogContext:
    """
    Bind operation context for the duration of a block.

    Nested blocks inherit the outer context; a correlation id is generated
    when none is bound yet.

        async with LogContext(player_id="p1", operation="withdraw"):
            await bank.withdraw("p1", 500, now)
    """

    def __init__(
        self,
        player_id: Optional[Any] = None,
        category: Optional[str] = None,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        self.context = _merged(
            _log_context.get(), player_id, category, operation, correlation_id, extra
        )
        self.context.setdefault("correlation_id", uuid.uuid4().hex[:8])
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def set_log_context(
    player_id: Optional[Any] = None,
    category: Optional[str] = None,
    operation: Optional[str] = None,
    correlation_id: Optional[str] = None,
    **extra: Any,
) -> None:
    """Bind context until the current task ends or `clear_log_context` runs."""
    _log_context.set(
        _merged(_log_context.get(), player_id, category, operation, correlation_id, extra)
    )


def clear_log_context() -> None:
    _log_context.set({})


setup_logging()
