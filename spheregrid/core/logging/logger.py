"""
SphereGrid logging subsystem.

Purpose
-------
One logging stack for the whole core:

- Records go through a bounded queue and are written by a listener thread,
  so a guard callback fired from a timer never blocks on I/O.
- Session and user context lives in a ContextVar and is stamped onto every
  record, including records emitted from scheduler callbacks.
- Console output is JSON in production and human-readable elsewhere; an
  optional daily JSON file keeps one day of history.

Public API
----------
- get_logger(name)
- LogContext (sync + async context manager)
- set_log_context() / get_log_context() / clear_log_context()
- setup_logging() / shutdown_logging() / get_logging_health()

Context fields
--------------
user_id, session_id, task_id, component, operation, correlation_id.
A field passed explicitly through ``extra={...}`` wins over the context;
``component`` falls back to the package segment of the logger name.

Dependencies
------------
- spheregrid.core.config.config.Config
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
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from spheregrid.core.config.config import Config


# ============================================================================
# Context
# ============================================================================

_log_context: ContextVar[Dict[str, Any]] = ContextVar("spheregrid_log_context", default={})

CONTEXT_FIELDS = (
    "user_id",
    "session_id",
    "task_id",
    "component",
    "operation",
    "correlation_id",
)


def _merged_context(fields: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    context = dict(_log_context.get())
    context.update({key: str(value) for key, value in fields.items() if value is not None})
    context.update(extra)
    return context


# ============================================================================
# Settings
# ============================================================================


@dataclass(frozen=True, slots=True)
class LoggerConfig:
    """Fixed logging layout plus switches read live from ``Config``."""

    CONSOLE_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(name)-34s | %(message)s"
    DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    DAILY_BASENAME: str = "spheregrid_daily.json.log"
    DAILY_BACKUP_COUNT: int = 1
    QUEUE_MAX_SIZE: int = 10_000

    @property
    def logs_dir(self) -> Path:
        return Path(Config.LOGS_DIR)

    @property
    def file_enabled(self) -> bool:
        return bool(Config.LOG_FILE_ENABLED)

    @property
    def log_level(self) -> int:
        return getattr(logging, Config.LOG_LEVEL, logging.INFO)

    @property
    def use_json(self) -> bool:
        if Config.LOG_JSON is None:
            return Config.is_production()
        return Config.LOG_JSON

    @property
    def use_colors(self) -> bool:
        return not self.use_json and Config.LOG_COLORS and sys.stdout.isatty()


LOGGER_CONFIG = LoggerConfig()


# ============================================================================
# Health
# ============================================================================


@dataclass(slots=True)
class LoggingMetrics:
    records_enqueued: int = 0
    records_dropped: int = 0
    listener_errors: int = 0


@dataclass(frozen=True, slots=True)
class LoggingHealth:
    initialized: bool
    file_enabled: bool
    queue_size: int
    queue_max_size: int
    records_enqueued: int
    records_dropped: int
    listener_errors: int


_logging_metrics = LoggingMetrics()
_log_queue: Optional["queue.Queue[logging.LogRecord]"] = None
_queue_listener: Optional[QueueListener] = None
_INITIALIZED_FLAG = "_spheregrid_logging_initialized"


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    """Stamp the current ContextVar context onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _log_context.get()

        # "spheregrid.modules.session.guard" -> "session"
        parts = record.name.split(".")
        component = parts[2] if len(parts) > 2 else parts[0]

        for name in CONTEXT_FIELDS:
            if getattr(record, name, None) is not None:
                continue
            fallback = component if name == "component" else "N/A"
            setattr(record, name, context.get(name) or fallback)

        return True


class ColoredFormatter(logging.Formatter):
    """Color the level name on interactive terminals."""

    RESET = "\033[0m"
    LEVEL_COLORS: Dict[int, str] = {
        logging.DEBUG: "\033[90m",
        logging.INFO: "\033[94m",
        logging.WARNING: "\033[93m",
        logging.ERROR: "\033[91m",
        logging.CRITICAL: "\033[91m\033[1m",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)

        plain = record.levelname
        record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """One JSON object per line; context fields at the top, ``extra`` nested."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value not in (None, "N/A"):
                payload[name] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in CONTEXT_FIELDS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        return json.dumps(payload, ensure_ascii=False, default=str)


# ============================================================================
# Queue plumbing
# ============================================================================


class SphereGridQueueHandler(QueueHandler):
    """Drop and count records instead of blocking when the queue is full."""

    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        _logging_metrics.records_enqueued += 1
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            _logging_metrics.records_dropped += 1
            sys.stderr.write("SphereGrid logging queue full; dropping log record.\n")


class SphereGridQueueListener(QueueListener):
    def handleError(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        _logging_metrics.listener_errors += 1
        sys.stderr.write("SphereGrid logging handler error while processing record.\n")


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if LOGGER_CONFIG.use_json:
        handler.setFormatter(JSONFormatter())
    else:
        formatter_cls = ColoredFormatter if LOGGER_CONFIG.use_colors else logging.Formatter
        handler.setFormatter(
            formatter_cls(fmt=LOGGER_CONFIG.CONSOLE_FORMAT, datefmt=LOGGER_CONFIG.DATE_FORMAT)
        )
    return handler


def _daily_file_handler() -> logging.Handler:
    LOGGER_CONFIG.logs_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=str(LOGGER_CONFIG.logs_dir / LOGGER_CONFIG.DAILY_BASENAME),
        when="midnight",
        backupCount=LOGGER_CONFIG.DAILY_BACKUP_COUNT,
        encoding="utf-8",
        utc=True,
    )
    handler.setFormatter(JSONFormatter())
    return handler


# ============================================================================
# Setup / Teardown
# ============================================================================


def setup_logging() -> None:
    """Install the queue-backed handler stack on the root logger (idempotent)."""
    global _queue_listener, _logging_metrics, _log_queue

    root = logging.getLogger()
    if getattr(root, _INITIALIZED_FLAG, False):
        return

    level = LOGGER_CONFIG.log_level
    _logging_metrics = LoggingMetrics()

    root.setLevel(level)
    root.handlers.clear()
    root.filters.clear()

    sinks: List[logging.Handler] = [_console_handler()]
    if LOGGER_CONFIG.file_enabled:
        sinks.append(_daily_file_handler())
    for sink in sinks:
        sink.setLevel(level)

    _log_queue = queue.Queue(LOGGER_CONFIG.QUEUE_MAX_SIZE)
    _queue_listener = SphereGridQueueListener(_log_queue, *sinks, respect_handler_level=True)
    _queue_listener.start()

    queue_handler = SphereGridQueueHandler(_log_queue)
    queue_handler.setLevel(level)
    # On the handler, not the root logger, so child-logger records are stamped too.
    queue_handler.addFilter(ContextFilter())
    root.addHandler(queue_handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
    setattr(root, _INITIALIZED_FLAG, True)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "log_level": logging.getLevelName(level),
            "json": LOGGER_CONFIG.use_json,
            "file_enabled": LOGGER_CONFIG.file_enabled,
            "queue_max_size": LOGGER_CONFIG.QUEUE_MAX_SIZE,
        },
    )


def shutdown_logging() -> None:
    """Stop the listener, then flush and detach every root handler."""
    global _queue_listener, _log_queue

    root = logging.getLogger()
    if not getattr(root, _INITIALIZED_FLAG, False):
        return

    logging.getLogger(__name__).info("Shutting down logging subsystem.")

    if _queue_listener is not None:
        _queue_listener.stop()
        _queue_listener = None

    for handler in list(root.handlers):
        handler.flush()
        handler.close()
        root.removeHandler(handler)

    setattr(root, _INITIALIZED_FLAG, False)
    _log_queue = None


def get_logging_health() -> LoggingHealth:
    return LoggingHealth(
        initialized=bool(getattr(logging.getLogger(), _INITIALIZED_FLAG, False)),
        file_enabled=LOGGER_CONFIG.file_enabled,
        queue_size=_log_queue.qsize() if _log_queue is not None else 0,
        queue_max_size=_log_queue.maxsize if _log_queue is not None else 0,
        records_enqueued=_logging_metrics.records_enqueued,
        records_dropped=_logging_metrics.records_dropped,
        listener_errors=_logging_metrics.listener_errors,
    )


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Scoped logging context; nested scopes inherit the outer correlation id.

    Usage
    -----
    >>> with LogContext(session_id="s-42", component="session", operation="start"):
    ...     logger.info("Session started")
    """

    def __init__(
        self,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
        task_id: Optional[str] = None,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        self.context: Dict[str, Any] = _merged_context(
            {
                "user_id": user_id,
                "session_id": session_id,
                "task_id": task_id,
                "component": component,
                "operation": operation,
                "correlation_id": correlation_id,
            },
            extra,
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
    user_id: Optional[str] = None,
    session_id: Optional[str] = None,
    task_id: Optional[str] = None,
    component: Optional[str] = None,
    operation: Optional[str] = None,
    correlation_id: Optional[str] = None,
    **extra: Any,
) -> None:
    """Merge fields into the current context without a scope."""
    _log_context.set(
        _merged_context(
            {
                "user_id": user_id,
                "session_id": session_id,
                "task_id": task_id,
                "component": component,
                "operation": operation,
                "correlation_id": correlation_id,
            },
            extra,
        )
    )


def get_log_context() -> Dict[str, Any]:
    return dict(_log_context.get())


def clear_log_context() -> None:
    _log_context.set({})


setup_logging()
