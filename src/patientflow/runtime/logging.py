"""
PatientFlow logging infrastructure.

Everything logs under the ``patientflow`` namespace through component
loggers (``Store``, ``Session``). Store and session events carry the entity
name, the operation and the record id as first-class fields, so a JSONL line
can be filtered with ``jq 'select(.entity == "Patient")'`` without parsing
the message.

Two outputs:
- Console (stderr): ``09:00:01 [Store] Patient.update p1: Updated Patient record``
- File (optional): ``<log_dir>/patientflow.log``, one JSON object per line
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOGGER_NAMESPACE = "patientflow"
LOG_FILE_NAME = "patientflow.log"

# Attributes copied from a LogRecord to the top level of a JSONL entry
EVENT_FIELDS = ("entity", "operation", "record_id")


# =============================================================================
# Terminal Colors (respects NO_COLOR)
# =============================================================================

_NO_COLOR = bool(os.environ.get("NO_COLOR")) or not sys.stderr.isatty()


def _ansi(code: int) -> str:
    return "" if _NO_COLOR else f"\033[{code}m"


RESET = _ansi(0)
DIM = _ansi(2)

COMPONENT_COLORS = {
    "Store": _ansi(34),  # Blue
    "Session": _ansi(36),  # Cyan
}

# Only non-INFO levels are labelled on the console
LEVEL_LABELS = {
    logging.DEBUG: ("DEBUG", DIM),
    logging.WARNING: ("WARNING", _ansi(33)),
    logging.ERROR: ("ERROR", _ansi(31)),
    logging.CRITICAL: ("CRITICAL", _ansi(31)),
}


# =============================================================================
# Formatters
# =============================================================================


def _event_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        name: getattr(record, name)
        for name in EVENT_FIELDS
        if getattr(record, name, None) is not None
    }


class JSONLFormatter(logging.Formatter):
    """
    One JSON object per log record.

    Example:
    {"timestamp":"2024-03-01T09:00:01.000Z","level":"DEBUG","component":"Store",
     "entity":"Patient","operation":"create","record_id":"patient-1000",
     "message":"Created Patient record"}
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "component": getattr(record, "component", "App"),
            **_event_fields(record),
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        # Warnings point back at their call site
        if record.levelno >= logging.WARNING:
            entry["source"] = {"file": record.pathname, "line": record.lineno}

        if record.exc_info and record.exc_info[1] is not None:
            error = record.exc_info[1]
            entry["exception"] = {"type": type(error).__name__, "message": str(error)}

        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Single-line console output tagged with component and operation."""

    def format(self, record: logging.LogRecord) -> str:
        component = getattr(record, "component", "App")
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        parts = [f"{DIM}{clock}{RESET}", f"{COMPONENT_COLORS.get(component, '')}[{component}]{RESET}"]

        label = LEVEL_LABELS.get(record.levelno)
        if label:
            name, color = label
            parts.append(f"{color}{name}{RESET}")

        fields = _event_fields(record)
        if "operation" in fields:
            target = ".".join(str(fields[k]) for k in ("entity", "operation") if k in fields)
            if "record_id" in fields:
                target = f"{target} {fields['record_id']}"
            parts.append(f"{target}:")

        parts.append(record.getMessage())
        return " ".join(parts)


# =============================================================================
# Logger Setup
# =============================================================================


class _ComponentFilter(logging.Filter):
    """Stamps the owning component on every record a logger emits."""

    def __init__(self, component: str):
        super().__init__()
        self.component = component

    def filter(self, record: logging.LogRecord) -> bool:
        record.component = getattr(record, "component", self.component)
        return True


_loggers: dict[str, logging.Logger] = {}
_log_file: Path | None = None


def setup_logging(
    log_dir: Path | str | None = None,
    level: int = logging.INFO,
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
) -> Path | None:
    """
    Configure the ``patientflow`` logger.

    Always installs a console handler on stderr. When ``log_dir`` is given,
    also writes JSONL entries to ``<log_dir>/patientflow.log`` with rotation.
    Calling it again replaces the previous handlers.

    Args:
        log_dir: Directory for the JSONL log file, or None for console only
        level: Minimum log level
        max_bytes: Max size per log file before rotation
        backup_count: Number of backup files to keep

    Returns:
        The log directory, or None when file logging is off
    """
    global _log_file

    namespace_logger = logging.getLogger(LOGGER_NAMESPACE)
    namespace_logger.setLevel(level)
    for old in list(namespace_logger.handlers):
        namespace_logger.removeHandler(old)
        old.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    handlers[0].setFormatter(ConsoleFormatter())

    _log_file = None
    if log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        _log_file = directory / LOG_FILE_NAME
        file_handler = RotatingFileHandler(
            _log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(JSONLFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        namespace_logger.addHandler(handler)

    if _log_file is None:
        return None

    log_event(
        namespace_logger,
        logging.INFO,
        "PatientFlow logging initialized",
        log_file=str(_log_file),
    )
    return _log_file.parent


def get_logger(component: str) -> logging.Logger:
    """
    Get the logger for a component, e.g. ``get_logger("Store")``.

    Returns:
        Logger named ``patientflow.<component>``
    """
    logger = _loggers.get(component)
    if logger is None:
        logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{component.lower()}")
        logger.addFilter(_ComponentFilter(component))
        _loggers[component] = logger
    return logger


def log_event(
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    entity: str | None = None,
    operation: str | None = None,
    record_id: Any = None,
    **context: Any,
) -> None:
    """
    Log one store or session event.

    ``entity``, ``operation`` and ``record_id`` become top-level JSONL
    fields; remaining keyword arguments go under ``context``.
    """
    extra: dict[str, Any] = {"entity": entity, "operation": operation, "record_id": record_id}
    if context:
        extra["context"] = context
    logger.log(level, message, extra=extra)


def get_store_logger() -> logging.Logger:
    """Logger for entity store operations."""
    return get_logger("Store")


def get_session_logger() -> logging.Logger:
    """Logger for user session operations."""
    return get_logger("Session")


def get_log_file() -> Path | None:
    """Path of the JSONL log file, or None when file logging is off."""
    return _log_file
