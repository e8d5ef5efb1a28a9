"""
Logging setup for the livestock web client.

Log calls pass structured context as ``extra={"extra_fields": {...}}``.
Records are rendered either as one JSON object per line or as a compact
console line; both carry the request ID of the current task, which the
API client also forwards to the livestock service.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional
from uuid import uuid4

ROOT_LOGGER = "livestock_web"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_request_id: ContextVar[Optional[str]] = ContextVar("livestock_request_id", default=None)

LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
RESET = "\033[0m"


def _context(record: logging.LogRecord) -> Dict[str, Any]:
    context: Dict[str, Any] = dict(getattr(record, "extra_fields", None) or {})
    request_id = _request_id.get()
    if request_id:
        context.setdefault("request_id", request_id)
    return context


class JsonFormatter(logging.Formatter):
    """One JSON object per record, context fields merged at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        entry.update(_context(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Single-line output for development; colored when ``colors`` is set."""

    def __init__(self, colors: bool = True) -> None:
        super().__init__()
        self.colors = colors

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname.lower():8}"
        if self.colors:
            level = f"{LEVEL_COLORS.get(record.levelno, '')}{level}{RESET}"

        context = _context(record)
        request_id = context.pop("request_id", None)
        line = f"{self.formatTime(record, DATE_FORMAT)} {level} {record.name}"
        if request_id:
            line += f" [{str(request_id)[:8]}]"
        line += f" {record.getMessage()}"
        if context:
            line += " " + " ".join(f"{key}={value}" for key, value in context.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    log_level: str = "INFO",
    use_json: bool = False,
    stream: Any = None,
) -> logging.Logger:
    """
    Attach a single handler to the client's root logger.

    Calling it again replaces the handler, so it is safe to call once per
    process entry point.

    Args:
        log_level: Level name such as DEBUG or INFO
        use_json: Emit JSON lines instead of console lines
        stream: Output stream, stdout by default

    Returns:
        The client's root logger
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        JsonFormatter() if use_json else ConsoleFormatter(colors=stream is None)
    )

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    logging.getLogger("httpcore").setLevel(max(level, logging.WARNING))
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger below the client's root logger."""
    return logging.getLogger(name or ROOT_LOGGER)


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind a request ID to the current context, generating one if needed."""
    request_id = request_id or str(uuid4())
    _request_id.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    return _request_id.get()


def clear_request_id() -> None:
    _request_id.set(None)
