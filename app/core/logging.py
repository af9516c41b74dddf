"""
Structured logging with JSON formatting and correlation ID support.

Every request gets a correlation ID (see app.core.middleware) which is
attached to each log line emitted while that request is handled, so a
single reconciliation run can be followed across both order sources.

Order context passed through ``extra=`` (order_id, source, status_code)
is promoted to top-level JSON keys; anything else lands under ``extra``.
"""
import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Optional

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

ORDER_CONTEXT_FIELDS = ("order_id", "source", "status_code")

# Attributes every LogRecord carries; everything else came from ``extra=``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, suitable for log shipping."""

    def __init__(self, service: Optional[str] = None):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.service:
            entry["service"] = self.service

        correlation_id = correlation_id_var.get()
        if correlation_id:
            entry["correlation_id"] = correlation_id

        extras = _record_extras(record)
        for name in ORDER_CONTEXT_FIELDS:
            if name in extras:
                entry[name] = extras.pop(name)
        if extras:
            entry["extra"] = extras

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Coloured single-line output for local development."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, "")
        line = f"{color}{record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"

        context = [f"{k}={v}" for k, v in _record_extras(record).items()]
        correlation_id = correlation_id_var.get()
        if correlation_id:
            context.append(f"correlation_id={correlation_id}")
        if context:
            line += " [" + " ".join(context) + "]"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    handler: Optional[logging.Handler] = None,
    service: Optional[str] = None,
) -> None:
    """
    Install a single root handler.

    Args:
        level: Logging level name
        json_output: JSONFormatter when True, ConsoleFormatter otherwise
        handler: Handler to install; defaults to stdout
        service: Service name stamped on JSON lines
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)

    handler = handler or logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(service) if json_output else ConsoleFormatter())
    root.addHandler(handler)

    # Adapters log their own order source calls
    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_correlation_id(correlation_id: str) -> Token:
    """Bind a correlation ID to the current context; keep the token to reset it."""
    return correlation_id_var.set(correlation_id)


def get_correlation_id() -> str:
    return correlation_id_var.get()


def clear_correlation_id(token: Token) -> None:
    correlation_id_var.reset(token)
