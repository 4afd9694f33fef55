"""
Structured logging configuration.

Production writes one JSON object per line; development and testing use a
coloured single-line format. ``RequestContextFilter`` stamps every record
emitted inside a request with the request id, method, path, client address
and acting user, so service-level log lines can be correlated with the
access line written by ``timing``.

Level: ``LOG_LEVEL`` env var; defaults to INFO (production), DEBUG
(development) or WARNING (testing).
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

from flask import g, has_request_context, request

_CONTEXT_FIELDS = ("request_id", "method", "path", "remote_addr", "user_id")
_RECORD_FIELDS = _CONTEXT_FIELDS + ("status", "duration_ms")


class RequestContextFilter(logging.Filter):
    """Copy request attributes onto the log record (never drops a record)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not has_request_context():
            return True
        identity = g.get("identity")
        context = {
            "request_id": g.get("request_id"),
            "method": request.method,
            "path": request.path,
            "remote_addr": request.remote_addr,
            "user_id": getattr(identity, "id", None),
        }
        for key, value in context.items():
            if getattr(record, key, None) is None:
                setattr(record, key, value)
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": f"{record.module}:{record.lineno}",
        }
        entry.update({
            key: getattr(record, key)
            for key in _RECORD_FIELDS
            if getattr(record, key, None) is not None
        })
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """Coloured one-liner: ``HH:MM:SS LEVEL [request-id] logger: message``."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        rid = getattr(record, "request_id", None)
        prefix = f" [{rid}]" if rid else ""
        line = f"{color}{ts} {record.levelname:<8}{self.RESET}{prefix} {record.name}: {record.getMessage()}"
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _default_level(app) -> str:
    if app.config.get("TESTING"):
        return "WARNING"
    return "DEBUG" if app.config.get("DEBUG") else "INFO"


def configure_logging(app):
    """Replace the root handlers with a single stderr handler for ``app``."""
    is_prod = not app.config.get("DEBUG") and not app.config.get("TESTING")
    level_name = os.getenv("LOG_LEVEL", _default_level(app)).upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if is_prod else ReadableFormatter())
    handler.addFilter(RequestContextFilter())
    handler.setLevel(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for noisy in ("urllib3", "werkzeug", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    app.logger.setLevel(level)

    if not app.config.get("TESTING"):
        app.logger.info("Logging configured: level=%s format=%s",
                        level_name, "JSON" if is_prod else "readable")
