"""
Request timing middleware.

Every request gets an id (the caller's ``X-Request-ID`` when supplied) and
its wall time is measured. Both are echoed back as ``X-Request-ID`` and
``X-Request-Duration-Ms``. One access line is logged per API request;
its level depends on the outcome (see ``_access_level``).
"""

import logging
import time
import uuid

from flask import Flask, g, request

logger = logging.getLogger(__name__)

# Monitors poll these constantly
_QUIET_PATHS = frozenset({"/health", "/api/v1/health"})

SLOW_THRESHOLD_MS = 1000


def _access_level(status: int, duration_ms: float) -> int:
    if status >= 500:
        return logging.ERROR
    if duration_ms > SLOW_THRESHOLD_MS:
        return logging.WARNING
    if status in (401, 403, 429):
        return logging.INFO
    return logging.DEBUG


def _should_log(path: str) -> bool:
    return path not in _QUIET_PATHS and not path.startswith("/static")


def init_request_timing(app: Flask):
    """Register before/after hooks for request timing."""

    @app.before_request
    def _start_timer():
        g.request_start = time.perf_counter()
        incoming = (request.headers.get("X-Request-ID") or "").strip()
        g.request_id = incoming[:64] or uuid.uuid4().hex[:12]

    @app.after_request
    def _finish_timer(response):
        start = g.pop("request_start", None)
        if start is None:
            return response

        elapsed = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = g.get("request_id", "")
        response.headers["X-Request-Duration-Ms"] = f"{elapsed:.1f}"

        if _should_log(request.path):
            level = _access_level(response.status_code, elapsed)
            tag = "Slow request" if elapsed > SLOW_THRESHOLD_MS else "Request"
            logger.log(
                level, "%s: %s %s %d (%.0fms)",
                tag, request.method, request.path, response.status_code, elapsed,
                extra={"status": response.status_code, "duration_ms": elapsed},
            )
        return response
