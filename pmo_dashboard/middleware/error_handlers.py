"""
App-wide error handlers.

Every failure leaves the API as the standard envelope
``{success: false, error, code, details?}``:

- ``PMOError`` subclasses map to their own status and code
- werkzeug HTTP errors on /api/ paths are normalised into the envelope
- anything else is logged with its traceback and reported as a generic 500

Browser (non-/api/) requests that fail authentication are redirected to
the login page instead.
"""

import logging

from flask import redirect, request, url_for
from werkzeug.exceptions import HTTPException

from pmo_dashboard.core.exceptions import (
    AuthError,
    PMOError,
    RateLimitedError,
    UpstreamUnavailableError,
    ValidationError,
)
from pmo_dashboard.utils.errors import E, api_error

logger = logging.getLogger(__name__)

_HTTP_CODES = {
    400: E.VALIDATION_INVALID,
    401: E.UNAUTHENTICATED,
    403: E.FORBIDDEN,
    404: E.NOT_FOUND,
    405: E.METHOD_NOT_ALLOWED,
    413: E.PAYLOAD_TOO_LARGE,
    415: E.UNSUPPORTED_MEDIA,
    429: E.RATE_LIMITED,
}


def _is_api_request() -> bool:
    return request.path.startswith("/api/")


def _envelope(error: PMOError):
    details = error.details if isinstance(error, ValidationError) else None
    return api_error(error.code, error.public_message, status=error.status_code, details=details)


def register_error_handlers(app):
    """Attach the handlers to ``app``."""

    @app.errorhandler(AuthError)
    def _handle_auth(error: AuthError):
        if not _is_api_request() and request.method == "GET":
            return redirect(url_for("views_bp.login_page", next=request.path))
        return _envelope(error)

    @app.errorhandler(UpstreamUnavailableError)
    def _handle_upstream(error: UpstreamUnavailableError):
        # Cause was logged where it was caught; keep the response generic.
        logger.error("Upstream unavailable on %s %s", request.method, request.path)
        return _envelope(error)

    @app.errorhandler(PMOError)
    def _handle_pmo_error(error: PMOError):
        if error.status_code >= 500:
            logger.error("Server error on %s %s: %s", request.method, request.path, error)
        else:
            logger.info("%s on %s %s: %s", type(error).__name__, request.method, request.path, error)
        return _envelope(error)

    @app.errorhandler(429)
    def _handle_rate_limited(error):
        logger.warning("Rate limit exceeded for %s on %s", request.remote_addr, request.path)
        return _envelope(RateLimitedError())

    @app.errorhandler(HTTPException)
    def _handle_http(error: HTTPException):
        if not _is_api_request():
            return error
        code = _HTTP_CODES.get(error.code, E.INTERNAL if (error.code or 500) >= 500 else E.VALIDATION_INVALID)
        message = error.description if error.code in (413, 415) else (error.name or "Error")
        return api_error(code, message, status=error.code)

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return api_error(E.INTERNAL, "Internal server error", status=500)
