"""
Rate limiting configuration.

One fixed-window limit, keyed by client IP, shared across every /api/v1
blueprint (default 100 requests per 15 minutes). Health checks are exempt.
Exceeding it answers 429 with the RateLimitedError envelope (see
``error_handlers``).

Usage:
    from pmo_dashboard.middleware.rate_limiter import create_limiter, init_rate_limits
    limiter = create_limiter(app)
    init_rate_limits(app, limiter)
"""

import logging

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

logger = logging.getLogger(__name__)

# Blueprints served under /api/v1 that count against the shared limit
API_BLUEPRINTS = (
    "auth_bp",
    "project_bp",
    "simple_project_bp",
    "admin_bp",
    "comment_bp",
    "report_bp",
)

EXEMPT_BLUEPRINTS = ("health_bp", "views_bp")


def create_limiter(app) -> Limiter:
    """Build the per-app limiter (fixed window, remote-address key)."""
    app.config.setdefault("RATELIMIT_STRATEGY", "fixed-window")
    app.config.setdefault("RATELIMIT_HEADERS_ENABLED", True)
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[],
        storage_uri=app.config.get("RATELIMIT_STORAGE_URI", "memory://"),
        strategy="fixed-window",
        enabled=bool(app.config.get("RATELIMIT_ENABLED", True)),
    )
    limiter.init_app(app)
    return limiter


def init_rate_limits(app, limiter):
    """
    Apply the shared API limit to the API blueprints.

    Must run after the blueprints are registered. Skipped entirely when
    RATELIMIT_ENABLED is false (testing).
    """
    settings = app.extensions["pmo_settings"]
    if not settings.rate_limit_enabled:
        app.logger.info("Rate limiter disabled (RATELIMIT_ENABLED=False)")
        return

    api_limit = limiter.shared_limit(settings.rate_limit, scope="api")
    for bp_name in API_BLUEPRINTS:
        bp = app.blueprints.get(bp_name)
        if bp:
            api_limit(bp)

    for bp_name in EXEMPT_BLUEPRINTS:
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.exempt(bp)

    app.logger.info("Rate limiter configured: %s per client IP on /api/v1", settings.rate_limit)
