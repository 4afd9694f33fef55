"""
PMO Dashboard
Flask Application Factory.

Usage:
    from pmo_dashboard import create_app
    app = create_app()           # defaults to APP_ENV or "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

import click
from flask import Flask, abort, request
from flask_cors import CORS
from flask_migrate import Migrate
from werkzeug.routing import IntegerConverter

from pmo_dashboard.auth import init_auth
from pmo_dashboard.config import ProductionConfig, build_settings, config
from pmo_dashboard.middleware.error_handlers import register_error_handlers
from pmo_dashboard.middleware.logging_config import configure_logging
from pmo_dashboard.middleware.rate_limiter import create_limiter, init_rate_limits
from pmo_dashboard.middleware.security_headers import init_security_headers
from pmo_dashboard.middleware.timing import init_request_timing
from pmo_dashboard.models import db
from pmo_dashboard.utils.helpers import MAX_DB_INT

logger = logging.getLogger(__name__)

# ── SQLite FK enforcement (global engine event) ─────────────────────────
from sqlalchemy import engine as _sa_engine, event as _sa_event  # noqa: E402


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()


class BoundedIntConverter(IntegerConverter):
    """``<int:...>`` that only matches ids the database can bind."""

    def __init__(self, url_map, *args, **kwargs):
        kwargs.setdefault("max", MAX_DB_INT)
        super().__init__(url_map, *args, **kwargs)


def create_app(config_name=None, config_overrides=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: One of "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.
        config_overrides: Optional mapping applied on top of the config class
                          (tests use it for a tiny rate limit).

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")
    if config_name not in config:
        raise ValueError(f"Unknown config name: {config_name}")

    config_class = config[config_name]
    if config_class is ProductionConfig:
        ProductionConfig.check()

    app = Flask(
        __name__,
        instance_relative_config=True,
        static_folder="../static",
        template_folder="../templates",
    )
    app.url_map.converters["int"] = BoundedIntConverter
    app.config.from_object(config_class)
    if config_overrides:
        app.config.update(config_overrides)

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Frozen runtime settings ──────────────────────────────────────────
    app.extensions["pmo_settings"] = build_settings(app.config, config_name)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter = create_limiter(app)
    app.extensions["pmo_limiter"] = limiter
    origins = app.extensions["pmo_settings"].cors_origins
    if origins:
        CORS(app, origins=list(origins), supports_credentials=True)

    # ── Request timing / identity / headers ──────────────────────────────
    init_request_timing(app)
    init_auth(app)
    init_security_headers(app)
    register_error_handlers(app)

    # ── Request guards (body size + Content-Type) ────────────────────────
    @app.before_request
    def _guard_request():
        max_len = app.config.get("MAX_CONTENT_LENGTH")
        if max_len and request.content_length and request.content_length > max_len:
            abort(413, description="Request body too large")
        if request.method in ("POST", "PUT", "PATCH") and request.path.startswith("/api/"):
            ct = request.content_type or ""
            if request.get_data(cache=True) and "json" not in ct:
                abort(415, description="Content-Type must be application/json")

    # ── Import all models so Alembic and create_all see them ─────────────
    from pmo_dashboard.models import admin as _admin_models        # noqa: F401
    from pmo_dashboard.models import auth as _auth_models          # noqa: F401
    from pmo_dashboard.models import comment as _comment_models    # noqa: F401
    from pmo_dashboard.models import dropdown as _dropdown_models  # noqa: F401
    from pmo_dashboard.models import project as _project_models    # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS) ────────────────────────
    with app.app_context():
        try:
            db.create_all()
            app.logger.info("db.create_all() completed successfully")
        except Exception as e:  # noqa: BLE001
            app.logger.warning("db.create_all() failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from pmo_dashboard.blueprints.admin_bp import admin_bp
    from pmo_dashboard.blueprints.auth_bp import auth_bp
    from pmo_dashboard.blueprints.comment_bp import comment_bp
    from pmo_dashboard.blueprints.health_bp import health_bp
    from pmo_dashboard.blueprints.project_bp import project_bp
    from pmo_dashboard.blueprints.report_bp import report_bp
    from pmo_dashboard.blueprints.simple_project_bp import simple_project_bp
    from pmo_dashboard.blueprints.views_bp import views_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(project_bp)
    app.register_blueprint(simple_project_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(comment_bp)
    app.register_blueprint(report_bp)
    app.register_blueprint(views_bp)

    # ── Rate limits (after blueprints exist) ─────────────────────────────
    init_rate_limits(app, limiter)

    # ── CLI commands ─────────────────────────────────────────────────────
    @app.cli.command("create-admin")
    @click.option("--username", prompt=True)
    @click.option("--email", prompt=True)
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    def create_admin_cmd(username, email, password):
        """Create an admin account (bootstrap the first login)."""
        from pmo_dashboard.services.user_service import create_admin
        user = create_admin(username, email, password)
        click.echo(f"Admin user '{user.username}' created (id={user.id}).")

    @app.cli.command("prune-sessions")
    def prune_sessions_cmd():
        """Delete revoked and expired session rows."""
        from pmo_dashboard.services.jwt_service import prune_sessions
        click.echo(f"Removed {prune_sessions()} session(s).")

    return app
