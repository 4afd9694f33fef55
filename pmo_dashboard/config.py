"""
PMO Dashboard
Configuration classes for Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name])

The security-relevant values are then frozen into ``PMOSettings`` once at
start-up (see ``build_settings``) and read through ``get_settings()``.
"""

import os
import secrets
from dataclasses import dataclass

from flask import current_app

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

_SQLITE_DEV = f"sqlite:///{os.path.join(basedir, 'instance', 'pmo_dashboard_dev.db')}"
_SQLITE_TEST = "sqlite:///:memory:"

# Random key for development; production must set SECRET_KEY
_DEV_SECRET = secrets.token_hex(32)


def _db_url(raw: str) -> str:
    return raw.replace("postgres://", "postgresql://", 1) if raw else raw


class Config:
    """Base configuration shared across all environments."""

    SECRET_KEY = os.getenv("SECRET_KEY", _DEV_SECRET)
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    DEBUG = False
    TESTING = False

    # SQLAlchemy
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }

    # Sessions
    SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", str(8 * 3600)))
    SESSION_COOKIE_NAME_PMO = os.getenv("SESSION_COOKIE_NAME", "pmo_session")
    SESSION_COOKIE_SECURE_PMO = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # CORS
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")

    # Rate limiting (fixed window per client IP on /api/v1)
    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "true").lower() == "true"
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100"))
    RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900"))

    # Request guards
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # 10 MB


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    SQLALCHEMY_DATABASE_URI = _db_url(os.getenv("DATABASE_URL", "")) or _SQLITE_DEV
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")


class TestingConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", _SQLITE_TEST)
    SQLALCHEMY_ENGINE_OPTIONS = {}
    RATELIMIT_ENABLED = False
    BCRYPT_ROUNDS = 4


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    SQLALCHEMY_DATABASE_URI = _db_url(os.getenv("DATABASE_URL", ""))
    SESSION_COOKIE_SECURE_PMO = os.getenv("SESSION_COOKIE_SECURE", "true").lower() == "true"

    @classmethod
    def check(cls):
        missing = [name for name in ("DATABASE_URL", "SECRET_KEY") if not os.getenv(name)]
        if missing:
            raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


# ── Frozen runtime settings ──────────────────────────────────────────────


@dataclass(frozen=True)
class PMOSettings:
    """Process-wide settings, built once in ``create_app`` and never mutated."""

    environment: str
    jwt_secret: str
    session_ttl_seconds: int
    session_cookie_name: str
    session_cookie_secure: bool
    cors_origins: tuple[str, ...]
    rate_limit_enabled: bool
    rate_limit_max_requests: int
    rate_limit_window_seconds: int

    @property
    def rate_limit(self) -> str:
        """Flask-Limiter limit string, e.g. ``100 per 900 second``."""
        return f"{self.rate_limit_max_requests} per {self.rate_limit_window_seconds} second"


def build_settings(app_config, environment: str) -> PMOSettings:
    origins = tuple(o.strip() for o in (app_config.get("CORS_ORIGINS") or "").split(",") if o.strip())
    return PMOSettings(
        environment=environment,
        jwt_secret=app_config.get("JWT_SECRET_KEY") or app_config["SECRET_KEY"],
        session_ttl_seconds=int(app_config["SESSION_TTL_SECONDS"]),
        session_cookie_name=app_config["SESSION_COOKIE_NAME_PMO"],
        session_cookie_secure=bool(app_config["SESSION_COOKIE_SECURE_PMO"]),
        cors_origins=origins,
        rate_limit_enabled=bool(app_config.get("RATELIMIT_ENABLED", True)),
        rate_limit_max_requests=int(app_config["RATE_LIMIT_MAX_REQUESTS"]),
        rate_limit_window_seconds=int(app_config["RATE_LIMIT_WINDOW_SECONDS"]),
    )


def get_settings() -> PMOSettings:
    return current_app.extensions["pmo_settings"]
