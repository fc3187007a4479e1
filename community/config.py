"""Environment-driven settings for Community."""

from __future__ import annotations

import os
from typing import Dict, Type

from dotenv import load_dotenv
from sqlalchemy.engine.url import make_url

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


def _engine_options_for(uri: str) -> dict:
    backend = make_url(uri).get_backend_name()
    options: dict = {"pool_pre_ping": True}
    if backend == "sqlite":
        # In-memory databases get Flask-SQLAlchemy's shared static pool.
        if make_url(uri).database not in (None, "", ":memory:"):
            options["connect_args"] = {"timeout": 30}
    elif backend in {"postgresql", "postgres"}:
        options["connect_args"] = {"connect_timeout": _env_int("DB_CONNECT_TIMEOUT_SECONDS", 10)}
    return options


class BaseConfig:
    """Shared defaults; every value can be overridden from the environment."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///instance/community.db")
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options_for(SQLALCHEMY_DATABASE_URI)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # The session cookie carries the client id and CSRF token.
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _env_flag("SESSION_COOKIE_SECURE", "false")
    PERMANENT_SESSION_LIFETIME = _env_int("SESSION_TTL_SECONDS", 7 * 24 * 3600)
    WTF_CSRF_ENABLED = True
    MAX_CONTENT_LENGTH = _env_int("MAX_CONTENT_LENGTH", 1024 * 1024)

    RATELIMIT_ENABLED = _env_flag("RATELIMIT_ENABLED", "true")
    RATELIMIT_DEFAULT = "200/hour"
    RATELIMIT_STORAGE_URI = os.environ.get("REDIS_URL", "memory://")

    PASSWORD_MIN_LENGTH = _env_int("PASSWORD_MIN_LENGTH", 6)

    # Gemini. The API key is read from GEMINI_API_KEY / API_KEY at call time.
    GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-3-flash-preview")
    GEMINI_API_BASE = os.environ.get("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
    AI_ASSIST_TIMEOUT_SECONDS = float(os.environ.get("AI_ASSIST_TIMEOUT_SECONDS", "30"))

    RUNTIME_MAX_CLIENTS = _env_int("RUNTIME_MAX_CLIENTS", 1000)
    FEED_POLL_INTERVAL_MS = _env_int("FEED_POLL_INTERVAL_MS", 3000)
    # Feeds nobody has viewed or polled for this long are unsubscribed.
    FEED_IDLE_TIMEOUT_SECONDS = _env_int("FEED_IDLE_TIMEOUT_SECONDS", 30)


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options_for(SQLALCHEMY_DATABASE_URI)
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    AI_ASSIST_TIMEOUT_SECONDS = 1.0


class ProductionConfig(BaseConfig):
    SESSION_COOKIE_SECURE = True


config_by_name: Dict[str, Type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "ci": TestingConfig,
}
