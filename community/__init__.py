"""Community: a shared post feed with AI-assisted writing."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from flask import Flask, abort, redirect, request

from community.config import config_by_name
from community.core.ai.generative_client import GeminiClient
from community.core.auth.csrf import csrf_token
from community.core.auth.identity_provider import IdentityProvider
from community.core.events import EventBus
from community.core.routing import RouteGuard
from community.core.runtime import ClientRuntime, RuntimeRegistry, current_runtime
from community.core.utils.html import sanitize_html
from community.domains.posts.mappers import author_initial, format_post_time, post_timestamp
from community.domains.posts.store import PostStore
from community.extensions import init_extensions

PACKAGE_DIR = Path(__file__).resolve().parent
PROJECT_DIR = PACKAGE_DIR.parent


def create_app(config_name: Optional[str] = None) -> Flask:
    """Build the app for ``config_name`` (default: ``$APP_ENV`` or development)."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    app = Flask(
        __name__,
        instance_path=str(PROJECT_DIR / "instance"),
        static_folder=str(PACKAGE_DIR / "static"),
        template_folder=str(PACKAGE_DIR / "templates"),
    )
    app.config.from_object(config_by_name.get(env_name, config_by_name["development"]))
    _resolve_sqlite_path(app)

    init_extensions(app)
    _init_services(app)
    _register_blueprints(app)
    _register_error_handlers(app)
    _register_template_helpers(app)

    @app.before_request
    def _release_idle_feeds():
        registry: RuntimeRegistry = app.extensions["runtime_registry"]
        registry.release_idle_feeds(app.config["FEED_IDLE_TIMEOUT_SECONDS"])

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/<path:unknown>")
    def catch_all(unknown: str):
        if unknown == "api" or unknown.startswith("api/"):
            abort(404, description="not_found")
        # Unknown pages always go to the root; the root applies the guard.
        guard: RouteGuard = app.extensions["route_guard"]
        decision = guard.resolve(f"/{unknown}", current_runtime().auth)
        return redirect(decision.target or "/")

    return app


def _resolve_sqlite_path(app: Flask) -> None:
    # Relative sqlite files live under the project root, whatever the cwd.
    uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    prefix = "sqlite:///"
    if not uri.startswith(prefix):
        return
    db_path = Path(uri[len(prefix):])
    if not db_path.is_absolute():
        db_path = PROJECT_DIR / db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    app.config["SQLALCHEMY_DATABASE_URI"] = f"{prefix}{db_path}"


def _init_services(app: Flask) -> None:
    """Wire the identity provider, post store and generative client into client runtimes."""
    bus = EventBus()
    identity = IdentityProvider(bus, password_min_length=app.config["PASSWORD_MIN_LENGTH"])
    store = PostStore(bus)
    generator = GeminiClient(
        model=app.config["GEMINI_MODEL"],
        api_base=app.config["GEMINI_API_BASE"],
        timeout=app.config["AI_ASSIST_TIMEOUT_SECONDS"],
    )

    def _runtime_factory(client_id: str) -> ClientRuntime:
        return ClientRuntime(client_id, identity=identity, store=store, generator=generator)

    app.extensions["event_bus"] = bus
    app.extensions["identity_provider"] = identity
    app.extensions["post_store"] = store
    app.extensions["generative_client"] = generator
    app.extensions["route_guard"] = RouteGuard()
    app.extensions["runtime_registry"] = RuntimeRegistry(
        _runtime_factory, max_clients=app.config["RUNTIME_MAX_CLIENTS"]
    )


def _register_blueprints(app: Flask) -> None:
    from community.core.auth.controllers import auth_pages_bp  # local import to avoid circulars
    from community.domains.posts.controllers.feed_api import feed_api_bp
    from community.domains.posts.controllers.feed_pages import feed_pages_bp

    app.register_blueprint(auth_pages_bp)
    app.register_blueprint(feed_pages_bp)
    app.register_blueprint(feed_api_bp, url_prefix="/api")


def _register_error_handlers(app: Flask) -> None:
    """Errors come back as ``{"ok": false, "error": ...}`` bodies."""
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _unexpected_error(exc: Exception):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        detail = str(exc) if (app.debug or app.testing) else "unexpected_error"
        return {"ok": False, "error": detail}, 500


def _register_template_helpers(app: Flask) -> None:
    @app.context_processor
    def _csrf():
        return {"csrf_token": csrf_token}

    app.add_template_filter(sanitize_html, "sanitize_html")
    app.add_template_filter(format_post_time, "post_time")
    app.add_template_filter(post_timestamp, "post_timestamp")
    app.add_template_filter(author_initial, "author_initial")
