"""View decorators shared by the page and API blueprints."""

from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar

from flask import abort, current_app, jsonify, request

from community.core.auth.csrf import submitted_token, token_matches
from community.core.runtime import current_runtime

F = TypeVar("F", bound=Callable)


def _wants_json() -> bool:
    return request.is_json or request.path.startswith("/api/")


def session_required(fn: F) -> F:
    """API views only run for a client whose auth context holds a session.

    Pages use the route guard instead; this answers ``503 session_loading`` or
    ``401 unauthorized`` so the polling script can react.
    """

    @wraps(fn)
    def wrapper(*args, **kwargs):  # type: ignore[misc]
        auth = current_runtime().auth
        if auth.loading:
            return jsonify({"ok": False, "error": "session_loading"}), 503
        if auth.current_session is None:
            return jsonify({"ok": False, "error": "unauthorized"}), 401
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def csrf_protected(fn: F) -> F:
    """Reject state-changing requests that do not echo the session's CSRF token."""

    @wraps(fn)
    def wrapper(*args, **kwargs):  # type: ignore[misc]
        if current_app.config.get("WTF_CSRF_ENABLED", True) and not token_matches(submitted_token()):
            if _wants_json():
                return jsonify({"ok": False, "error": "csrf_failed"}), 403
            abort(403, description="csrf_failed")
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
