"""Per-session CSRF tokens for form posts and script-issued requests."""

from __future__ import annotations

import hmac
import secrets

from flask import request, session

CSRF_SESSION_KEY = "_csrf"
CSRF_HEADER = "X-CSRF-Token"
CSRF_FORM_FIELD = "csrf_token"


def csrf_token() -> str:
    """Token for the requesting browser, minted on first use."""
    token = session.get(CSRF_SESSION_KEY)
    if token is None:
        token = session[CSRF_SESSION_KEY] = secrets.token_urlsafe(32)
    return token


def submitted_token() -> str:
    return request.headers.get(CSRF_HEADER) or request.form.get(CSRF_FORM_FIELD) or ""


def token_matches(candidate: str) -> bool:
    expected = session.get(CSRF_SESSION_KEY)
    if not candidate or not expected:
        return False
    return hmac.compare_digest(candidate, expected)
