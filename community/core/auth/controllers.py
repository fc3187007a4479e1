"""Sign-in, sign-up and sign-out pages."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, redirect, render_template, request

from community.core.auth.identity_provider import IdentityError, IdentityProvider
from community.core.routing import LOGIN_PATH, PROTECTED_ROOT, SIGNUP_PATH
from community.core.routing.pages import guard_navigation
from community.core.runtime import current_runtime
from community.core.utils.decorators import csrf_protected
from community.extensions import limiter

logger = logging.getLogger(__name__)

auth_pages_bp = Blueprint("auth_pages", __name__)

ERROR_MESSAGES = {
    "invalid_credentials": "The email or password is incorrect.",
    "invalid_email": "Enter a valid email address.",
    "email_already_exists": "An account with this email already exists.",
    "weak_password": "The password is too short.",
}
DEFAULT_ERROR_MESSAGE = "Something went wrong. Please try again."


def _identity() -> IdentityProvider:
    return current_app.extensions["identity_provider"]


def _render_form(template: str, *, error_code: str | None = None, status: int = 200):
    message = ERROR_MESSAGES.get(error_code, DEFAULT_ERROR_MESSAGE) if error_code else None
    return (
        render_template(
            template,
            error=message,
            email=request.form.get("email", ""),
            password_min_length=_identity().password_min_length,
        ),
        status,
    )


@auth_pages_bp.get(LOGIN_PATH)
def login_page():
    _, response = guard_navigation(LOGIN_PATH)
    if response is not None:
        return response
    return _render_form("auth/login.html")


@auth_pages_bp.post(LOGIN_PATH)
@limiter.limit("10/minute")
@csrf_protected
def login():
    runtime, response = guard_navigation(LOGIN_PATH)
    if response is not None:
        return response
    try:
        _identity().sign_in(runtime.client_id, request.form.get("email", ""), request.form.get("password", ""))
    except IdentityError as exc:
        if exc.__cause__ is not None:
            logger.exception("Sign-in failed")
        return _render_form("auth/login.html", error_code=exc.code, status=400)
    return redirect(PROTECTED_ROOT)


@auth_pages_bp.get(SIGNUP_PATH)
def signup_page():
    _, response = guard_navigation(SIGNUP_PATH)
    if response is not None:
        return response
    return _render_form("auth/signup.html")


@auth_pages_bp.post(SIGNUP_PATH)
@limiter.limit("5/minute")
@csrf_protected
def signup():
    runtime, response = guard_navigation(SIGNUP_PATH)
    if response is not None:
        return response
    try:
        _identity().sign_up(runtime.client_id, request.form.get("email", ""), request.form.get("password", ""))
    except IdentityError as exc:
        if exc.__cause__ is not None:
            logger.exception("Sign-up failed")
        return _render_form("auth/signup.html", error_code=exc.code, status=400)
    return redirect(PROTECTED_ROOT)


@auth_pages_bp.post("/logout")
@csrf_protected
def logout():
    runtime = current_runtime()
    try:
        _identity().sign_out(runtime.client_id)
    except IdentityError:
        # Sign-out failures are logged only; the user stays signed in.
        logger.exception("Logout failed")
    return redirect(LOGIN_PATH)
