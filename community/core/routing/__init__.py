"""Navigation decisions derived from the auth context."""

from community.core.routing.route_guard import (
    LOGIN_PATH,
    PROTECTED_ROOT,
    SIGNUP_PATH,
    AuthState,
    RouteDecision,
    RouteGuard,
    RouteKind,
    auth_state,
    normalize_path,
)

__all__ = [
    "LOGIN_PATH",
    "PROTECTED_ROOT",
    "SIGNUP_PATH",
    "AuthState",
    "RouteDecision",
    "RouteGuard",
    "RouteKind",
    "auth_state",
    "normalize_path",
]
