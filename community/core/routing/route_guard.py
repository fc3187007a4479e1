"""Route guard: placeholder, render or redirect for each navigation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Protocol

from community.core.auth.identity_provider import SessionUser

PROTECTED_ROOT = "/"
LOGIN_PATH = "/login"
SIGNUP_PATH = "/signup"


class AuthState(str, Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class RouteKind(str, Enum):
    PLACEHOLDER = "placeholder"
    RENDER = "render"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class RouteDecision:
    kind: RouteKind
    target: Optional[str] = None


class SessionState(Protocol):
    loading: bool
    current_session: Optional[SessionUser]


def auth_state(context: SessionState) -> AuthState:
    if context.loading:
        return AuthState.LOADING
    if context.current_session is not None:
        return AuthState.AUTHENTICATED
    return AuthState.UNAUTHENTICATED


def normalize_path(path: str) -> str:
    return "/" + (path or "").strip().strip("/")


class RouteGuard:
    """Stateless; every decision is a function of the path and the auth context."""

    def __init__(
        self,
        protected_paths: Iterable[str] = (PROTECTED_ROOT,),
        public_only_paths: Iterable[str] = (LOGIN_PATH, SIGNUP_PATH),
    ) -> None:
        self.protected_paths = frozenset(normalize_path(p) for p in protected_paths)
        self.public_only_paths = frozenset(normalize_path(p) for p in public_only_paths)

    def resolve(self, path: str, context: SessionState) -> RouteDecision:
        path = normalize_path(path)
        if path not in self.protected_paths and path not in self.public_only_paths:
            # Unknown paths go to the root whatever the session; the root decides next.
            return RouteDecision(RouteKind.REDIRECT, PROTECTED_ROOT)

        state = auth_state(context)
        if state is AuthState.LOADING:
            return RouteDecision(RouteKind.PLACEHOLDER)
        if path in self.protected_paths:
            if state is AuthState.AUTHENTICATED:
                return RouteDecision(RouteKind.RENDER)
            return RouteDecision(RouteKind.REDIRECT, LOGIN_PATH)
        if state is AuthState.AUTHENTICATED:
            return RouteDecision(RouteKind.REDIRECT, PROTECTED_ROOT)
        return RouteDecision(RouteKind.RENDER)


__all__ = [
    "AuthState",
    "LOGIN_PATH",
    "PROTECTED_ROOT",
    "RouteDecision",
    "RouteGuard",
    "RouteKind",
    "SIGNUP_PATH",
    "auth_state",
    "normalize_path",
]
