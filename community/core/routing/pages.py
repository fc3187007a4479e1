"""Apply route guard decisions to Flask page views."""

from __future__ import annotations

from typing import Optional, Tuple

from flask import Response, current_app, redirect, render_template

from community.core.routing.route_guard import RouteGuard, RouteKind
from community.core.runtime import ClientRuntime, current_runtime


def guard_navigation(path: str) -> Tuple[ClientRuntime, Optional[Response]]:
    """Return the client's runtime and, unless the page may render, the response to send instead."""
    runtime = current_runtime()
    guard: RouteGuard = current_app.extensions["route_guard"]
    decision = guard.resolve(path, runtime.auth)
    if decision.kind is RouteKind.PLACEHOLDER:
        return runtime, current_app.make_response(render_template("loading.html"))
    if decision.kind is RouteKind.REDIRECT:
        return runtime, redirect(decision.target)
    return runtime, None
