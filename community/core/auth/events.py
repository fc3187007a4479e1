"""Identity event catalog."""

from __future__ import annotations

AUTH_SESSION_CHANGED = "auth.session.changed"

EVENT_CATALOG = {
    AUTH_SESSION_CHANGED: {
        "version": "v1",
        "payload": {
            "client_id": "str",
            "session": "SessionUser?",
        },
    },
}

__all__ = ["AUTH_SESSION_CHANGED", "EVENT_CATALOG"]
