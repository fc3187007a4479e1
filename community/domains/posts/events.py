"""Posts domain event catalog."""

from __future__ import annotations

POSTS_SNAPSHOT = "posts.snapshot"

EVENT_CATALOG = {
    POSTS_SNAPSHOT: {
        "version": "v1",
        "payload": {
            "snapshot": "PostSnapshot",
        },
    },
}

__all__ = ["EVENT_CATALOG", "POSTS_SNAPSHOT"]
