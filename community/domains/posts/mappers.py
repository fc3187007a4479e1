"""Posts mappers for DTO responses and display."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from community.core.utils.html import sanitize_html
from community.domains.posts.schemas import PostDocument, PostResponse

JUST_NOW = "just now"


def format_post_time(value: Optional[datetime]) -> str:
    """``Mar 4, 09:15`` style label in UTC, shown until the page script localizes it.

    ``just now`` before the server stamp lands.
    """
    if value is None:
        return JUST_NOW
    return f"{value:%b} {value.day}, {value:%H:%M}"


def post_timestamp(value: Optional[datetime]) -> Optional[str]:
    """ISO 8601 stamp the browser turns into the viewer's local time."""
    return value.isoformat() if value is not None else None


def author_initial(author: Optional[str]) -> str:
    return author[0].upper() if author else "?"


def map_post(post: PostDocument) -> dict:
    return PostResponse(
        id=post.id,
        title=post.title,
        content=sanitize_html(post.content),
        author=post.author,
        author_initial=author_initial(post.author),
        created_at=post_timestamp(post.created_at),
        created_label=format_post_time(post.created_at),
    ).model_dump()
