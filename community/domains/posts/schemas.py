"""Post documents and request schemas."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ANONYMOUS_AUTHOR = "Anonymous"


class PostDocument(BaseModel):
    """A post as read back from the store.

    Rows are validated here rather than trusted: required fields must be
    present and ``created_at`` always ends up a timezone-aware datetime.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(min_length=1)
    title: str
    content: str
    author: str = ANONYMOUS_AUTHOR
    created_at: Optional[datetime] = None

    @field_validator("author", mode="before")
    @classmethod
    def _default_author(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return ANONYMOUS_AUTHOR
        return value

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands back naive CURRENT_TIMESTAMP values, which are UTC.
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class PostCreateRequest(BaseModel):
    title: str = Field(max_length=255)
    content: str = Field(max_length=100_000)


class PostResponse(BaseModel):
    id: str
    title: str
    content: str
    author: str
    author_initial: str
    created_at: Optional[str]
    created_label: str


class AssistResponse(BaseModel):
    title: str
    content: str
    fallback: bool
    error: Optional[str] = None
