"""Composer drafts and AI-assisted writing."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple

from community.core.ai.generative_client import GenerativeServiceError
from community.core.utils.html import is_blank, is_blank_markup
from community.domains.posts.feed import FeedSynchronizer

logger = logging.getLogger(__name__)

ASSIST_PROMPT = (
    "Write the title and body of a short post that inspires people. "
    "Format the body with HTML tags such as <b>, <i>, <ul> and <li> so it is pleasant to read. "
    "Use a warm tone."
)
ASSIST_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING", "description": "Title of the post"},
        "content": {"type": "STRING", "description": "Body of the post, formatted with HTML"},
    },
    "required": ["title", "content"],
}
FALLBACK_TITLE = "Today's special advice"
FALLBACK_CONTENT = (
    "<p>You worked <b>really hard</b> today. "
    "How about pausing for a breath and looking around you?</p>"
)


class TextGenerator(Protocol):
    def generate_json(self, prompt: str, schema: Dict[str, Any]) -> Dict[str, Any]: ...


@dataclass(frozen=True)
class AssistResult:
    title: str
    content: str
    fallback: bool = False
    error: Optional[str] = None


class Composer:
    """Title and HTML body drafts for one client.

    Only one AI-assist call may be outstanding; further calls are rejected
    until it finishes.
    """

    def __init__(self, generator: TextGenerator) -> None:
        self._generator = generator
        self._busy = threading.Lock()
        self.title = ""
        self.content = ""

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    @property
    def can_submit(self) -> bool:
        return not is_blank(self.title) and not self.busy

    def update(self, title: Optional[str] = None, content: Optional[str] = None) -> None:
        if title is not None:
            self.title = title
        if content is not None:
            self.content = content

    def clear(self) -> None:
        self.title = ""
        self.content = ""

    def ai_assist(self) -> Optional[AssistResult]:
        """Fill both drafts from the generative service.

        Returns ``None`` when another call is still running. Failures never
        propagate: the drafts get the fixed fallback pair and the result
        carries the error code.
        """
        if not self._busy.acquire(blocking=False):
            logger.info("AI assist already running; request ignored")
            return None
        try:
            try:
                payload = self._generator.generate_json(ASSIST_PROMPT, ASSIST_SCHEMA)
                title, content = _extract_draft(payload)
            except GenerativeServiceError as exc:
                logger.warning("AI generation failed (%s): %s", exc.code, exc)
                return self._fall_back(exc.code)
            except Exception:
                logger.exception("AI generation failed unexpectedly")
                return self._fall_back("request_failed")
            self.title, self.content = title, content
            return AssistResult(title=title, content=content)
        finally:
            self._busy.release()

    def submit(self, feed: FeedSynchronizer, author_label: Optional[str]) -> str:
        """Hand the drafts to the feed; they are cleared only if the insert succeeds."""
        post_id = feed.create(self.title, self.content, author_label)
        self.clear()
        return post_id

    def _fall_back(self, code: str) -> AssistResult:
        self.title, self.content = FALLBACK_TITLE, FALLBACK_CONTENT
        return AssistResult(title=FALLBACK_TITLE, content=FALLBACK_CONTENT, fallback=True, error=code)


def _extract_draft(payload: Any) -> Tuple[str, str]:
    if not isinstance(payload, dict):
        raise GenerativeServiceError("malformed_response", "Draft payload is not an object")
    title = payload.get("title")
    content = payload.get("content")
    if not isinstance(title, str) or not isinstance(content, str) or is_blank(title) or is_blank_markup(content):
        raise GenerativeServiceError("malformed_response", "Draft payload is missing title or content")
    return title, content


__all__ = [
    "ASSIST_PROMPT",
    "ASSIST_SCHEMA",
    "AssistResult",
    "Composer",
    "FALLBACK_CONTENT",
    "FALLBACK_TITLE",
]
