"""Helpers for the HTML bodies posts are written in."""

from __future__ import annotations

import re
from html import escape
from html.parser import HTMLParser
from typing import List, Optional, Tuple

_TAG_RE = re.compile(r"<[^>]*>", re.DOTALL)

ALLOWED_TAGS = frozenset(
    {
        "a", "b", "blockquote", "br", "em", "h1", "h2", "h3", "i", "li",
        "ol", "p", "s", "span", "strike", "strong", "u", "ul",
    }
)
VOID_TAGS = frozenset({"br"})
ALLOWED_URL_SCHEMES = ("http://", "https://", "mailto:")


def strip_markup(value: Optional[str]) -> str:
    """Drop every tag, keeping the text between them."""
    return _TAG_RE.sub("", value or "")


def is_blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def is_blank_markup(value: Optional[str]) -> bool:
    """True for bodies such as ``<p><br></p>`` that carry no visible text."""
    return is_blank(strip_markup(value))


class _Sanitizer(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: List[str] = []
        self._open: List[str] = []

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        if tag not in ALLOWED_TAGS:
            return
        rendered = tag
        if tag == "a":
            href = dict(attrs).get("href") or ""
            if href.strip().lower().startswith(ALLOWED_URL_SCHEMES):
                rendered += f' href="{escape(href.strip(), quote=True)}" rel="nofollow noopener" target="_blank"'
        self.parts.append(f"<{rendered}>")
        if tag not in VOID_TAGS:
            self._open.append(tag)

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        if tag in VOID_TAGS:
            self.parts.append(f"<{tag}>")

    def handle_endtag(self, tag: str) -> None:
        if tag not in self._open:
            return
        # Close anything left open inside this element first.
        while self._open:
            current = self._open.pop()
            self.parts.append(f"</{current}>")
            if current == tag:
                break

    def handle_data(self, data: str) -> None:
        self.parts.append(escape(data, quote=False))

    def close(self) -> None:
        super().close()
        while self._open:
            self.parts.append(f"</{self._open.pop()}>")


def sanitize_html(value: Optional[str]) -> str:
    """Keep formatting tags from the editor's toolbar; escape everything else.

    Attributes are dropped except a safe ``href`` on links. Script and style
    bodies survive only as escaped text.
    """
    parser = _Sanitizer()
    parser.feed(value or "")
    parser.close()
    return "".join(parser.parts)


__all__ = ["is_blank", "is_blank_markup", "sanitize_html", "strip_markup"]
