"""Text normalization helpers shared by the extraction modules."""

from __future__ import annotations

import re

_WS_RE = re.compile(r"\s+")

TRUNCATION_MARKER = "... [truncated]"


def clean_text(value: str | None) -> str:
    """Collapse all whitespace runs to single spaces and strip."""
    if not value:
        return ""
    return _WS_RE.sub(" ", value).strip()


def element_text(el) -> str:
    if el is None:
        return ""
    return clean_text(el.get_text(" ", strip=True))


def count_words(text: str) -> int:
    return len([w for w in (text or "").split() if w])


def clip(value: str, limit: int) -> str:
    return value[:limit] if len(value) > limit else value


def truncate_content(text: str, max_chars: int, marker: str = TRUNCATION_MARKER) -> str:
    """Cap `text` at `max_chars`, appending `marker` when anything was cut."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip() + marker
