"""Cascading body-text extraction.

Strategies run in order over an already cleaned tree; the first one whose
text clears the minimum length wins. If none does, the longest result is kept
so a thin page still yields a best-effort body.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from bs4 import BeautifulSoup
from bs4.element import PreformattedString

from ..utils.text import clean_text, element_text

# Most specific first. `body` is deliberately absent: it is the last-resort strategy.
CONTAINER_SELECTORS: tuple[str, ...] = (
    "article .entry-content",
    "article .post-content",
    "article .content",
    ".post-body",
    ".entry-content",
    ".post-content",
    ".blog-content",
    ".post",
    ".content",
    '[class*="content"]',
    '[class*="post"]',
    '[class*="article"]',
    "article",
    "main",
)

NON_CONTENT_TAGS = frozenset({"script", "style", "noscript", "template", "svg", "path", "head"})

_CSS_DUMP_MARKERS = ("font-family", ".css-", "{display:", "@media")


@dataclass(frozen=True)
class CascadeResult:
    text: str
    confidence: float
    stage: str


@dataclass(frozen=True)
class CascadeLimits:
    min_chars: int = 100
    container_long_chars: int = 500
    paragraph_min_chars: int = 20
    text_node_min_chars: int = 10
    body_max_chars: int = 10000


Strategy = Callable[[BeautifulSoup, CascadeLimits], CascadeResult]


def container_strategy(soup: BeautifulSoup, limits: CascadeLimits) -> CascadeResult:
    best_text = ""
    for selector in CONTAINER_SELECTORS:
        el = soup.select_one(selector)
        if el is None:
            continue
        text = element_text(el)
        if len(text) <= len(best_text) or len(text) <= limits.min_chars:
            continue
        paragraphs = len(el.find_all("p"))
        links = len(el.find_all("a"))
        # Reject navigation-heavy wrappers that happen to hold a little text.
        if paragraphs > 0 and (paragraphs >= links or len(text) > limits.container_long_chars):
            best_text = text
    return CascadeResult(text=best_text, confidence=0.9, stage="container")


def paragraph_strategy(soup: BeautifulSoup, limits: CascadeLimits) -> CascadeResult:
    blocks = [element_text(p) for p in soup.find_all("p")]
    text = " ".join(b for b in blocks if len(b) > limits.paragraph_min_chars)
    return CascadeResult(text=text, confidence=0.7, stage="paragraphs")


def text_node_strategy(soup: BeautifulSoup, limits: CascadeLimits) -> CascadeResult:
    parts: list[str] = []
    for node in soup.find_all(string=True):
        if isinstance(node, PreformattedString):
            continue
        if any(parent.name in NON_CONTENT_TAGS for parent in node.parents):
            continue
        text = clean_text(str(node))
        if len(text) > limits.text_node_min_chars:
            parts.append(text)
    return CascadeResult(text=" ".join(parts), confidence=0.5, stage="text_nodes")


def looks_like_css(text: str) -> bool:
    return any(marker in text for marker in _CSS_DUMP_MARKERS)


def body_strategy(soup: BeautifulSoup, limits: CascadeLimits) -> CascadeResult:
    body = soup.body or soup
    text = element_text(body)
    if len(text) <= limits.min_chars or looks_like_css(text):
        return CascadeResult(text="", confidence=0.0, stage="body")
    return CascadeResult(text=text[: limits.body_max_chars], confidence=0.3, stage="body")


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    container_strategy,
    paragraph_strategy,
    text_node_strategy,
    body_strategy,
)


def run_cascade(
    soup: BeautifulSoup,
    limits: CascadeLimits | None = None,
    strategies: tuple[Strategy, ...] = DEFAULT_STRATEGIES,
) -> CascadeResult:
    limits = limits or CascadeLimits()
    best = CascadeResult(text="", confidence=0.0, stage="none")
    for strategy in strategies:
        result = strategy(soup, limits)
        if len(result.text) >= limits.min_chars:
            return result
        if len(result.text) > len(best.text):
            best = result
    return best
