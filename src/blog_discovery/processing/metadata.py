"""Page metadata extraction (title, description, date, author, headings)."""

from __future__ import annotations

import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup, Tag

from ..domain.models import Heading, PageSummary
from ..utils.text import clean_text, count_words, element_text

POST_DATE_SELECTORS = ("time", ".date", ".published", ".post-date", "[datetime]")
POST_AUTHOR_SELECTORS = (".author", ".by-author", ".post-author", '[rel="author"]')

SUMMARY_MAIN_SELECTORS = (
    "main",
    '[role="main"]',
    ".main-content",
    ".content",
    "article",
    ".post-content",
    ".entry-content",
)

_BY_PREFIX_RE = re.compile(r"^\s*by[\s:]+", re.IGNORECASE)


def extract_title(soup: BeautifulSoup) -> str:
    h1 = soup.select_one("h1")
    title = element_text(h1)
    if title:
        return title
    return element_text(soup.title) if soup.title else ""


def extract_meta_description(soup: BeautifulSoup) -> Optional[str]:
    for selector in ('meta[name="description"]', 'meta[property="og:description"]'):
        el = soup.select_one(selector)
        if el is not None:
            value = clean_text(str(el.get("content") or ""))
            if value:
                return value
    return None


def date_value(el: Tag) -> str:
    for attr in ("datetime", "data-date", "content"):
        value = el.get(attr)
        if value:
            return clean_text(str(value))
    return element_text(el)


def first_date(scope: Tag, selectors: Iterable[str]) -> Optional[str]:
    """First non-empty date across the ordered selectors."""
    for selector in selectors:
        for el in scope.select(selector):
            value = date_value(el)
            if value:
                return value
    return None


def first_author(scope: Tag, selectors: Iterable[str]) -> Optional[str]:
    for selector in selectors:
        for el in scope.select(selector):
            value = _BY_PREFIX_RE.sub("", element_text(el)).strip()
            if value:
                return value
    return None


def extract_headings(soup: BeautifulSoup, limit: int, levels: tuple[str, ...] = ("h1", "h2", "h3", "h4")) -> list[Heading]:
    out: list[Heading] = []
    for el in soup.find_all(list(levels)):
        text = element_text(el)
        if not text:
            continue
        out.append(Heading(level=int(el.name[1]), text=text))
        if len(out) >= limit:
            break
    return out


def summarize_page(soup: BeautifulSoup, url: str, *, min_chars: int = 100, max_headings: int = 10) -> PageSummary:
    for el in soup(["script", "style", "noscript", "template"]):
        el.decompose()

    body_text = ""
    for selector in SUMMARY_MAIN_SELECTORS:
        text = element_text(soup.select_one(selector))
        if len(text) > min_chars:
            body_text = text
            break
    if not body_text:
        body_text = element_text(soup.body) if soup.body else element_text(soup)

    return PageSummary(
        url=url,
        title=element_text(soup.title) if soup.title else "",
        meta_description=extract_meta_description(soup),
        body_text=body_text,
        headings=tuple(extract_headings(soup, max_headings, levels=("h1", "h2", "h3"))),
        word_count=count_words(body_text),
    )
