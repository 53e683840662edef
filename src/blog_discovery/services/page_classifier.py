"""Page-type classification (blog index vs. individual post).

Each indicator is a named predicate over the parsed DOM so that the sets can
be inspected and tuned in isolation. Confidence is ordinal, not a probability.
"""

from __future__ import annotations

import re
from typing import Callable

from bs4 import BeautifulSoup

from ..domain.models import PageClassification, PageType, UrlHint
from ..scraping.renderer import RenderedPage
from ..utils.text import element_text
from ..utils.urls import url_path

Indicator = tuple[str, Callable[[BeautifulSoup], bool]]

_READ_MORE_RE = re.compile(r"read\s+more|continue\s+reading|view\s+post", re.IGNORECASE)

_INDEX_PATH_RE = re.compile(r"/(blog|news|articles|posts)/?$")
_POST_PATH_RES = (
    re.compile(r"/(blog|news|articles|posts)/[^/]+"),
    re.compile(r"/\d{4}/\d{2}/"),
    re.compile(r"/[a-z-]+-\d+/?$"),
)


def _count(soup: BeautifulSoup, selector: str) -> int:
    return len(soup.select(selector))


def _exists(soup: BeautifulSoup, selector: str) -> bool:
    return soup.select_one(selector) is not None


def _has_read_more_link(soup: BeautifulSoup) -> bool:
    return any(_READ_MORE_RE.search(a.get_text(" ", strip=True)) for a in soup.find_all("a"))


def _longest_body_chars(soup: BeautifulSoup) -> int:
    return max((len(element_text(el)) for el in soup.select("article, .post-content, .entry-content, main")), default=0)


INDEX_INDICATORS: tuple[Indicator, ...] = (
    ("multiple_post_links", lambda s: _count(s, "article a, .post a, .entry a, h2 a, h3 a") > 3),
    ("pagination", lambda s: _exists(s, '.pagination, .pager, .page-numbers, [class*="pagination"]')),
    ("read_more_links", _has_read_more_link),
    ("archive_container", lambda s: _exists(s, '.archive, .blog-list, .post-list, [class*="archive"], [class*="list"]')),
    ("multiple_dates", lambda s: _count(s, "time, .date, .published, .post-date") > 2),
)

POST_INDICATORS: tuple[Indicator, ...] = (
    ("long_article_body", lambda s: _longest_body_chars(s) > 1000),
    ("single_article", lambda s: _count(s, "article") == 1),
    ("post_meta", lambda s: _exists(s, ".post-meta, .entry-meta, .byline")),
    ("comments_section", lambda s: _exists(s, '#comments, .comments, [class*="comment"]')),
    ("share_buttons", lambda s: _exists(s, '.share, .social-share, [class*="share"]')),
    ("author_bio", lambda s: _exists(s, '.author-bio, .about-author, [class*="author"]')),
)


def url_hint(url: str) -> UrlHint:
    path = url_path(url).lower()
    if _INDEX_PATH_RE.search(path):
        return UrlHint.INDEX
    if any(rx.search(path) for rx in _POST_PATH_RES):
        return UrlHint.POST
    return UrlHint.NONE


def matched(soup: BeautifulSoup, indicators: tuple[Indicator, ...]) -> tuple[str, ...]:
    return tuple(name for name, predicate in indicators if predicate(soup))


def classify_soup(soup: BeautifulSoup, url: str, *, override_margin: int = 1) -> PageClassification:
    index_hits = matched(soup, INDEX_INDICATORS)
    post_hits = matched(soup, POST_INDICATORS)
    hint = url_hint(url)

    margin = len(index_hits) - len(post_hits)
    if hint is not UrlHint.NONE and abs(margin) <= override_margin:
        page_type = PageType.BLOG_INDEX if hint is UrlHint.INDEX else PageType.BLOG_POST
    elif margin > 0:
        page_type = PageType.BLOG_INDEX
    else:
        # Ties without a URL hint resolve to post.
        page_type = PageType.BLOG_POST

    confidence = max(len(index_hits), len(post_hits)) / max(len(INDEX_INDICATORS), len(POST_INDICATORS))
    return PageClassification(
        url=url,
        page_type=page_type,
        confidence=round(confidence, 4),
        index_indicators=index_hits,
        post_indicators=post_hits,
        url_hint=hint,
    )


def classify(page: RenderedPage) -> PageClassification:
    return classify_soup(page.soup(), page.final_url or page.url)
