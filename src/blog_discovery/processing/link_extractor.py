"""Link extraction: content-area links (internal vs. external) and whole-page site links."""

from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..domain.models import LinkType, PageLink
from ..utils.text import clip, element_text
from ..utils.urls import hosts_match, normalize_url, url_path

CONTENT_LINK_SELECTOR = "article a, .post-content a, .entry-content a, .content a, main a"
LINK_CONTEXT_MAX_CHARS = 100

_SKIP_PREFIXES = ("#", "mailto:", "tel:", "javascript:", "data:")


def _internal_link_type(url: str) -> LinkType:
    path = url_path(url).lower()
    if "/blog/" in path or "/post/" in path or "/news/" in path or "/articles/" in path:
        return LinkType.BLOG
    return LinkType.PAGE


def extract_content_links(
    soup: BeautifulSoup, page_url: str, limit: int = 100
) -> tuple[list[PageLink], list[PageLink]]:
    """Split links inside the content area by `www`-insensitive hostname match."""
    internal: list[PageLink] = []
    external: list[PageLink] = []
    seen: set[str] = set()

    for a in soup.select(CONTENT_LINK_SELECTOR):
        if len(seen) >= limit:
            break
        href = str(a.get("href") or "").strip()
        if not href or href.lower().startswith(_SKIP_PREFIXES):
            continue
        url = normalize_url(urljoin(page_url, href))
        if not url.startswith(("http://", "https://")) or url in seen:
            continue
        seen.add(url)

        context = clip(element_text(a.parent), LINK_CONTEXT_MAX_CHARS) if a.parent is not None else ""
        if hosts_match(url, page_url):
            internal.append(PageLink(url=url, text=element_text(a), link_type=_internal_link_type(url), context=context))
        else:
            external.append(PageLink(url=url, text=element_text(a), link_type=LinkType.EXTERNAL, context=context))
    return internal, external


SITE_LINK_TEXT_MAX_CHARS = 100

# First match wins; anything else is body content.
SITE_LINK_CONTEXTS: tuple[tuple[str, str], ...] = (
    ("navigation", "nav, .nav, .menu"),
    ("footer", "footer"),
    ("sidebar", "aside, .sidebar"),
)


def _site_link_type(url: str) -> LinkType:
    path = url_path(url).lower()
    if "/blog/" in path or "/post/" in path:
        return LinkType.BLOG
    if "/product/" in path or "/service/" in path:
        return LinkType.PRODUCT
    if "/about" in path:
        return LinkType.ABOUT
    if "/contact" in path:
        return LinkType.CONTACT
    return LinkType.PAGE


def _site_link_context(a) -> str:
    for context, selector in SITE_LINK_CONTEXTS:
        if a.css.closest(selector) is not None:
            return context
    return "content"


def extract_site_links(soup: BeautifulSoup, page_url: str, limit: int = 50) -> list[PageLink]:
    """Same-site links anywhere on the page, labelled by where they sit.

    Only the first `limit` anchors are examined, whatever their target.
    """
    page_key = normalize_url(page_url)
    out: list[PageLink] = []
    for a in soup.select("a[href]")[:limit]:
        href = str(a.get("href") or "").strip()
        text = element_text(a)
        if not href or not text or href.lower().startswith(_SKIP_PREFIXES):
            continue
        url = normalize_url(urljoin(page_url, href))
        if url == page_key or not hosts_match(url, page_url):
            continue
        out.append(
            PageLink(
                url=url,
                text=clip(text, SITE_LINK_TEXT_MAX_CHARS),
                link_type=_site_link_type(url),
                context=_site_link_context(a),
            )
        )
    return out
