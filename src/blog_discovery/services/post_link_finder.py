"""Post link discovery on blog index pages."""

from __future__ import annotations

import re
from typing import Iterable, Optional
from urllib.parse import urljoin

from bs4 import Tag

from ..config.settings import BlogDiscoverySettings, get_settings
from ..domain.models import DiscoveredPostCandidate, DiscoveryMethod
from ..observability.logger import get_logger
from ..processing.metadata import first_author, first_date
from ..scraping.fetcher import Fetcher
from ..scraping.renderer import RenderedPage
from ..utils.text import clip, element_text
from ..utils.urls import canonical_key, hosts_match, normalize_url, url_path

logger = get_logger(__name__)

# Ordered from most to least reliable.
POST_LINK_TIERS: tuple[str, ...] = (
    "article h1 a, article h2 a, article h3 a",
    ".post-title a, .entry-title a, .blog-post-title a",
    'h1 a[href*="/blog/"], h2 a[href*="/blog/"], h3 a[href*="/blog/"]',
    "article > a, .post > a, .entry > a",
    'article a[href*="/blog/"], article a[href*="/post/"], article a[href*="/news/"]',
    ".blog-post a, .post-content a, .entry-content a",
    ".post a, .article a, .blog-item a",
    'a[href*="/blog/"], a[href*="/post/"], a[href*="/news/"]',
    'a[href*="/articles/"], a[href*="/insights/"]',
)

POST_CONTAINER_SELECTOR = "article, .post, .entry, .blog-item, .news-item"
LINK_DATE_SELECTORS = ("time", ".date", ".published", ".post-date", ".entry-date", "[datetime]")
LINK_AUTHOR_SELECTORS = (".author", ".by-author", ".post-author", ".entry-author", '[rel="author"]')
LINK_EXCERPT_SELECTORS = (".excerpt", ".summary", ".post-excerpt", ".entry-summary", "p:not(.meta):not(.date)")

_EXCERPT_MAX_CHARS = 250

_SKIP_PATH_RE = re.compile(
    r"/(tag|tags|category|categories|archive|admin|wp-admin|login|search|contact|about|privacy)(/|$)"
)
_FILE_EXT_RE = re.compile(r"\.(css|js|jpe?g|png|gif|svg|pdf|zip)$")
_SECTION_ROOT_RE = re.compile(r"^/(blog|news|articles|posts|post|insights|resources|stories|content)?$")
_SKIP_SCHEMES = ("mailto:", "tel:", "javascript:", "#", "data:")

_LIKELY_POST_RES = (
    re.compile(r"/\d{4}/\d{2}/"),
    re.compile(r"/(blog|post|posts|news|articles|insights|stories)/[^/]+"),
    re.compile(r"/[a-z0-9]+(?:-[a-z0-9]+)+$"),
)


def is_likely_post_path(path: str) -> bool:
    path = path.lower().rstrip("/")
    return any(rx.search(path) for rx in _LIKELY_POST_RES)


def _excerpt(container: Tag) -> Optional[str]:
    for selector in LINK_EXCERPT_SELECTORS:
        text = element_text(container.select_one(selector))
        if text:
            return clip(text, _EXCERPT_MAX_CHARS)
    return None


def _featured_image(container: Tag, base_url: str) -> Optional[str]:
    img = container.find("img")
    if img is None:
        return None
    src = img.get("src") or img.get("data-src")
    return urljoin(base_url, str(src)) if src else None


def _rejected(path: str) -> bool:
    p = path.lower().rstrip("/") or "/"
    return bool(_SKIP_PATH_RE.search(p) or _FILE_EXT_RE.search(p) or _SECTION_ROOT_RE.match(p))


def extract_post_links(
    page: RenderedPage,
    seen: Optional[Iterable[str]] = None,
    *,
    scan_limit: int = 50,
    early_stop: int = 10,
) -> tuple[list[DiscoveredPostCandidate], set[str]]:
    """Collect post candidates from an index page.

    `seen` holds canonical keys to skip; the returned set includes every key
    accepted here, so callers can thread it through successive pages.
    """
    seen_keys = set(seen or ())
    base_url = page.final_url or page.url
    index_key = canonical_key(base_url)
    soup = page.soup()

    candidates: list[DiscoveredPostCandidate] = []
    examined: set[str] = set()
    likely_count = 0

    for tier in POST_LINK_TIERS:
        for link in soup.select(tier):
            href = str(link.get("href") or "").strip()
            if not href or href.lower().startswith(_SKIP_SCHEMES):
                continue
            abs_url = normalize_url(urljoin(base_url, href))
            key = canonical_key(abs_url)
            if key in examined:
                continue
            if len(examined) >= scan_limit:
                break
            examined.add(key)

            if key == index_key or key in seen_keys:
                continue
            if not abs_url.startswith(("http://", "https://")) or not hosts_match(abs_url, base_url):
                continue
            path = url_path(abs_url)
            if _rejected(path):
                continue
            title = element_text(link)
            if not title:
                continue

            likely = is_likely_post_path(path)
            container = link.css.closest(POST_CONTAINER_SELECTOR)
            seen_keys.add(key)
            candidates.append(
                DiscoveredPostCandidate(
                    url=abs_url,
                    title=title,
                    discovered_from=DiscoveryMethod.BLOG_INDEX,
                    priority=1 if likely else 2,
                    is_likely_post=likely,
                    publish_date=first_date(container, LINK_DATE_SELECTORS) if container is not None else None,
                    author=first_author(container, LINK_AUTHOR_SELECTORS) if container is not None else None,
                    excerpt=_excerpt(container) if container is not None else None,
                    featured_image=_featured_image(container, base_url) if container is not None else None,
                    discovery_source=base_url,
                )
            )
            if likely:
                likely_count += 1

        if likely_count >= early_stop or len(examined) >= scan_limit:
            break

    return candidates, seen_keys


class PostLinkFinder:
    def __init__(self, fetcher: Fetcher, settings: BlogDiscoverySettings | None = None):
        self._fetcher = fetcher
        self._settings = settings or get_settings()

    def extract(
        self, page: RenderedPage, seen: Optional[Iterable[str]] = None
    ) -> tuple[list[DiscoveredPostCandidate], set[str]]:
        candidates, seen_keys = extract_post_links(
            page,
            seen,
            scan_limit=self._settings.link_scan_limit,
            early_stop=self._settings.likely_post_early_stop,
        )
        logger.info(
            "post_links_found",
            url=page.url,
            candidates=len(candidates),
            likely=sum(1 for c in candidates if c.is_likely_post),
        )
        return candidates, seen_keys

    async def find_post_links(self, index_page_url: str) -> list[DiscoveredPostCandidate]:
        page = await self._fetcher.render(index_page_url)
        candidates, _ = self.extract(page)
        return candidates
