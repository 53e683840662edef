"""Sitemap-based discovery of blog post candidates."""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional
from urllib.parse import urljoin, urlparse

import aiohttp
from bs4 import BeautifulSoup

from ..config.settings import BlogDiscoverySettings, get_settings
from ..domain.errors import SitemapError
from ..domain.models import DiscoveredPostCandidate, DiscoveryMethod, SitemapDiscoveryResult, SitemapEntry
from ..observability.logger import get_logger
from ..utils.time import polite_delay
from ..utils.urls import site_origin, title_from_slug

logger = get_logger(__name__)

HttpGet = Callable[[str], Awaitable[str]]

_SECTIONS = r"(blog|news|articles|posts|insights|resources|stories|content)"

BLOG_POST_INCLUDE_PATTERNS = (
    re.compile(rf"/{_SECTIONS}/[^/]+$"),
    re.compile(r"/\d{4}/\d{2}/[^/]+$"),
    re.compile(r"/\d{4}/[^/]+$"),
)

BLOG_POST_EXCLUDE_PATTERNS = (
    # Section roots (index pages)
    re.compile(rf"^/{_SECTIONS}$"),
    # Admin / taxonomy / utility
    re.compile(r"/(tag|tags|category|categories|archive|page|wp-admin|admin|login|register)(/|$)"),
    # Static pages
    re.compile(r"/(contact|about|privacy|terms|faq|help|support)(/|$)"),
    # Non-document files
    re.compile(r"\.(css|js|jpe?g|png|gif|svg|pdf|zip|xml|json|txt)$"),
    re.compile(r"/feed(/|$)"),
    re.compile(r"/rss\.xml$"),
    re.compile(r"/sitemap"),
)


def is_blog_post_url(url: str) -> bool:
    """Textual heuristic: does the URL's path look like an individual post?"""
    try:
        path = (urlparse((url or "").strip()).path or "/").lower()
    except ValueError:
        return False
    path = path.rstrip("/") or "/"
    if any(rx.search(path) for rx in BLOG_POST_EXCLUDE_PATTERNS):
        return False
    return any(rx.search(path) for rx in BLOG_POST_INCLUDE_PATTERNS)


@dataclass(frozen=True)
class ParsedSitemap:
    kind: str  # "urlset" | "sitemapindex"
    entries: tuple[SitemapEntry, ...] = ()
    child_sitemaps: tuple[str, ...] = ()


def _child_text(node, name: str) -> Optional[str]:
    child = node.find(name)
    if child is None:
        return None
    value = child.get_text(strip=True)
    return value or None


def _parse_priority(raw: Optional[str]) -> float:
    if raw is None:
        return 0.5
    try:
        value = float(raw)
    except ValueError:
        return 0.5
    return max(0.0, min(1.0, value))


def parse_sitemap(xml: str, source_url: str = "") -> Optional[ParsedSitemap]:
    """Parse a sitemap document; None when it is neither a urlset nor a sitemapindex."""
    if not xml or ("<urlset" not in xml and "<sitemapindex" not in xml):
        return None
    soup = BeautifulSoup(xml, "xml")

    index = soup.find("sitemapindex")
    if index is not None:
        children = []
        for sm in index.find_all("sitemap"):
            loc = _child_text(sm, "loc")
            if loc:
                children.append(urljoin(source_url, loc) if source_url else loc)
        return ParsedSitemap(kind="sitemapindex", child_sitemaps=tuple(children))

    urlset = soup.find("urlset")
    if urlset is None:
        return None
    entries = []
    for node in urlset.find_all("url"):
        loc = _child_text(node, "loc")
        if not loc:
            continue
        entries.append(
            SitemapEntry(
                url=loc,
                priority=_parse_priority(_child_text(node, "priority")),
                last_modified=_child_text(node, "lastmod"),
                change_freq=_child_text(node, "changefreq"),
                source_sitemap=source_url,
            )
        )
    return ParsedSitemap(kind="urlset", entries=tuple(entries))


def candidate_from_entry(entry: SitemapEntry) -> DiscoveredPostCandidate:
    return DiscoveredPostCandidate(
        url=entry.url,
        title=title_from_slug(entry.url),
        discovered_from=DiscoveryMethod.SITEMAP,
        priority=1,
        is_likely_post=True,
        last_modified=entry.last_modified,
        declared_priority=entry.priority,
        change_freq=entry.change_freq,
        discovery_source=entry.source_sitemap,
    )


class SitemapDiscoverer:
    """Probes conventional sitemap locations and filters entries by URL shape.

    Never raises for per-sitemap problems; an unreachable or missing sitemap
    yields an empty result.
    """

    def __init__(self, settings: BlogDiscoverySettings | None = None, http_get: HttpGet | None = None):
        self._settings = settings or get_settings()
        self._http_get = http_get or self._aiohttp_get

    async def _aiohttp_get(self, url: str) -> str:
        timeout = aiohttp.ClientTimeout(total=self._settings.sitemap_timeout_ms / 1000)
        headers = {"User-Agent": self._settings.user_agent}
        try:
            async with aiohttp.ClientSession(timeout=timeout, headers=headers) as session:
                async with session.get(url, max_redirects=self._settings.static_max_redirects) as resp:
                    if resp.status >= 400:
                        raise SitemapError("sitemap_http_error", detail=f"url={url} status={resp.status}")
                    return await resp.text(errors="replace")
        except asyncio.TimeoutError as e:
            raise SitemapError("sitemap_timeout", detail=url) from e
        except aiohttp.ClientError as e:
            raise SitemapError("sitemap_network_error", detail=f"url={url} error={e}") from e

    async def _load(self, url: str) -> Optional[ParsedSitemap]:
        try:
            xml = await self._http_get(url)
            return parse_sitemap(xml, source_url=url)
        except SitemapError:
            raise
        except Exception as e:
            raise SitemapError("sitemap_parse_failed", detail=f"url={url} error={e}") from e

    async def discover_from_sitemap(self, base_url: str) -> SitemapDiscoveryResult:
        s = self._settings
        root = site_origin(base_url)
        sitemaps_found: list[str] = []
        posts: list[DiscoveredPostCandidate] = []
        seen_urls: set[str] = set()

        def collect(entries: tuple[SitemapEntry, ...]) -> None:
            for entry in entries:
                if entry.url in seen_urls or not is_blog_post_url(entry.url):
                    continue
                seen_urls.add(entry.url)
                posts.append(candidate_from_entry(entry))

        for path in s.sitemap_paths:
            sitemap_url = root + path
            try:
                parsed = await self._load(sitemap_url)
            except SitemapError as e:
                logger.debug("sitemap_probe_failed", url=sitemap_url, error=str(e), detail=e.info.detail)
                continue
            if parsed is None:
                continue

            sitemaps_found.append(sitemap_url)
            logger.info("sitemap_found", url=sitemap_url, kind=parsed.kind)
            collect(parsed.entries)

            if parsed.kind == "sitemapindex":
                children = parsed.child_sitemaps[: s.sitemap_max_children]
                if len(parsed.child_sitemaps) > len(children):
                    logger.info(
                        "sitemap_children_capped",
                        url=sitemap_url,
                        listed=len(parsed.child_sitemaps),
                        processed=len(children),
                    )
                for i, child_url in enumerate(children):
                    if i > 0:
                        await polite_delay(s.sitemap_child_delay_ms)
                    try:
                        child = await self._load(child_url)
                    except SitemapError as e:
                        logger.warning("sitemap_child_failed", url=child_url, error=str(e), detail=e.info.detail)
                        continue
                    if child is None or child.kind != "urlset":
                        continue
                    sitemaps_found.append(child_url)
                    collect(child.entries)

            # First valid sitemap wins; variants on the same site repeat the same URLs.
            break

        logger.info("sitemap_discovery_completed", sitemaps=len(sitemaps_found), posts=len(posts))
        return SitemapDiscoveryResult(sitemaps_found=tuple(sitemaps_found), posts=tuple(posts))
