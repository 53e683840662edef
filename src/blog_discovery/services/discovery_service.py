"""Blog discovery orchestration (business logic).

Responsibilities:
- Run sitemap discovery first (most trustworthy source)
- Traditional discovery: homepage, conventional blog-section paths on both host
  variants, homepage link scan
- Extract content for a bounded number of candidates per index page
- Merge by canonical URL, rank, cap, and summarize the run

Pages are fetched one at a time with a fixed delay between them. A failure on a
single URL is logged and skipped; only a failed homepage fetch fails the run.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Iterable, Optional

from ..config.settings import BlogDiscoverySettings, get_settings
from ..domain.errors import DiscoveryCancelledError, FetchError, FetchFailureReason, InvalidInputError
from ..domain.models import (
    BlogPostResult,
    BlogSection,
    DiscoveredPostCandidate,
    DiscoveryAnalysis,
    DiscoveryMethod,
    DiscoveryResult,
    ExtractedPost,
    PageType,
    SitemapDiscoveryResult,
)
from ..observability.logger import bind_discovery_context, clear_discovery_context, get_logger
from ..scraping.fetcher import Fetcher
from ..scraping.renderer import RenderedPage
from ..utils.merge import coalesce
from ..utils.text import element_text
from ..utils.time import current_time_ms, elapsed_ms, polite_delay
from ..utils.urls import alternate_host_url, canonical_key, normalize_url, site_origin
from ..utils.validators import has_http_scheme
from .content_extractor import ContentExtractor
from .page_classifier import classify
from .post_link_finder import PostLinkFinder
from .sitemap_discovery import SitemapDiscoverer

logger = get_logger(__name__)

SOURCE_TIERS: dict[DiscoveryMethod, int] = {
    DiscoveryMethod.SITEMAP: 0,
    DiscoveryMethod.BLOG_INDEX_SCRAPED: 1,
    DiscoveryMethod.DIRECT_POST: 2,
    DiscoveryMethod.BLOG_INDEX: 2,
}

HIGH_CONFIDENCE_METHODS = (DiscoveryMethod.SITEMAP, DiscoveryMethod.BLOG_INDEX_SCRAPED)


def _check_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise DiscoveryCancelledError()


def merge_records(records: Iterable[BlogPostResult]) -> list[BlogPostResult]:
    """Deduplicate by canonical URL, keeping first-seen order.

    Metadata is last-writer-wins but only for present values. The discovery
    method keeps the more reliable source tier, and extracted content is kept
    unless a later record brings its own.
    """
    merged: dict[str, BlogPostResult] = {}
    for record in records:
        key = canonical_key(record.url)
        existing = merged.get(key)
        if existing is None:
            merged[key] = record
            continue

        old, new = existing.candidate, record.candidate
        candidate = coalesce(old, new, keep=("url",))
        stronger = new if SOURCE_TIERS[new.discovered_from] <= SOURCE_TIERS[old.discovered_from] else old
        candidate = replace(
            candidate,
            discovered_from=stronger.discovered_from,
            priority=min(old.priority, new.priority),
            is_likely_post=old.is_likely_post or new.is_likely_post,
        )
        post = record.post if record.post is not None else existing.post
        merged[key] = BlogPostResult(candidate=candidate, post=post)
    return list(merged.values())


def rank_key(record: BlogPostResult) -> tuple:
    c = record.candidate
    return (
        SOURCE_TIERS[c.discovered_from],
        c.priority,
        -(c.declared_priority or 0.0),
        -record.word_count,
        canonical_key(c.url),
    )


def rank_records(records: Iterable[BlogPostResult]) -> list[BlogPostResult]:
    return sorted(records, key=rank_key)


def analyze(
    records: list[BlogPostResult],
    sections: list[BlogSection],
    sitemaps_found: tuple[str, ...],
) -> DiscoveryAnalysis:
    methods: list[str] = []
    for r in records:
        if r.candidate.discovered_from.value not in methods:
            methods.append(r.candidate.discovered_from.value)
    confident = sum(1 for r in records if r.candidate.discovered_from in HIGH_CONFIDENCE_METHODS)
    return DiscoveryAnalysis(
        has_index=any(s.page_type is PageType.BLOG_INDEX for s in sections),
        has_individual_posts=any(s.page_type is PageType.BLOG_POST for s in sections),
        has_sitemap=len(sitemaps_found) > 0,
        quality_score=round(confident / max(len(records), 1), 4),
        discovery_methods=tuple(methods),
    )


class DiscoveryOrchestrator:
    def __init__(
        self,
        fetcher: Fetcher,
        sitemap_discoverer: SitemapDiscoverer,
        post_link_finder: PostLinkFinder,
        content_extractor: ContentExtractor,
        settings: BlogDiscoverySettings | None = None,
    ):
        self._fetcher = fetcher
        self._sitemaps = sitemap_discoverer
        self._link_finder = post_link_finder
        self._extractor = content_extractor
        self._settings = settings or get_settings()

    @property
    def content_extractor(self) -> ContentExtractor:
        return self._extractor

    async def _pause(self) -> None:
        await polite_delay(self._settings.post_fetch_delay_ms)

    async def discover_blog_pages(
        self, base_url: str, cancel_event: Optional[asyncio.Event] = None
    ) -> DiscoveryResult:
        raw = (base_url or "").strip()
        if not raw:
            raise InvalidInputError("base_url is required")
        if not has_http_scheme(raw):
            raise FetchError("Only http/https URLs are supported", FetchFailureReason.INVALID_PROTOCOL, detail=raw)

        root = normalize_url(raw)
        start_ms = current_time_ms()
        bind_discovery_context(root)
        try:
            return await self._discover(root, start_ms, cancel_event)
        except asyncio.CancelledError:
            logger.info("discovery_cancelled")
            raise
        except DiscoveryCancelledError:
            logger.info("discovery_cancelled", duration_ms=elapsed_ms(start_ms))
            raise
        finally:
            clear_discovery_context()

    async def _discover(
        self, root: str, start_ms: int, cancel_event: Optional[asyncio.Event]
    ) -> DiscoveryResult:
        s = self._settings
        logger.info("discovery_started")

        sitemap_result = await self._discover_sitemaps(root)
        _check_cancelled(cancel_event)

        try:
            homepage = await self._fetcher.render(root)
        except FetchError as e:
            logger.warning("discovery_homepage_failed", url=root, reason=e.reason.value, error=str(e))
            raise

        sections: list[BlogSection] = []
        traditional: list[BlogPostResult] = []
        seen_keys: set[str] = set()
        origin = site_origin(root)
        home_keys = {canonical_key(root), canonical_key(origin)}

        for path in s.blog_section_paths:
            for section_url in self._section_urls(origin, path):
                _check_cancelled(cancel_event)
                await self._pause()
                page = await self._probe_section(section_url, home_keys)
                if page is None:
                    continue
                try:
                    section, found, seen_keys = await self._process_section(page, seen_keys, cancel_event)
                except (DiscoveryCancelledError, asyncio.CancelledError):
                    raise
                except Exception as e:
                    logger.warning("discovery_section_failed", url=section_url, error=str(e))
                    break
                sections.append(section)
                traditional.extend(found)
                break

        try:
            homepage_candidates, seen_keys = self._link_finder.extract(homepage, seen_keys)
            traditional.extend(BlogPostResult(candidate=c) for c in homepage_candidates)
        except Exception as e:
            logger.warning("discovery_homepage_links_failed", url=root, error=str(e))

        merged = merge_records([BlogPostResult(candidate=c) for c in sitemap_result.posts] + traditional)
        ranked = rank_records(merged)
        capped = ranked[: s.max_posts_returned]
        capped = rank_records(await self._enrich(capped, cancel_event))

        analysis = analyze(merged, sections, sitemap_result.sitemaps_found)
        result = DiscoveryResult(
            base_url=root,
            blog_sections=tuple(sections),
            blog_posts=tuple(capped),
            total_posts_found=len(merged),
            analysis=analysis,
            sitemaps_found=sitemap_result.sitemaps_found,
            index_pages_found=sum(1 for s in sections if s.page_type is PageType.BLOG_INDEX),
            individual_posts_found=sum(1 for s in sections if s.page_type is PageType.BLOG_POST),
            sitemap_posts_found=sitemap_result.total_posts_found,
            duration_ms=elapsed_ms(start_ms),
        )
        logger.info(
            "discovery_completed",
            sections=len(sections),
            total_posts_found=result.total_posts_found,
            returned=len(result.blog_posts),
            quality_score=analysis.quality_score,
            methods=list(analysis.discovery_methods),
            duration_ms=result.duration_ms,
        )
        return result

    async def _discover_sitemaps(self, root: str) -> SitemapDiscoveryResult:
        try:
            return await self._sitemaps.discover_from_sitemap(root)
        except Exception as e:
            logger.warning("sitemap_discovery_failed", url=root, error=str(e))
            return SitemapDiscoveryResult()

    def _section_urls(self, origin: str, path: str) -> list[str]:
        url = origin + "/" + path.strip("/") + "/"
        alt = alternate_host_url(url)
        return [url, alt] if alt else [url]

    async def _probe_section(self, section_url: str, home_keys: set[str]) -> Optional[RenderedPage]:
        try:
            page = await self._fetcher.render(section_url)
        except FetchError as e:
            logger.debug("blog_section_not_found", url=section_url, reason=e.reason.value)
            return None
        final_key = canonical_key(page.final_url or section_url)
        if final_key != canonical_key(section_url) and final_key in home_keys:
            logger.debug("blog_section_redirected_home", url=section_url)
            return None
        soup = page.soup()
        text = element_text(soup.body) if soup.body else ""
        if len(text) <= self._settings.section_min_chars:
            return None
        logger.info("blog_section_found", url=section_url, renderer=page.renderer)
        return page

    async def _process_section(
        self,
        page: RenderedPage,
        seen_keys: set[str],
        cancel_event: Optional[asyncio.Event],
    ) -> tuple[BlogSection, list[BlogPostResult], set[str]]:
        s = self._settings
        classification = classify(page)
        logger.info(
            "page_classified",
            url=page.url,
            page_type=classification.page_type.value,
            confidence=classification.confidence,
            index_indicators=list(classification.index_indicators),
            post_indicators=list(classification.post_indicators),
        )

        if classification.page_type is PageType.BLOG_POST:
            post = self._extractor.extract_from_page(page)
            candidate = DiscoveredPostCandidate(
                url=normalize_url(page.final_url or page.url),
                title=post.title,
                discovered_from=DiscoveryMethod.DIRECT_POST,
                priority=1,
                is_likely_post=True,
                publish_date=post.publish_date,
                author=post.author,
                excerpt=post.meta_description,
                discovery_source=page.url,
            )
            section = BlogSection(url=page.url, page_type=PageType.BLOG_POST, confidence=classification.confidence)
            return section, [BlogPostResult(candidate=candidate, post=post)], seen_keys

        candidates, seen_keys = self._link_finder.extract(page, seen_keys)
        prioritized = sorted(candidates, key=lambda c: c.priority)[: s.index_candidates_limit]

        results: list[BlogPostResult] = []
        for i, candidate in enumerate(prioritized):
            if i >= s.index_posts_scraped_limit:
                results.append(BlogPostResult(candidate=candidate))
                continue
            _check_cancelled(cancel_event)
            await self._pause()
            results.append(await self._scrape_candidate(candidate))

        section = BlogSection(
            url=page.url,
            page_type=PageType.BLOG_INDEX,
            confidence=classification.confidence,
            post_links_found=len(candidates),
        )
        return section, results, seen_keys

    async def _scrape_candidate(self, candidate: DiscoveredPostCandidate) -> BlogPostResult:
        try:
            post = await self._extractor.extract_post(candidate.url)
        except Exception as e:
            logger.warning("discovery_candidate_failed", url=candidate.url, error=str(e))
            return BlogPostResult(candidate=candidate)

        if len(post.content) <= self._settings.scraped_post_min_chars:
            return BlogPostResult(candidate=candidate, post=post)

        scraped = replace(
            candidate,
            title=post.title or candidate.title,
            excerpt=candidate.excerpt or post.meta_description,
            publish_date=candidate.publish_date or post.publish_date,
            author=candidate.author or post.author,
            discovered_from=DiscoveryMethod.BLOG_INDEX_SCRAPED,
        )
        return BlogPostResult(candidate=scraped, post=post)

    async def _enrich(
        self, records: list[BlogPostResult], cancel_event: Optional[asyncio.Event]
    ) -> list[BlogPostResult]:
        """Extract content for returned records that have none yet (e.g. sitemap-only)."""
        remaining = self._settings.enrich_unscraped_limit
        out: list[BlogPostResult] = []
        for record in records:
            if record.post is not None or remaining <= 0:
                out.append(record)
                continue
            remaining -= 1
            _check_cancelled(cancel_event)
            await self._pause()
            try:
                post = await self._extractor.extract_post(record.url)
            except Exception as e:
                logger.warning("discovery_candidate_failed", url=record.url, error=str(e))
                out.append(record)
                continue
            out.append(replace(record, post=post))
        return out

    async def extract_urls(
        self, urls: list[str], cancel_event: Optional[asyncio.Event] = None
    ) -> list[tuple[str, Optional[ExtractedPost]]]:
        """Direct extraction keyed by the requested URL; failed URLs pair with None.

        The post itself carries the post-redirect URL, which may differ.
        """
        out: list[tuple[str, Optional[ExtractedPost]]] = []
        for i, url in enumerate(urls):
            _check_cancelled(cancel_event)
            if i > 0:
                await self._pause()
            try:
                out.append((url, await self._extractor.extract_post(url)))
            except Exception as e:
                logger.warning("direct_extraction_failed", url=url, error=str(e))
                out.append((url, None))
        return out

    async def extract_posts(
        self, urls: list[str], cancel_event: Optional[asyncio.Event] = None
    ) -> list[ExtractedPost]:
        """Direct extraction of explicit post URLs, bypassing discovery."""
        return [post for _, post in await self.extract_urls(urls, cancel_event) if post is not None]
