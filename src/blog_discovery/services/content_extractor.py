"""Full-content extraction for individual post pages."""

from __future__ import annotations

from ..config.settings import BlogDiscoverySettings, get_settings
from ..domain.errors import ExtractionError, FetchError, FetchFailureReason, InvalidInputError
from ..domain.models import CTA, ExtractedPost, SiteLinkStructure
from ..observability.logger import get_logger
from ..processing.content_cascade import CascadeLimits, run_cascade
from ..processing.cta_extractor import extract_ctas
from ..processing.link_extractor import extract_content_links, extract_site_links
from ..processing.metadata import (
    POST_AUTHOR_SELECTORS,
    POST_DATE_SELECTORS,
    extract_headings,
    extract_meta_description,
    extract_title,
    first_author,
    first_date,
)
from ..processing.visual_signature import build_visual_signature
from ..scraping.fetcher import Fetcher
from ..scraping.renderer import RenderedPage
from ..utils.text import clean_text, count_words, truncate_content
from ..utils.urls import title_from_slug
from .content_filter import ContentFilter

logger = get_logger(__name__)


class ContentExtractor:
    """Extracts an ExtractedPost from a post page.

    Order matters: metadata, CTAs, links and visual signals read the original
    markup; boilerplate is stripped only afterwards, on a separate tree, and the
    size cap is applied once at the end.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        content_filter: ContentFilter | None = None,
        settings: BlogDiscoverySettings | None = None,
    ):
        self._fetcher = fetcher
        self._settings = settings or get_settings()
        self._filter = content_filter or ContentFilter(self._settings.boilerplate_selectors)

    async def _render(self, url: str) -> RenderedPage:
        """Any fetch-side failure surfaces as ExtractionError."""
        try:
            return await self._fetcher.render(url)
        except FetchError as e:
            raise ExtractionError(f"Could not fetch {url}", e.reason, detail=e.info.detail) from e
        except InvalidInputError as e:
            # Unusable URL (no host); never reaches a renderer.
            raise ExtractionError(f"Could not fetch {url}", FetchFailureReason.INVALID_PROTOCOL, detail=e.info.detail) from e

    async def extract_post(self, url: str) -> ExtractedPost:
        return self.extract_from_page(await self._render(url))

    async def extract_page_ctas(self, url: str) -> list[CTA]:
        """CTAs of any page (homepage, pricing, ...), not only posts."""
        page = await self._render(url)
        page_url = page.final_url or page.url
        ctas = extract_ctas(page.soup(), page_url, per_type_limit=self._settings.cta_per_type_limit)
        logger.info("page_ctas_extracted", url=page_url, ctas=len(ctas))
        return ctas

    async def extract_site_links(self, url: str) -> SiteLinkStructure:
        page = await self._render(url)
        page_url = page.final_url or page.url
        links = extract_site_links(page.soup(), page_url, limit=self._settings.site_link_scan_limit)
        logger.info("site_links_extracted", url=page_url, links=len(links))
        return SiteLinkStructure(page_url=page_url, internal_links=tuple(links))

    def extract_from_page(self, page: RenderedPage) -> ExtractedPost:
        s = self._settings
        url = page.final_url or page.url
        original = page.soup()

        title = extract_title(original) or title_from_slug(url)
        headings = extract_headings(original, s.max_headings)
        meta_description = extract_meta_description(original)
        publish_date = first_date(original, POST_DATE_SELECTORS)
        author = first_author(original, POST_AUTHOR_SELECTORS)
        ctas = extract_ctas(original, url, per_type_limit=s.cta_per_type_limit)
        internal_links, external_links = extract_content_links(original, url, limit=s.max_content_links)
        visual = build_visual_signature(
            page.style_samples,
            original,
            max_colors=s.max_palette_colors,
            max_fonts=s.max_fonts,
        )

        cleaned = self._filter.strip_boilerplate(page.soup())
        result = run_cascade(
            cleaned,
            CascadeLimits(min_chars=s.content_min_chars, body_max_chars=s.body_fallback_max_chars),
        )

        content = truncate_content(clean_text(result.text), s.content_max_chars)
        post = ExtractedPost(
            url=url,
            title=clean_text(title),
            content=content,
            word_count=count_words(content),
            headings=tuple(headings),
            meta_description=meta_description,
            author=author,
            publish_date=publish_date,
            internal_links=tuple(internal_links),
            external_links=tuple(external_links),
            ctas=tuple(ctas),
            visual_signature=visual,
            extraction_method=result.stage,
        )
        logger.info(
            "post_extracted",
            url=url,
            stage=result.stage,
            word_count=post.word_count,
            ctas=len(post.ctas),
            renderer=page.renderer,
        )
        return post
