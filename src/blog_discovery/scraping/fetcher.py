"""Fetcher: rendering strategy selection with static fallback."""

from __future__ import annotations

from urllib.parse import urlparse

from ..config.settings import BlogDiscoverySettings, get_settings
from ..domain.errors import FetchError, FetchFailureReason, InvalidInputError
from ..domain.models import PageSummary
from ..observability.logger import get_logger
from ..processing.metadata import summarize_page
from .playwright_renderer import PlaywrightRenderer
from .renderer import RenderedPage, Renderer
from .static_renderer import StaticRenderer

logger = get_logger(__name__)


class Fetcher:
    """Scraping layer entry point.

    Rules:
    - Only http/https URLs reach a renderer
    - Any primary failure falls back to the static strategy, once
    - A second failure propagates as FetchError (no retries, no backoff)
    """

    def __init__(self, primary: Renderer | None, fallback: Renderer, settings: BlogDiscoverySettings | None = None):
        self._primary = primary
        self._fallback = fallback
        self._settings = settings or get_settings()

    @classmethod
    def from_settings(cls, settings: BlogDiscoverySettings | None = None) -> "Fetcher":
        settings = settings or get_settings()
        primary = PlaywrightRenderer(settings) if settings.enable_dynamic_rendering else None
        return cls(primary=primary, fallback=StaticRenderer(settings), settings=settings)

    async def render(self, url: str) -> RenderedPage:
        url = (url or "").strip()
        parsed = urlparse(url)
        if parsed.scheme.lower() not in ("http", "https"):
            raise FetchError(
                f"Unsupported URL scheme: {parsed.scheme or '<none>'}",
                FetchFailureReason.INVALID_PROTOCOL,
                detail=url,
            )
        if not parsed.netloc:
            raise InvalidInputError("URL has no host", detail=url)

        if self._primary is not None:
            try:
                return await self._primary.render(url)
            except Exception as e:
                logger.warning(
                    "render_fallback_to_static",
                    url=url,
                    renderer=self._primary.name,
                    error=str(e),
                )

        try:
            return await self._fallback.render(url)
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(f"Fetch failed for {url}", FetchFailureReason.NETWORK, detail=str(e)) from e

    async def fetch_rendered(self, url: str) -> PageSummary:
        page = await self.render(url)
        return summarize_page(
            page.soup(),
            page.final_url or url,
            min_chars=self._settings.section_min_chars,
        )
