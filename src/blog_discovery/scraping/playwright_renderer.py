"""Playwright-based renderer for script-driven pages."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError, async_playwright

from ..config.settings import BlogDiscoverySettings, get_settings
from ..domain.errors import FetchError, FetchFailureReason
from ..observability.logger import get_logger
from .renderer import STYLE_PROPERTIES, STYLE_SAMPLE_SELECTORS, RenderedPage

logger = get_logger(__name__)

_CONTENT_READY_JS = """
({minParagraphs, minParagraphChars, minBodyChars}) => {
  const paragraphs = Array.from(document.querySelectorAll('p'));
  const paragraphChars = paragraphs.reduce((n, p) => n + (p.textContent || '').trim().length, 0);
  const bodyChars = document.body ? (document.body.innerText || '').trim().length : 0;
  return (paragraphs.length > minParagraphs && paragraphChars > minParagraphChars) || bodyChars > minBodyChars;
}
"""

_STYLE_SAMPLER_JS = """
({selectors, properties, limit}) => {
  const out = {};
  for (const [kind, selector] of Object.entries(selectors)) {
    let els = [];
    try {
      els = Array.from(document.querySelectorAll(selector)).slice(0, limit);
    } catch (e) {
      els = [];
    }
    out[kind] = els.map((el) => {
      const s = window.getComputedStyle(el);
      const sample = {};
      for (const [key, prop] of Object.entries(properties)) {
        sample[key] = s.getPropertyValue(prop) || '';
      }
      return sample;
    });
  }
  return out;
}
"""


class PlaywrightRenderer:
    """Dynamic-rendering strategy.

    Responsibilities:
    - Render a page in headless Chromium with a bounded navigation timeout
    - Wait (bounded, polling) until the page looks like it has content
    - Capture the serialized DOM plus sampled computed styles
    """

    name = "playwright"

    def __init__(self, settings: BlogDiscoverySettings | None = None):
        self._settings = settings or get_settings()

    @asynccontextmanager
    async def _open_page(self) -> AsyncIterator[Page]:
        """Browser scoped to a single fetch; closed on every exit path."""
        s = self._settings
        async with async_playwright() as p:
            browser = await p.chromium.launch(
                headless=True,
                args=["--no-sandbox", "--disable-dev-shm-usage"],
            )
            try:
                context = await browser.new_context(
                    user_agent=s.user_agent,
                    viewport={"width": s.viewport_width, "height": s.viewport_height},
                )
                page = await context.new_page()
                yield page
            finally:
                await browser.close()

    async def render(self, url: str) -> RenderedPage:
        s = self._settings
        try:
            async with self._open_page() as page:
                await page.goto(url, wait_until="domcontentloaded", timeout=s.navigation_timeout_ms)
                try:
                    await page.wait_for_load_state("networkidle", timeout=s.network_idle_timeout_ms)
                except PlaywrightTimeoutError:
                    pass
                await self._wait_for_content(page, url)
                await page.wait_for_timeout(s.render_settle_ms)
                html = await page.content()
                style_samples = await self._sample_styles(page, url)
                return RenderedPage(
                    url=url,
                    final_url=page.url or url,
                    html=html,
                    renderer=self.name,
                    style_samples=style_samples,
                )
        except (asyncio.TimeoutError, PlaywrightTimeoutError) as e:
            raise FetchError(f"Timeout while rendering {url}", FetchFailureReason.TIMEOUT, detail=str(e)) from e
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(f"Render failed for {url}", FetchFailureReason.NETWORK, detail=str(e)) from e

    async def _wait_for_content(self, page: Page, url: str) -> None:
        s = self._settings
        try:
            await page.wait_for_function(
                _CONTENT_READY_JS,
                arg={
                    "minParagraphs": s.content_ready_min_paragraphs,
                    "minParagraphChars": s.content_ready_min_paragraph_chars,
                    "minBodyChars": s.content_ready_min_body_chars,
                },
                timeout=s.content_wait_timeout_ms,
                polling=s.content_wait_poll_ms,
            )
        except PlaywrightTimeoutError:
            # Thin pages still get extracted with whatever rendered.
            logger.info("render_content_wait_timeout", url=url, timeout_ms=s.content_wait_timeout_ms)

    async def _sample_styles(self, page: Page, url: str) -> dict[str, list[dict[str, str]]]:
        try:
            samples = await page.evaluate(
                _STYLE_SAMPLER_JS,
                {
                    "selectors": STYLE_SAMPLE_SELECTORS,
                    "properties": STYLE_PROPERTIES,
                    "limit": self._settings.visual_samples_per_element,
                },
            )
        except Exception as e:
            logger.warning("render_style_sampling_failed", url=url, error=str(e))
            return {}
        return samples if isinstance(samples, dict) else {}
