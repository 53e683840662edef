"""Static fetch-and-parse renderer (plain HTTP GET)."""

from __future__ import annotations

import asyncio

import aiohttp
from bs4 import BeautifulSoup

from ..config.settings import BlogDiscoverySettings, get_settings
from ..domain.errors import FetchError, FetchFailureReason
from .renderer import STYLE_PROPERTIES, STYLE_SAMPLE_SELECTORS, RenderedPage

_CSS_TO_KEY = {css: key for key, css in STYLE_PROPERTIES.items()}


def parse_inline_style(style: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for decl in (style or "").split(";"):
        if ":" not in decl:
            continue
        prop, value = decl.split(":", 1)
        prop = prop.strip().lower()
        if prop == "background":
            prop = "background-color"
        key = _CSS_TO_KEY.get(prop)
        if key and value.strip():
            out[key] = value.strip()
    return out


def sample_inline_styles(soup: BeautifulSoup, limit: int) -> dict[str, list[dict[str, str]]]:
    """Best-effort style samples without a layout engine: inline `style` attributes only."""
    samples: dict[str, list[dict[str, str]]] = {}
    for kind, selector in STYLE_SAMPLE_SELECTORS.items():
        found: list[dict[str, str]] = []
        for el in soup.select(selector):
            parsed = parse_inline_style(str(el.get("style") or ""))
            if parsed:
                found.append(parsed)
            if len(found) >= limit:
                break
        samples[kind] = found
    return samples


class StaticRenderer:
    """Fallback strategy: no script execution, bounded timeout and redirects."""

    name = "static"

    def __init__(self, settings: BlogDiscoverySettings | None = None):
        self._settings = settings or get_settings()

    async def render(self, url: str) -> RenderedPage:
        s = self._settings
        timeout = aiohttp.ClientTimeout(total=s.static_fetch_timeout_ms / 1000)
        headers = {
            "User-Agent": s.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }
        try:
            async with aiohttp.ClientSession(timeout=timeout, headers=headers) as session:
                async with session.get(url, max_redirects=s.static_max_redirects) as resp:
                    if resp.status >= 400:
                        raise FetchError(
                            f"HTTP {resp.status} for {url}",
                            FetchFailureReason.NETWORK,
                            detail=f"status={resp.status}",
                        )
                    html = await resp.text(errors="replace")
                    final_url = str(resp.url)
        except asyncio.TimeoutError as e:
            raise FetchError(f"Timeout while fetching {url}", FetchFailureReason.TIMEOUT, detail=str(e)) from e
        except aiohttp.ClientError as e:
            raise FetchError(f"Network error for {url}", FetchFailureReason.NETWORK, detail=str(e)) from e

        soup = BeautifulSoup(html, "lxml")
        return RenderedPage(
            url=url,
            final_url=final_url,
            html=html,
            renderer=self.name,
            style_samples=sample_inline_styles(soup, s.visual_samples_per_element),
        )
