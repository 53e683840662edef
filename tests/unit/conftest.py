from __future__ import annotations

import pytest

from blog_discovery.config.settings import BlogDiscoverySettings
from blog_discovery.domain.errors import FetchError, FetchFailureReason, SitemapError
from blog_discovery.scraping.renderer import RenderedPage
from blog_discovery.utils.urls import normalize_url


class FakeRenderer:
    """In-memory renderer keyed by normalized URL."""

    def __init__(self, pages: dict[str, str] | None = None, *, name: str = "fake", styles=None, fail_with=None, redirects=None):
        self.name = name
        self.pages = {normalize_url(k): v for k, v in (pages or {}).items()}
        self.styles = styles or {}
        self.fail_with = fail_with
        self.redirects = {normalize_url(k): v for k, v in (redirects or {}).items()}
        self.calls: list[str] = []

    async def render(self, url: str) -> RenderedPage:
        self.calls.append(url)
        if self.fail_with is not None:
            raise self.fail_with
        final_url = self.redirects.get(normalize_url(url), url)
        html = self.pages.get(normalize_url(final_url))
        if html is None:
            raise FetchError(f"not found: {url}", FetchFailureReason.NETWORK)
        return RenderedPage(url=url, final_url=final_url, html=html, renderer=self.name, style_samples=dict(self.styles))


class FakeSitemapHttp:
    def __init__(self, documents: dict[str, str] | None = None):
        self.documents = documents or {}
        self.calls: list[str] = []

    async def __call__(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.documents:
            raise SitemapError("sitemap_http_error", detail=f"url={url} status=404")
        return self.documents[url]


def make_settings(**overrides) -> BlogDiscoverySettings:
    values = {
        "enable_dynamic_rendering": False,
        "post_fetch_delay_ms": 0,
        "sitemap_child_delay_ms": 0,
    }
    values.update(overrides)
    return BlogDiscoverySettings(_env_file=None, **values)


@pytest.fixture
def settings() -> BlogDiscoverySettings:
    return make_settings()


def page(url: str, html: str, styles=None) -> RenderedPage:
    return RenderedPage(url=url, final_url=url, html=html, renderer="fake", style_samples=styles or {})
