from __future__ import annotations

import asyncio

import pytest
from conftest import FakeRenderer, FakeSitemapHttp, make_settings

from blog_discovery.domain.errors import DiscoveryCancelledError, FetchError, FetchFailureReason, InvalidInputError
from blog_discovery.domain.models import (
    BlogPostResult,
    BlogSection,
    DiscoveredPostCandidate,
    DiscoveryMethod,
    PageType,
)
from blog_discovery.scraping.fetcher import Fetcher
from blog_discovery.services.content_extractor import ContentExtractor
from blog_discovery.services.discovery_service import DiscoveryOrchestrator, analyze, merge_records, rank_records
from blog_discovery.services.post_link_finder import PostLinkFinder
from blog_discovery.services.sitemap_discovery import SitemapDiscoverer

ROOT = "https://example.com"
SENTENCE = "Careful teams write things down so the next person can move faster. "

SITEMAP = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://example.com/blog/hello-world</loc><priority>0.8</priority></url>
  <url><loc>https://example.com/blog/</loc></url>
</urlset>
"""

HOMEPAGE = """
<html><body>
  <nav><a href="/blog">Blog</a></nav>
  <main>
    <h2><a href="/blog/homepage-pick">Homepage pick</a></h2>
    <p>Welcome to the example company website.</p>
  </main>
</body></html>
"""

BLOG_INDEX = """
<html><head><title>Blog</title></head><body>
<main class="blog-list">
  <h1>Our blog</h1>
  <article><h2><a href="https://www.example.com/blog/hello-world/">Hello world</a></h2>
    <time datetime="2024-01-01">Jan 1</time><p>The first post on this blog.</p></article>
  <article><h2><a href="/blog/second-post">Second post</a></h2>
    <time datetime="2024-02-01">Feb 1</time><p>The second post on this blog.</p></article>
  <article><h2><a href="/blog/third-post">Third post</a></h2>
    <time datetime="2024-03-01">Mar 1</time><p>The third post on this blog.</p></article>
  <article><h2><a href="/blog/fourth-post">Fourth post</a></h2>
    <time datetime="2024-04-01">Apr 1</time><p>The fourth post on this blog.</p></article>
  <div class="pagination"><span>1</span><span>2</span></div>
</main>
</body></html>
"""


def _post(title: str, paragraphs: int) -> str:
    body = "".join(f"<p>{SENTENCE * 3}</p>" for _ in range(paragraphs))
    return f"<html><body><article><h1>{title}</h1>{body}</article></body></html>"


PAGES = {
    ROOT: HOMEPAGE,
    f"{ROOT}/blog/": BLOG_INDEX,
    f"{ROOT}/blog/hello-world": _post("Hello world", 4),
    "https://www.example.com/blog/hello-world": _post("Hello world", 4),
    f"{ROOT}/blog/second-post": _post("Second post", 4),
    f"{ROOT}/blog/fourth-post": _post("Fourth post", 1),
    f"{ROOT}/blog/homepage-pick": _post("Homepage pick", 1),
}


def _orchestrator(pages=None, sitemaps=None, **overrides) -> DiscoveryOrchestrator:
    settings = make_settings(**overrides)
    fetcher = Fetcher(primary=None, fallback=FakeRenderer(PAGES if pages is None else pages), settings=settings)
    return DiscoveryOrchestrator(
        fetcher,
        SitemapDiscoverer(settings, http_get=FakeSitemapHttp({f"{ROOT}/sitemap.xml": SITEMAP} if sitemaps is None else sitemaps)),
        PostLinkFinder(fetcher, settings),
        ContentExtractor(fetcher, settings=settings),
        settings,
    )


def _candidate(url: str, method: DiscoveryMethod, **kwargs) -> DiscoveredPostCandidate:
    return DiscoveredPostCandidate(url=url, title=kwargs.pop("title", "Post"), discovered_from=method, **kwargs)


def test_merge_treats_www_and_trailing_slash_as_one_record() -> None:
    records = [
        BlogPostResult(_candidate("https://x.com/blog/post", DiscoveryMethod.SITEMAP, declared_priority=0.8)),
        BlogPostResult(
            _candidate(
                "https://www.x.com/blog/post/",
                DiscoveryMethod.BLOG_INDEX,
                title="A post",
                author="Ann",
                priority=2,
            )
        ),
    ]

    (merged,) = merge_records(records)

    assert merged.url == "https://x.com/blog/post"
    assert merged.candidate.discovered_from is DiscoveryMethod.SITEMAP
    assert merged.candidate.title == "A post"
    assert merged.candidate.author == "Ann"
    assert merged.candidate.declared_priority == 0.8
    assert merged.candidate.priority == 2


def test_merge_never_overwrites_with_empty_values() -> None:
    records = [
        BlogPostResult(_candidate("https://x.com/blog/a", DiscoveryMethod.BLOG_INDEX, author="Ann", is_likely_post=True)),
        BlogPostResult(_candidate("https://x.com/blog/a", DiscoveryMethod.BLOG_INDEX_SCRAPED, author=None)),
    ]

    (merged,) = merge_records(records)

    assert merged.candidate.author == "Ann"
    assert merged.candidate.is_likely_post is True
    assert merged.candidate.discovered_from is DiscoveryMethod.BLOG_INDEX_SCRAPED


def test_rank_orders_by_source_then_priority_then_url() -> None:
    records = [
        BlogPostResult(_candidate("https://x.com/blog/b", DiscoveryMethod.BLOG_INDEX, priority=1)),
        BlogPostResult(_candidate("https://x.com/blog/a", DiscoveryMethod.BLOG_INDEX, priority=1)),
        BlogPostResult(_candidate("https://x.com/blog/c", DiscoveryMethod.BLOG_INDEX, priority=2)),
        BlogPostResult(_candidate("https://x.com/blog/low", DiscoveryMethod.SITEMAP, declared_priority=0.3)),
        BlogPostResult(_candidate("https://x.com/blog/high", DiscoveryMethod.SITEMAP, declared_priority=0.9)),
        BlogPostResult(_candidate("https://x.com/blog/s", DiscoveryMethod.BLOG_INDEX_SCRAPED)),
    ]

    ranked = [r.url.rsplit("/", 1)[-1] for r in rank_records(records)]

    assert ranked == ["high", "low", "s", "a", "b", "c"]


def test_full_discovery_run() -> None:
    result = asyncio.run(_orchestrator().discover_blog_pages("https://example.com/"))

    assert result.base_url == ROOT
    assert result.sitemaps_found == (f"{ROOT}/sitemap.xml",)
    assert [(s.url, s.page_type, s.post_links_found) for s in result.blog_sections] == [
        (f"{ROOT}/blog/", PageType.BLOG_INDEX, 4),
    ]
    assert result.total_posts_found == 5
    assert (result.index_pages_found, result.individual_posts_found, result.sitemap_posts_found) == (1, 0, 1)

    by_slug = {r.url.rsplit("/", 1)[-1]: r for r in result.blog_posts}
    assert set(by_slug) == {"hello-world", "second-post", "third-post", "fourth-post", "homepage-pick"}

    hello = result.blog_posts[0]
    assert hello.url == f"{ROOT}/blog/hello-world"
    assert hello.candidate.discovered_from is DiscoveryMethod.SITEMAP
    assert hello.candidate.declared_priority == 0.8
    assert hello.post is not None

    second = result.blog_posts[1]
    assert second.url == f"{ROOT}/blog/second-post"
    assert second.candidate.discovered_from is DiscoveryMethod.BLOG_INDEX_SCRAPED
    assert second.candidate.publish_date == "2024-02-01"

    # Short post keeps its content but not the scraped tier.
    assert by_slug["fourth-post"].candidate.discovered_from is DiscoveryMethod.BLOG_INDEX
    assert by_slug["fourth-post"].post is not None
    assert by_slug["third-post"].post is None
    assert by_slug["homepage-pick"].post is not None

    assert result.analysis.has_index is True
    assert result.analysis.has_sitemap is True
    assert result.analysis.discovery_methods == ("sitemap", "blog_index_scraped", "blog_index")
    assert result.analysis.quality_score == pytest.approx(0.4)


def test_discovery_is_idempotent() -> None:
    first = asyncio.run(_orchestrator().discover_blog_pages(ROOT))
    second = asyncio.run(_orchestrator().discover_blog_pages(ROOT))

    assert [r.url for r in first.blog_posts] == [r.url for r in second.blog_posts]


def test_results_are_capped_but_total_counts_everything() -> None:
    result = asyncio.run(_orchestrator(max_posts_returned=2).discover_blog_pages(ROOT))

    assert len(result.blog_posts) == 2
    assert result.total_posts_found == 5


def test_homepage_failure_fails_the_run() -> None:
    with pytest.raises(FetchError):
        asyncio.run(_orchestrator(pages={}, sitemaps={}).discover_blog_pages(ROOT))


def test_site_without_blog_returns_empty_result() -> None:
    result = asyncio.run(_orchestrator(pages={ROOT: "<html><body><p>Hi</p></body></html>"}, sitemaps={}).discover_blog_pages(ROOT))

    assert result.blog_posts == ()
    assert result.blog_sections == ()
    assert result.total_posts_found == 0
    assert result.analysis.quality_score == 0
    assert result.analysis.has_individual_posts is False


def test_rejects_invalid_base_urls() -> None:
    orchestrator = _orchestrator()

    with pytest.raises(InvalidInputError):
        asyncio.run(orchestrator.discover_blog_pages("  "))
    with pytest.raises(FetchError) as exc:
        asyncio.run(orchestrator.discover_blog_pages("ftp://example.com"))
    assert exc.value.reason is FetchFailureReason.INVALID_PROTOCOL


def test_cancellation_between_urls() -> None:
    async def run():
        event = asyncio.Event()
        event.set()
        await _orchestrator().discover_blog_pages(ROOT, cancel_event=event)

    with pytest.raises(DiscoveryCancelledError):
        asyncio.run(run())


def test_extract_posts_skips_failures() -> None:
    urls = [f"{ROOT}/blog/hello-world", f"{ROOT}/blog/missing", f"{ROOT}/blog/second-post"]

    posts = asyncio.run(_orchestrator().extract_posts(urls))

    assert [p.url for p in posts] == [urls[0], urls[2]]
    assert all(p.word_count > 0 for p in posts)


def test_sections_are_looked_up_at_the_site_root() -> None:
    base = f"{ROOT}/weblog"
    settings = make_settings()
    renderer = FakeRenderer({**PAGES, base: HOMEPAGE})
    fetcher = Fetcher(primary=None, fallback=renderer, settings=settings)
    orchestrator = DiscoveryOrchestrator(
        fetcher,
        SitemapDiscoverer(settings, http_get=FakeSitemapHttp()),
        PostLinkFinder(fetcher, settings),
        ContentExtractor(fetcher, settings=settings),
        settings,
    )

    result = asyncio.run(orchestrator.discover_blog_pages(base))

    assert result.base_url == base
    assert [s.url for s in result.blog_sections] == [f"{ROOT}/blog/"]
    assert f"{base}/blog/" not in renderer.calls
    assert not any(call.startswith(f"{base}/") for call in renderer.calls)
    assert result.index_pages_found == 1


def test_sitemap_posts_alone_are_not_individual_posts() -> None:
    pages = {ROOT: "<html><body><p>Hi</p></body></html>", f"{ROOT}/blog/hello-world": _post("Hello world", 4)}

    result = asyncio.run(_orchestrator(pages=pages).discover_blog_pages(ROOT))

    assert result.blog_sections == ()
    assert [r.url for r in result.blog_posts] == [f"{ROOT}/blog/hello-world"]
    assert result.analysis.has_sitemap is True
    assert result.analysis.has_individual_posts is False
    assert result.individual_posts_found == 0


def test_extract_urls_pairs_results_with_requested_urls() -> None:
    old = f"{ROOT}/blog/old-second-post"
    missing = f"{ROOT}/blog/missing"
    settings = make_settings()
    fetcher = Fetcher(
        primary=None,
        fallback=FakeRenderer(PAGES, redirects={old: f"{ROOT}/blog/second-post"}),
        settings=settings,
    )
    orchestrator = DiscoveryOrchestrator(
        fetcher,
        SitemapDiscoverer(settings, http_get=FakeSitemapHttp()),
        PostLinkFinder(fetcher, settings),
        ContentExtractor(fetcher, settings=settings),
        settings,
    )

    pairs = asyncio.run(orchestrator.extract_urls([old, missing]))

    assert [url for url, _ in pairs] == [old, missing]
    assert pairs[0][1] is not None
    assert pairs[0][1].url == f"{ROOT}/blog/second-post"
    assert pairs[1][1] is None


def test_individual_posts_come_only_from_post_sections() -> None:
    records = [BlogPostResult(_candidate("https://x.com/blog/a", DiscoveryMethod.SITEMAP))]
    index = BlogSection(url="https://x.com/blog/", page_type=PageType.BLOG_INDEX, confidence=0.5)
    post = BlogSection(url="https://x.com/news/", page_type=PageType.BLOG_POST, confidence=0.5)

    assert analyze(records, [index], ()).has_individual_posts is False
    assert analyze(records, [index, post], ()).has_individual_posts is True
