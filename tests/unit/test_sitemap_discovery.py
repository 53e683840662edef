from __future__ import annotations

import asyncio

from conftest import FakeSitemapHttp, make_settings

from blog_discovery.domain.models import DiscoveryMethod
from blog_discovery.services.sitemap_discovery import SitemapDiscoverer, is_blog_post_url, parse_sitemap


def _urlset(*entries: tuple[str, str]) -> str:
    body = "".join(f"<url><loc>{loc}</loc><priority>{prio}</priority></url>" for loc, prio in entries)
    return f'<?xml version="1.0"?><urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{body}</urlset>'


def _index(*children: str) -> str:
    body = "".join(f"<sitemap><loc>{c}</loc></sitemap>" for c in children)
    return f'<?xml version="1.0"?><sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{body}</sitemapindex>'


def test_is_blog_post_url_include_patterns() -> None:
    assert is_blog_post_url("https://example.com/blog/my-post-title")
    assert is_blog_post_url("https://example.com/news/launch-day/")
    assert is_blog_post_url("https://example.com/2024/03/spring-update")
    assert is_blog_post_url("https://example.com/blog/support-tips")


def test_is_blog_post_url_exclude_patterns() -> None:
    assert not is_blog_post_url("https://example.com/blog/")
    assert not is_blog_post_url("https://example.com/blog")
    assert not is_blog_post_url("https://example.com/blog/category/x")
    assert not is_blog_post_url("https://example.com/blog/tag/python")
    assert not is_blog_post_url("https://example.com/blog/page/2")
    assert not is_blog_post_url("https://example.com/blog/whitepaper.pdf")
    assert not is_blog_post_url("https://example.com/blog/feed/")
    assert not is_blog_post_url("https://example.com/about/team")
    assert not is_blog_post_url("https://example.com/pricing")


def test_parse_sitemap_reads_entry_metadata() -> None:
    xml = (
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
        "<url><loc>https://example.com/blog/a</loc><lastmod>2024-01-01</lastmod>"
        "<changefreq>weekly</changefreq></url></urlset>"
    )
    parsed = parse_sitemap(xml, source_url="https://example.com/sitemap.xml")
    assert parsed is not None
    entry = parsed.entries[0]
    assert entry.priority == 0.5
    assert entry.last_modified == "2024-01-01"
    assert entry.change_freq == "weekly"
    assert entry.source_sitemap == "https://example.com/sitemap.xml"
    assert parse_sitemap("<html><body>not found</body></html>") is None


def test_single_sitemap_yields_one_post_candidate() -> None:
    http = FakeSitemapHttp(
        {
            "https://example.com/sitemap.xml": _urlset(
                ("https://example.com/blog/hello-world", "0.8"),
                ("https://example.com/blog/", "1.0"),
            )
        }
    )
    discoverer = SitemapDiscoverer(make_settings(), http_get=http)

    result = asyncio.run(discoverer.discover_from_sitemap("https://example.com"))

    assert result.sitemaps_found == ("https://example.com/sitemap.xml",)
    assert result.total_posts_found == 1
    post = result.posts[0]
    assert post.url == "https://example.com/blog/hello-world"
    assert post.discovered_from is DiscoveryMethod.SITEMAP
    assert post.declared_priority == 0.8
    assert post.title == "Hello World"
    assert post.is_likely_post


def test_probing_stops_after_first_valid_sitemap() -> None:
    http = FakeSitemapHttp(
        {
            "https://example.com/sitemap_index.xml": _urlset(("https://example.com/blog/a-post", "0.5")),
            "https://example.com/wp-sitemap.xml": _urlset(("https://example.com/blog/b-post", "0.5")),
        }
    )
    discoverer = SitemapDiscoverer(make_settings(), http_get=http)

    result = asyncio.run(discoverer.discover_from_sitemap("https://example.com/"))

    assert [p.url for p in result.posts] == ["https://example.com/blog/a-post"]
    assert "https://example.com/wp-sitemap.xml" not in http.calls


def test_sitemap_index_recursion_is_capped() -> None:
    children = [f"https://example.com/sitemap-{i}.xml" for i in range(12)]
    docs = {"https://example.com/sitemap.xml": _index(*children)}
    for i, child in enumerate(children):
        docs[child] = _urlset((f"https://example.com/blog/post-{i}", "0.5"), ("https://example.com/blog/shared", "0.5"))
    http = FakeSitemapHttp(docs)
    discoverer = SitemapDiscoverer(make_settings(sitemap_max_children=10), http_get=http)

    result = asyncio.run(discoverer.discover_from_sitemap("https://example.com"))

    fetched_children = [c for c in http.calls if c in children]
    assert fetched_children == children[:10]
    urls = [p.url for p in result.posts]
    assert len(urls) == len(set(urls))
    assert len(urls) == 11  # ten distinct posts + the shared one


def test_failing_child_sitemap_is_skipped() -> None:
    docs = {
        "https://example.com/sitemap.xml": _index("https://example.com/missing.xml", "https://example.com/posts.xml"),
        "https://example.com/posts.xml": _urlset(("https://example.com/news/big-news", "0.6")),
    }
    discoverer = SitemapDiscoverer(make_settings(), http_get=FakeSitemapHttp(docs))

    result = asyncio.run(discoverer.discover_from_sitemap("https://example.com"))

    assert [p.url for p in result.posts] == ["https://example.com/news/big-news"]


def test_no_sitemap_returns_empty_result() -> None:
    discoverer = SitemapDiscoverer(make_settings(), http_get=FakeSitemapHttp())

    result = asyncio.run(discoverer.discover_from_sitemap("https://example.com"))

    assert result.sitemaps_found == ()
    assert result.posts == ()


def test_sitemaps_are_looked_up_at_the_site_root() -> None:
    http = FakeSitemapHttp({"https://example.com/sitemap.xml": _urlset(("https://example.com/blog/hello-world", "0.8"))})
    discoverer = SitemapDiscoverer(make_settings(), http_get=http)

    result = asyncio.run(discoverer.discover_from_sitemap("https://example.com/weblog/"))

    assert http.calls[0] == "https://example.com/sitemap.xml"
    assert not any(call.startswith("https://example.com/weblog") for call in http.calls)
    assert result.sitemaps_found == ("https://example.com/sitemap.xml",)
    assert [p.url for p in result.posts] == ["https://example.com/blog/hello-world"]
