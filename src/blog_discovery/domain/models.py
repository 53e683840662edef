"""Framework-agnostic domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class DiscoveryMethod(str, Enum):
    SITEMAP = "sitemap"
    BLOG_INDEX = "blog_index"
    BLOG_INDEX_SCRAPED = "blog_index_scraped"
    DIRECT_POST = "direct_post"


class PageType(str, Enum):
    BLOG_INDEX = "blog_index"
    BLOG_POST = "blog_post"


class UrlHint(str, Enum):
    INDEX = "index"
    POST = "post"
    NONE = "none"


class CTAType(str, Enum):
    BUTTON = "button"
    CONTACT_LINK = "contact_link"
    SIGNUP_LINK = "signup_link"
    NEWSLETTER_SIGNUP = "newsletter_signup"
    DEMO_LINK = "demo_link"
    TRIAL_LINK = "trial_link"
    PRODUCT_LINK = "product_link"
    DOWNLOAD_LINK = "download_link"
    SOCIAL_SHARE = "social_share"
    FORM = "form"
    EMAIL_CAPTURE = "email_capture"
    CTA_ELEMENT = "cta_element"
    BLOG_NAVIGATION = "blog_navigation"


class CTAPlacement(str, Enum):
    HEADER = "header"
    FOOTER = "footer"
    NAVIGATION = "navigation"
    SIDEBAR = "sidebar"
    ARTICLE_CONTENT = "article_content"
    MAIN_CONTENT = "main_content"
    UNKNOWN = "unknown"


class LinkType(str, Enum):
    BLOG = "blog"
    PAGE = "page"
    PRODUCT = "product"
    ABOUT = "about"
    CONTACT = "contact"
    EXTERNAL = "external"


@dataclass(frozen=True)
class SitemapEntry:
    url: str
    priority: float = 0.5
    last_modified: Optional[str] = None
    change_freq: Optional[str] = None
    source_sitemap: str = ""


@dataclass(frozen=True)
class DiscoveredPostCandidate:
    """A URL found by a discovery strategy, before full extraction.

    `priority` is a rank (lower = more certain to be a real post); the sitemap's
    own 0.0-1.0 value is kept separately as `declared_priority`.
    """

    url: str
    title: str
    discovered_from: DiscoveryMethod
    priority: int = 2
    is_likely_post: bool = False
    publish_date: Optional[str] = None
    author: Optional[str] = None
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    last_modified: Optional[str] = None
    declared_priority: Optional[float] = None
    change_freq: Optional[str] = None
    discovery_source: Optional[str] = None


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class PageLink:
    url: str
    text: str
    link_type: LinkType
    context: str = ""


@dataclass(frozen=True)
class SiteLinkStructure:
    """Internal links of one page, as used for site-wide linking analysis."""

    page_url: str
    internal_links: tuple[PageLink, ...] = ()

    @property
    def total_links_found(self) -> int:
        return len(self.internal_links)


@dataclass(frozen=True)
class CTA:
    cta_type: CTAType
    text: str
    href: str
    placement: CTAPlacement
    context: str = ""
    page_url: str = ""
    tag_name: str = ""
    class_name: str = ""


@dataclass(frozen=True)
class HeadingStyle:
    level: int
    size: Optional[str] = None
    weight: Optional[str] = None


@dataclass(frozen=True)
class ContentStructure:
    paragraphs: int = 0
    lists: int = 0
    blockquotes: int = 0
    code_blocks: int = 0
    images: int = 0


@dataclass(frozen=True)
class VisualDesignSignature:
    background_colors: tuple[str, ...] = ()
    text_colors: tuple[str, ...] = ()
    border_colors: tuple[str, ...] = ()
    palette: tuple[str, ...] = ()
    font_families: tuple[str, ...] = ()
    heading_sizes: tuple[HeadingStyle, ...] = ()
    body_font_size: Optional[str] = None
    body_line_height: Optional[str] = None
    max_width: Optional[str] = None
    spacing: tuple[str, ...] = ()
    border_radii: tuple[str, ...] = ()
    content_structure: ContentStructure = field(default_factory=ContentStructure)


@dataclass(frozen=True)
class ExtractedPost:
    url: str
    title: str
    content: str
    word_count: int
    headings: tuple[Heading, ...] = ()
    meta_description: Optional[str] = None
    author: Optional[str] = None
    publish_date: Optional[str] = None
    internal_links: tuple[PageLink, ...] = ()
    external_links: tuple[PageLink, ...] = ()
    ctas: tuple[CTA, ...] = ()
    visual_signature: VisualDesignSignature = field(default_factory=VisualDesignSignature)
    extraction_method: str = ""


@dataclass(frozen=True)
class PageClassification:
    url: str
    page_type: PageType
    confidence: float
    index_indicators: tuple[str, ...] = ()
    post_indicators: tuple[str, ...] = ()
    url_hint: UrlHint = UrlHint.NONE


@dataclass(frozen=True)
class PageSummary:
    url: str
    title: str
    meta_description: Optional[str]
    body_text: str
    headings: tuple[Heading, ...]
    word_count: int


@dataclass(frozen=True)
class SitemapDiscoveryResult:
    sitemaps_found: tuple[str, ...] = ()
    posts: tuple[DiscoveredPostCandidate, ...] = ()

    @property
    def total_posts_found(self) -> int:
        return len(self.posts)


@dataclass(frozen=True)
class BlogSection:
    url: str
    page_type: PageType
    confidence: float
    post_links_found: int = 0


@dataclass(frozen=True)
class BlogPostResult:
    """A merged discovery candidate plus its extracted content, when available."""

    candidate: DiscoveredPostCandidate
    post: Optional[ExtractedPost] = None

    @property
    def url(self) -> str:
        return self.candidate.url

    @property
    def word_count(self) -> int:
        return self.post.word_count if self.post is not None else 0


@dataclass(frozen=True)
class DiscoveryAnalysis:
    has_index: bool
    has_individual_posts: bool
    has_sitemap: bool
    quality_score: float
    discovery_methods: tuple[str, ...]


@dataclass(frozen=True)
class DiscoveryResult:
    base_url: str
    blog_sections: tuple[BlogSection, ...]
    blog_posts: tuple[BlogPostResult, ...]
    total_posts_found: int
    analysis: DiscoveryAnalysis
    sitemaps_found: tuple[str, ...] = ()
    index_pages_found: int = 0
    individual_posts_found: int = 0
    sitemap_posts_found: int = 0
    duration_ms: int = 0
