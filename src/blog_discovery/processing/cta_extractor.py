"""Call-to-action extraction over the unmodified DOM."""

from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from ..domain.models import CTA, CTAPlacement, CTAType
from ..utils.text import clean_text, clip, element_text
from ..utils.urls import url_path

CTA_SELECTORS: tuple[tuple[CTAType, str], ...] = (
    (CTAType.BUTTON, "button, .btn, .button"),
    (CTAType.CONTACT_LINK, 'a[href*="contact"]'),
    (CTAType.SIGNUP_LINK, 'a[href*="signup"], a[href*="register"]'),
    (CTAType.NEWSLETTER_SIGNUP, 'a[href*="subscribe"], a[href*="newsletter"]'),
    (CTAType.DEMO_LINK, 'a[href*="demo"]'),
    (CTAType.TRIAL_LINK, 'a[href*="trial"]'),
    (CTAType.PRODUCT_LINK, 'a[href*="product"], a[href*="shop"], a[href*="buy"]'),
    (CTAType.DOWNLOAD_LINK, 'a[href*="download"]'),
    (CTAType.SOCIAL_SHARE, ".share-buttons a, .social-share a"),
    (CTAType.FORM, "form"),
    (CTAType.EMAIL_CAPTURE, 'input[type="email"]'),
    (CTAType.CTA_ELEMENT, '[class*="cta"], [id*="cta"]'),
    (CTAType.BLOG_NAVIGATION, 'a[href*="blog"]'),
)

# First match wins.
PLACEMENT_SELECTORS: tuple[tuple[CTAPlacement, str], ...] = (
    (CTAPlacement.HEADER, "header, .header"),
    (CTAPlacement.FOOTER, "footer, .footer"),
    (CTAPlacement.NAVIGATION, "nav, .nav"),
    (CTAPlacement.SIDEBAR, "aside, .sidebar"),
    (CTAPlacement.ARTICLE_CONTENT, "article, .post-content, .entry-content"),
)

CTA_TEXT_MIN_CHARS = 2
CTA_TEXT_MAX_CHARS = 100
CTA_HREF_MAX_CHARS = 200
CTA_CONTEXT_MAX_CHARS = 200


def cta_placement(el: Tag) -> CTAPlacement:
    if el.parent is None:
        return CTAPlacement.UNKNOWN
    for placement, selector in PLACEMENT_SELECTORS:
        if el.css.closest(selector) is not None:
            return placement
    return CTAPlacement.MAIN_CONTENT


def _cta_text(el: Tag) -> str:
    text = element_text(el)
    if not text:
        text = clean_text(str(el.get("placeholder") or el.get("value") or ""))
    return text


def _context(el: Tag) -> str:
    parent = el.parent.css.closest("section, article, div") if el.parent is not None else None
    return clip(element_text(parent), CTA_CONTEXT_MAX_CHARS) if parent is not None else ""


_UNRESOLVED_PREFIXES = ("javascript:", "#", "mailto:", "tel:")


def resolve_href(href: str, page_url: str) -> str:
    """Absolute target URL; script and in-page targets stay as written."""
    if not href or href.lower().startswith(_UNRESOLVED_PREFIXES):
        return href
    return urljoin(page_url, href)


def _points_at_page(href: str, page_url: str) -> bool:
    return url_path(href).rstrip("/") == url_path(page_url).rstrip("/")


def extract_ctas(soup: BeautifulSoup, page_url: str, per_type_limit: int = 8) -> list[CTA]:
    """All CTAs on the page, capped per type. Order across types carries no priority."""
    out: list[CTA] = []
    for cta_type, selector in CTA_SELECTORS:
        taken = 0
        for el in soup.select(selector):
            if taken >= per_type_limit:
                break
            href = resolve_href(str(el.get("href") or el.get("action") or "").strip(), page_url)
            if cta_type is CTAType.BLOG_NAVIGATION and _points_at_page(href, page_url):
                continue
            text = _cta_text(el)
            if not (CTA_TEXT_MIN_CHARS <= len(text) <= CTA_TEXT_MAX_CHARS):
                continue
            class_attr = el.get("class") or []
            out.append(
                CTA(
                    cta_type=cta_type,
                    text=text,
                    href=clip(href, CTA_HREF_MAX_CHARS),
                    placement=cta_placement(el),
                    context=_context(el),
                    page_url=page_url,
                    tag_name=el.name or "",
                    class_name=" ".join(class_attr) if isinstance(class_attr, list) else str(class_attr),
                )
            )
            taken += 1
    return out
