"""Content filtering (boilerplate removal before body extraction)."""

from __future__ import annotations

from bs4 import BeautifulSoup

NON_TEXT_TAGS = ("script", "style", "noscript", "template", "svg", "iframe")

DEFAULT_BOILERPLATE_SELECTORS = [
    "nav",
    "header",
    "footer",
    ".cookie-banner",
    ".popup",
    ".modal",
    ".advertisement",
    ".social-share",
    ".comments",
    ".sidebar",
]


class ContentFilter:
    """Processing layer component: noise filtering.

    Rules:
    - Runs only after CTA, link and visual extraction (they need the original markup)
    - Mutates the tree it is given; callers pass their own parsed copy
    """

    def __init__(self, boilerplate_selectors: list[str] | None = None):
        self._selectors = boilerplate_selectors if boilerplate_selectors is not None else DEFAULT_BOILERPLATE_SELECTORS

    def strip_boilerplate(self, soup: BeautifulSoup) -> BeautifulSoup:
        for el in soup(list(NON_TEXT_TAGS)):
            el.decompose()
        for selector in self._selectors:
            for el in soup.select(selector):
                el.decompose()
        return soup

    def filter_html(self, html: str) -> str:
        soup = BeautifulSoup(html, "lxml")
        return str(self.strip_boilerplate(soup))
