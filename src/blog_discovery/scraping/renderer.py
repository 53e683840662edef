"""Rendering capability shared by the dynamic and static fetch strategies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from bs4 import BeautifulSoup

# Element categories sampled for the visual design signature.
STYLE_SAMPLE_SELECTORS: dict[str, str] = {
    "h1": "h1",
    "h2": "h2",
    "h3": "h3",
    "h4": "h4",
    "h5": "h5",
    "h6": "h6",
    "paragraph": "article p, .post-content p, .entry-content p, main p",
    "link": "a",
    "blockquote": "blockquote",
    "button": "button, .btn, .button",
    "form_input": "input, textarea, select",
    "cta": '[class*="cta"], [id*="cta"]',
    "container": "article, .post-content, .entry-content, main, .container",
    "sidebar": "aside, .sidebar",
    "navigation": "nav, .nav, .navigation",
}

# Computed-style properties captured per sampled element (snake_case keys).
STYLE_PROPERTIES: dict[str, str] = {
    "background_color": "background-color",
    "color": "color",
    "border_color": "border-color",
    "font_family": "font-family",
    "font_size": "font-size",
    "font_weight": "font-weight",
    "line_height": "line-height",
    "margin": "margin",
    "padding": "padding",
    "border_radius": "border-radius",
    "max_width": "max-width",
}


@dataclass(frozen=True)
class RenderedPage:
    """Document handle produced by a renderer.

    `html` is the serialized DOM after rendering; `style_samples` maps a
    category from STYLE_SAMPLE_SELECTORS to a bounded list of style dicts.
    """

    url: str
    final_url: str
    html: str
    renderer: str
    style_samples: dict[str, list[dict[str, str]]] = field(default_factory=dict)

    def soup(self) -> BeautifulSoup:
        """Parse a fresh, independently mutable tree."""
        return BeautifulSoup(self.html or "", "lxml")


class Renderer(Protocol):
    name: str

    async def render(self, url: str) -> RenderedPage:
        ...
