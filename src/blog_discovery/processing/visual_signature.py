"""Visual design signature from sampled element styles."""

from __future__ import annotations

import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup

from ..domain.models import ContentStructure, HeadingStyle, VisualDesignSignature

_RGB_RE = re.compile(
    r"rgba?\(\s*(\d{1,3})[\s,]+(\d{1,3})[\s,]+(\d{1,3})(?:[\s,/]+([\d.]+%?))?\s*\)",
    re.IGNORECASE,
)
_HEX_RE = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)

# Browser defaults; not a brand signal.
NEUTRAL_COLORS = frozenset({"#000000", "#ffffff"})

_ZERO_VALUES = frozenset({"", "0", "0px", "0px 0px", "0px 0px 0px 0px", "none", "normal", "auto"})


def normalize_color(value: Optional[str]) -> Optional[str]:
    """Hex-normalize an rgb()/rgba()/hex color; None for transparent or unparseable values."""
    if not value:
        return None
    v = value.strip().lower()
    if v in ("transparent", "inherit", "initial", "currentcolor", "none"):
        return None
    m = _RGB_RE.search(v)
    if m:
        alpha = m.group(4)
        if alpha is not None:
            a = float(alpha.rstrip("%")) / (100 if alpha.endswith("%") else 1)
            if a == 0:
                return None
        r, g, b = (max(0, min(255, int(m.group(i)))) for i in (1, 2, 3))
        return f"#{r:02x}{g:02x}{b:02x}"
    m = _HEX_RE.match(v)
    if m:
        digits = m.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        return f"#{digits}"
    return None


def primary_font(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    first = value.split(",")[0].strip().strip("'\"")
    return first or None


def _unique(values: Iterable[Optional[str]], limit: int) -> tuple[str, ...]:
    out: list[str] = []
    for v in values:
        if v and v not in out:
            out.append(v)
        if len(out) >= limit:
            break
    return tuple(out)


def _meaningful(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    v = value.strip()
    return None if v.lower() in _ZERO_VALUES else v


def content_structure(soup: BeautifulSoup) -> ContentStructure:
    return ContentStructure(
        paragraphs=len(soup.find_all("p")),
        lists=len(soup.find_all(["ul", "ol"])),
        blockquotes=len(soup.find_all("blockquote")),
        code_blocks=len(soup.find_all("pre")),
        images=len(soup.find_all("img")),
    )


def build_visual_signature(
    style_samples: dict[str, list[dict[str, str]]],
    soup: BeautifulSoup,
    *,
    max_colors: int = 8,
    max_fonts: int = 5,
) -> VisualDesignSignature:
    all_samples = [sample for samples in style_samples.values() for sample in samples]

    def colors(key: str) -> list[str]:
        out = []
        for sample in all_samples:
            c = normalize_color(sample.get(key))
            if c and c not in NEUTRAL_COLORS:
                out.append(c)
        return out

    backgrounds = colors("background_color")
    texts = colors("color")
    borders = colors("border_color")

    heading_sizes = []
    for level in range(1, 7):
        samples = style_samples.get(f"h{level}") or []
        if not samples:
            continue
        first = samples[0]
        weight = _meaningful(first.get("font_weight"))
        heading_sizes.append(
            HeadingStyle(
                level=level,
                size=_meaningful(first.get("font_size")),
                weight=None if weight == "400" else weight,
            )
        )

    paragraph = (style_samples.get("paragraph") or [{}])[0]
    containers = style_samples.get("container") or []
    spacing = [_meaningful(s.get(k)) for s in all_samples for k in ("margin", "padding")]

    return VisualDesignSignature(
        background_colors=_unique(backgrounds, max_colors),
        text_colors=_unique(texts, max_colors),
        border_colors=_unique(borders, max_colors),
        palette=_unique(backgrounds + texts + borders, max_colors),
        font_families=_unique((primary_font(s.get("font_family")) for s in all_samples), max_fonts),
        heading_sizes=tuple(heading_sizes),
        body_font_size=_meaningful(paragraph.get("font_size")),
        body_line_height=_meaningful(paragraph.get("line_height")),
        max_width=next((w for w in (_meaningful(c.get("max_width")) for c in containers) if w), None),
        spacing=_unique(spacing, max_colors),
        border_radii=_unique((_meaningful(s.get("border_radius")) for s in all_samples), max_colors),
        content_structure=content_structure(soup),
    )
