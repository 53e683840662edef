from __future__ import annotations

from bs4 import BeautifulSoup

from blog_discovery.processing.visual_signature import build_visual_signature, normalize_color, primary_font


def test_normalize_color() -> None:
    assert normalize_color("rgb(255, 0, 128)") == "#ff0080"
    assert normalize_color("rgba(16, 32, 48, 0.5)") == "#102030"
    assert normalize_color("rgba(0, 0, 0, 0)") is None
    assert normalize_color("#ABC") == "#aabbcc"
    assert normalize_color("#1a2b3c") == "#1a2b3c"
    assert normalize_color("transparent") is None
    assert normalize_color("not-a-color") is None
    assert normalize_color(None) is None


def test_primary_font() -> None:
    assert primary_font('"Inter", Helvetica, sans-serif') == "Inter"
    assert primary_font("") is None


def test_signature_drops_neutral_colors_and_default_weight() -> None:
    styles = {
        "h1": [{"font_size": "40px", "font_weight": "700", "color": "rgb(0, 0, 0)"}],
        "h2": [{"font_size": "28px", "font_weight": "400"}],
        "paragraph": [
            {
                "font_size": "18px",
                "line_height": "1.6",
                "color": "rgb(51, 51, 51)",
                "font_family": "Georgia, serif",
                "margin": "0px",
            }
        ],
        "button": [
            {
                "background_color": "rgb(37, 99, 235)",
                "color": "rgb(255, 255, 255)",
                "border_radius": "6px",
                "padding": "8px 16px",
                "font_family": "Inter, sans-serif",
            }
        ],
        "container": [{"max_width": "none"}, {"max_width": "1200px"}],
    }
    soup = BeautifulSoup(
        "<body><p>a</p><p>b</p><ul><li>x</li></ul><ol><li>y</li></ol><pre>code</pre><img src='a.png'></body>",
        "lxml",
    )

    sig = build_visual_signature(styles, soup)

    assert sig.background_colors == ("#2563eb",)
    assert sig.text_colors == ("#333333",)
    assert sig.palette == ("#2563eb", "#333333")
    assert sig.font_families == ("Georgia", "Inter")
    assert [(h.level, h.size, h.weight) for h in sig.heading_sizes] == [(1, "40px", "700"), (2, "28px", None)]
    assert sig.body_font_size == "18px"
    assert sig.body_line_height == "1.6"
    assert sig.max_width == "1200px"
    assert sig.spacing == ("8px 16px",)
    assert sig.border_radii == ("6px",)
    assert sig.content_structure.paragraphs == 2
    assert sig.content_structure.lists == 2
    assert sig.content_structure.code_blocks == 1
    assert sig.content_structure.images == 1
    assert sig.content_structure.blockquotes == 0


def test_signature_without_samples_is_empty_but_structured() -> None:
    sig = build_visual_signature({}, BeautifulSoup("<p>only</p>", "lxml"))

    assert sig.palette == ()
    assert sig.heading_sizes == ()
    assert sig.body_font_size is None
    assert sig.content_structure.paragraphs == 1
