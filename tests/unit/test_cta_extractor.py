from __future__ import annotations

from bs4 import BeautifulSoup

from blog_discovery.domain.models import CTAPlacement, CTAType
from blog_discovery.processing.cta_extractor import extract_ctas

PAGE_URL = "https://example.com/blog/launch-notes"

HTML = """
<html><body>
  <header><button>Get started</button></header>
  <nav><a href="/blog">Blog</a></nav>
  <main>
    <article>
      <p>Launch notes. Read <a href="/blog/older-post">the previous release</a> too.</p>
      <a href="/blog/launch-notes/">This post</a>
    </article>
    <section>
      <form action="/newsletter">
        <input type="email" placeholder="Your email">
        <span>Join the list</span>
      </form>
    </section>
  </main>
  <aside><a href="/demo">Book a demo</a></aside>
  <footer><a href="/contact">Contact sales</a></footer>
</body></html>
"""


def _by_type(ctas, cta_type):
    return [c for c in ctas if c.cta_type is cta_type]


def test_detects_types_and_placement() -> None:
    ctas = extract_ctas(BeautifulSoup(HTML, "lxml"), PAGE_URL)

    (button,) = _by_type(ctas, CTAType.BUTTON)
    assert button.text == "Get started"
    assert button.placement is CTAPlacement.HEADER
    assert button.tag_name == "button"

    (contact,) = _by_type(ctas, CTAType.CONTACT_LINK)
    assert contact.placement is CTAPlacement.FOOTER
    assert contact.href == "https://example.com/contact"

    (demo,) = _by_type(ctas, CTAType.DEMO_LINK)
    assert demo.placement is CTAPlacement.SIDEBAR

    (email,) = _by_type(ctas, CTAType.EMAIL_CAPTURE)
    assert email.text == "Your email"
    assert email.placement is CTAPlacement.MAIN_CONTENT

    (form,) = _by_type(ctas, CTAType.FORM)
    assert form.href == "https://example.com/newsletter"
    assert form.text == "Join the list"

    assert all(c.page_url == PAGE_URL for c in ctas)


def test_blog_navigation_skips_links_to_current_page() -> None:
    ctas = extract_ctas(BeautifulSoup(HTML, "lxml"), PAGE_URL)

    nav = _by_type(ctas, CTAType.BLOG_NAVIGATION)
    assert [(c.href, c.placement) for c in nav] == [
        ("https://example.com/blog", CTAPlacement.NAVIGATION),
        ("https://example.com/blog/older-post", CTAPlacement.ARTICLE_CONTENT),
    ]


def test_context_comes_from_enclosing_block() -> None:
    ctas = extract_ctas(BeautifulSoup(HTML, "lxml"), PAGE_URL)

    (older,) = [c for c in ctas if c.href == "https://example.com/blog/older-post"]
    assert older.context.startswith("Launch notes.")
    assert len(older.context) <= 200


def test_caps_each_type_and_bounds_text_length() -> None:
    buttons = "".join(f"<button>Action {i}</button>" for i in range(12))
    html = f"<html><body><button>x</button><button>{'y' * 150}</button>{buttons}</body></html>"

    ctas = extract_ctas(BeautifulSoup(html, "lxml"), PAGE_URL, per_type_limit=8)

    assert [c.text for c in ctas] == [f"Action {i}" for i in range(8)]
    assert {c.placement for c in ctas} == {CTAPlacement.MAIN_CONTENT}


def test_hrefs_are_resolved_against_the_page() -> None:
    html = """
    <html><body>
      <a href="/contact">Contact us</a>
      <a class="btn" href="javascript:void(0)">Open chat</a>
      <a class="btn" href="#pricing">See pricing</a>
      <a href="https://partner.io/demo">Partner demo</a>
    </body></html>
    """

    ctas = extract_ctas(BeautifulSoup(html, "lxml"), "https://example.com/blog/x")

    hrefs = {c.text: c.href for c in ctas}
    assert hrefs["Contact us"] == "https://example.com/contact"
    assert hrefs["Open chat"] == "javascript:void(0)"
    assert hrefs["See pricing"] == "#pricing"
    assert hrefs["Partner demo"] == "https://partner.io/demo"
