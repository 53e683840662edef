"""URL normalization and comparison helpers."""

from __future__ import annotations

import re
from urllib.parse import urlparse, urlunparse


def _strip_www(host: str) -> str:
    host = (host or "").lower()
    return host[4:] if host.startswith("www.") else host


def normalize_url(url: str) -> str:
    """Return scheme://host/path with query, fragment and trailing slash removed.

    The host keeps its `www.` prefix; use `canonical_key` for comparisons.
    """
    s = (url or "").strip()
    if not s:
        return ""
    p = urlparse(s)
    if not p.scheme or not p.netloc:
        return s.split("#", 1)[0].split("?", 1)[0]
    path = p.path or ""
    if path.endswith("/"):
        path = path.rstrip("/")
    return urlunparse((p.scheme.lower(), p.netloc.lower(), path, "", "", ""))


def canonical_key(url: str) -> str:
    """Comparison key: scheme+host+path, `www`-insensitive, trailing-slash-insensitive."""
    normalized = normalize_url(url)
    p = urlparse(normalized)
    if not p.netloc:
        return normalized
    return urlunparse((p.scheme, _strip_www(p.netloc), p.path, "", "", ""))


def site_origin(url: str) -> str:
    """scheme://host of `url`, dropping any path; sitemaps and sections live at the origin."""
    p = urlparse((url or "").strip())
    if not p.scheme or not p.netloc:
        return normalize_url(url)
    return urlunparse((p.scheme.lower(), p.netloc.lower(), "", "", "", ""))


def hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def hosts_match(url_a: str, url_b: str) -> bool:
    a = _strip_www(hostname(url_a))
    return bool(a) and a == _strip_www(hostname(url_b))


def alternate_host_url(url: str) -> str | None:
    """Swap `www.` on or off the host; None for bare IPs and localhost."""
    p = urlparse(url)
    host = p.netloc.lower()
    if not host:
        return None
    if host.startswith("www."):
        alt = host[4:]
    else:
        bare = p.hostname or ""
        if bare == "localhost" or re.fullmatch(r"[\d.]+", bare) or "." not in bare:
            return None
        alt = "www." + host
    return urlunparse((p.scheme, alt, p.path, p.params, p.query, p.fragment))


def url_path(url: str) -> str:
    try:
        return urlparse(url).path or "/"
    except ValueError:
        return "/"


def title_from_slug(url: str) -> str:
    segments = [s for s in url_path(url).split("/") if s]
    if not segments:
        return ""
    slug = segments[-1].replace("-", " ").replace("_", " ")
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), slug).strip()
