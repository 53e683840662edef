"""Validation helpers."""

from __future__ import annotations

from urllib.parse import urlparse


def has_http_scheme(url: str) -> bool:
    try:
        return urlparse((url or "").strip()).scheme.lower() in ("http", "https")
    except ValueError:
        return False
