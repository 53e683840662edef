"""Request models for the internal discovery endpoints."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def _http_url(v: str) -> str:
    v = v.strip()
    if not (v.lower().startswith("http://") or v.lower().startswith("https://")):
        raise ValueError("url must start with http:// or https://")
    return v


class DiscoveryRequest(BaseModel):
    base_url: str = Field(..., min_length=1)
    organization_id: Optional[str] = None

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        return _http_url(v).rstrip("/")


class ExtractRequest(BaseModel):
    urls: List[str] = Field(..., min_length=1, max_length=50)

    @field_validator("urls")
    @classmethod
    def validate_urls(cls, v: List[str]) -> List[str]:
        return [_http_url(u) for u in v]


class PageRequest(BaseModel):
    url: str = Field(..., min_length=1)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return _http_url(v)
