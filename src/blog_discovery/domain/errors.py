"""Domain-specific errors.

These errors are mapped to HTTP status codes in the internal API layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BlogDiscoveryError(Exception):
    """Base class for all domain errors."""


@dataclass(frozen=True)
class DomainErrorInfo:
    code: str
    message: str
    detail: Optional[str] = None


class FetchFailureReason(str, Enum):
    TIMEOUT = "timeout"
    NETWORK = "network"
    INVALID_PROTOCOL = "invalid_protocol"


class InvalidInputError(BlogDiscoveryError):
    """Raised when request/config validation fails."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.info = DomainErrorInfo(code="INVALID_INPUT", message=message, detail=detail)


class FetchError(BlogDiscoveryError):
    """A URL could not be retrieved by any rendering strategy."""

    def __init__(self, message: str, reason: FetchFailureReason, detail: str | None = None):
        super().__init__(message)
        self.reason = reason
        self.info = DomainErrorInfo(code="FETCH_FAILED", message=message, detail=detail)


class ExtractionError(BlogDiscoveryError):
    """Raised by the content extractor only when the underlying fetch failed."""

    def __init__(self, message: str, reason: FetchFailureReason, detail: str | None = None):
        super().__init__(message)
        self.reason = reason
        self.info = DomainErrorInfo(code="EXTRACTION_FAILED", message=message, detail=detail)


class SitemapError(BlogDiscoveryError):
    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.info = DomainErrorInfo(code="SITEMAP_ERROR", message=message, detail=detail)


class DiscoveryCancelledError(BlogDiscoveryError):
    def __init__(self, message: str = "discovery cancelled", detail: str | None = None):
        super().__init__(message)
        self.info = DomainErrorInfo(code="CANCELLED", message=message, detail=detail)


class DatabaseError(BlogDiscoveryError):
    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.info = DomainErrorInfo(code="DATABASE_ERROR", message=message, detail=detail)
