"""Repository pattern for database access (website pages + CTAs)."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError

from ..domain.errors import DatabaseError
from ..domain.models import CTA, BlogPostResult
from ..models.database import CTARecord, WebsitePage
from ..observability.logger import get_logger
from ..utils.merge import is_present

logger = get_logger(__name__)

# Columns refreshed on conflict; each keeps the stored value when the new one is NULL.
PAGE_COALESCE_COLUMNS = (
    "title",
    "content",
    "meta_description",
    "published_date",
    "author",
    "word_count",
    "excerpt",
    "featured_image_url",
    "internal_links",
    "external_links",
    "headings",
    "visual_design",
    "discovered_from",
    "extraction_method",
    "last_modified_date",
    "sitemap_priority",
    "sitemap_changefreq",
)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _present_or_none(value: Any) -> Any:
    return value if is_present(value) else None


def page_values(organization_id: str, record: BlogPostResult) -> dict[str, Any]:
    """Column values for one page; empty strings and lists become NULL so they never overwrite."""
    c = record.candidate
    post = record.post
    values: dict[str, Any] = {
        "organization_id": organization_id,
        "url": c.url,
        "page_type": "blog_post",
        "title": (post.title if post else None) or c.title,
        "content": post.content if post else None,
        "meta_description": post.meta_description if post else None,
        "published_date": (post.publish_date if post else None) or c.publish_date,
        "author": (post.author if post else None) or c.author,
        "word_count": post.word_count if post and post.word_count > 0 else None,
        "excerpt": c.excerpt,
        "featured_image_url": c.featured_image,
        "internal_links": _jsonable([asdict(link) for link in post.internal_links]) if post else None,
        "external_links": _jsonable([asdict(link) for link in post.external_links]) if post else None,
        "headings": _jsonable([asdict(h) for h in post.headings]) if post else None,
        "visual_design": _jsonable(asdict(post.visual_signature)) if post else None,
        "discovered_from": c.discovered_from.value,
        "extraction_method": post.extraction_method if post else None,
        "last_modified_date": c.last_modified,
        "sitemap_priority": c.declared_priority,
        "sitemap_changefreq": c.change_freq,
    }
    return {k: _present_or_none(v) if k in PAGE_COALESCE_COLUMNS else v for k, v in values.items()}


def build_page_upsert(values: dict[str, Any]):
    now = datetime.utcnow()
    stmt = insert(WebsitePage).values(**values, scraped_at=now, created_at=now, updated_at=now)
    table = WebsitePage.__table__
    set_ = {col: func.coalesce(stmt.excluded[col], table.c[col]) for col in PAGE_COALESCE_COLUMNS}
    set_["scraped_at"] = stmt.excluded.scraped_at
    set_["updated_at"] = stmt.excluded.updated_at
    return stmt.on_conflict_do_update(index_elements=["organization_id", "url"], set_=set_)


def cta_values(organization_id: str, cta: CTA) -> dict[str, Any]:
    return {
        "organization_id": organization_id,
        "page_url": cta.page_url,
        "cta_text": cta.text,
        "cta_type": cta.cta_type.value,
        "placement": cta.placement.value,
        "href": cta.href or None,
        "context": cta.context or None,
        "class_name": cta.class_name or None,
        "tag_name": cta.tag_name or None,
    }


def build_cta_insert(rows: list[dict[str, Any]]):
    now = datetime.utcnow()
    stmt = insert(CTARecord).values([{**row, "discovered_at": now, "created_at": now} for row in rows])
    return stmt.on_conflict_do_nothing(
        index_elements=["organization_id", "page_url", "cta_text", "placement"]
    ).returning(CTARecord.id)


class WebsitePageRepository:
    """Repository for discovered page content (coalesce-on-update upserts)."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def upsert_post(self, organization_id: str, record: BlogPostResult) -> None:
        stmt = build_page_upsert(page_values(organization_id, record))
        try:
            async with self._session_factory() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise DatabaseError("website_page_upsert_failed", detail=f"url={record.url} error={e}") from e


class CTARepository:
    """Repository for CTA rows (insert-or-ignore on the natural key)."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def insert_ctas(self, organization_id: str, ctas: Iterable[CTA]) -> int:
        rows = [cta_values(organization_id, cta) for cta in ctas]
        if not rows:
            return 0
        try:
            async with self._session_factory() as session:
                result = await session.execute(build_cta_insert(rows))
                inserted = len(result.fetchall())
                await session.commit()
        except SQLAlchemyError as e:
            raise DatabaseError("cta_insert_failed", detail=str(e)) from e
        logger.debug("ctas_inserted", organization_id=organization_id, submitted=len(rows), inserted=inserted)
        return inserted
