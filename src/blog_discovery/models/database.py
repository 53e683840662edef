"""SQLAlchemy models for discovered website content and CTAs."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class WebsitePage(Base):
    __tablename__ = "website_pages"
    __table_args__ = (UniqueConstraint("organization_id", "url", name="unique_org_page_url"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    page_type: Mapped[str] = mapped_column(String(50), nullable=False, default="blog_post")

    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    meta_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    published_date: Mapped[str | None] = mapped_column(String(100), nullable=True)
    author: Mapped[str | None] = mapped_column(String(255), nullable=True)
    word_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    excerpt: Mapped[str | None] = mapped_column(Text, nullable=True)
    featured_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Link / structure analysis
    internal_links: Mapped[list | None] = mapped_column(JSON, nullable=True)
    external_links: Mapped[list | None] = mapped_column(JSON, nullable=True)
    headings: Mapped[list | None] = mapped_column(JSON, nullable=True)
    visual_design: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # Discovery provenance
    discovered_from: Mapped[str | None] = mapped_column(String(50), nullable=True)
    extraction_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_modified_date: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sitemap_priority: Mapped[float | None] = mapped_column(Float, nullable=True)
    sitemap_changefreq: Mapped[str | None] = mapped_column(String(20), nullable=True)

    scraped_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class CTARecord(Base):
    __tablename__ = "cta_analysis"
    __table_args__ = (
        UniqueConstraint("organization_id", "page_url", "cta_text", "placement", name="unique_org_cta"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    page_url: Mapped[str] = mapped_column(Text, nullable=False)
    cta_text: Mapped[str] = mapped_column(Text, nullable=False)
    cta_type: Mapped[str] = mapped_column(String(50), nullable=False)
    placement: Mapped[str] = mapped_column(String(50), nullable=False)
    href: Mapped[str | None] = mapped_column(Text, nullable=True)
    context: Mapped[str | None] = mapped_column(Text, nullable=True)
    class_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    tag_name: Mapped[str | None] = mapped_column(String(20), nullable=True)

    discovered_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
