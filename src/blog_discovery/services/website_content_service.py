"""Discovery + persistence hand-off for an organization's website."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from ..domain.errors import DatabaseError
from ..domain.models import DiscoveryResult
from ..observability.logger import get_logger
from ..storage.repositories import CTARepository, WebsitePageRepository
from .discovery_service import DiscoveryOrchestrator

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoredDiscovery:
    result: DiscoveryResult
    pages_stored: int
    ctas_stored: int


class WebsiteContentService:
    def __init__(
        self,
        orchestrator: DiscoveryOrchestrator,
        pages: WebsitePageRepository,
        ctas: CTARepository,
    ):
        self._orchestrator = orchestrator
        self._pages = pages
        self._ctas = ctas

    async def discover_and_store(
        self,
        organization_id: str,
        base_url: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> StoredDiscovery:
        result = await self._orchestrator.discover_blog_pages(base_url, cancel_event=cancel_event)

        pages_stored = 0
        ctas_stored = 0
        for record in result.blog_posts:
            try:
                await self._pages.upsert_post(organization_id, record)
                pages_stored += 1
                if record.post is not None and record.post.ctas:
                    ctas_stored += await self._ctas.insert_ctas(organization_id, record.post.ctas)
            except DatabaseError as e:
                logger.warning(
                    "website_content_store_failed",
                    organization_id=organization_id,
                    url=record.url,
                    error=str(e),
                    detail=e.info.detail,
                )

        logger.info(
            "website_content_stored",
            organization_id=organization_id,
            pages_stored=pages_stored,
            ctas_stored=ctas_stored,
        )
        return StoredDiscovery(result=result, pages_stored=pages_stored, ctas_stored=ctas_stored)
