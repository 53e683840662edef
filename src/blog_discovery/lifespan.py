"""Application lifespan management (startup/shutdown hooks)."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from .config.settings import get_settings
from .observability.logger import configure_logging, get_logger
from .scraping.fetcher import Fetcher
from .services.content_extractor import ContentExtractor
from .services.content_filter import ContentFilter
from .services.discovery_service import DiscoveryOrchestrator
from .services.post_link_finder import PostLinkFinder
from .services.sitemap_discovery import SitemapDiscoverer
from .services.website_content_service import WebsiteContentService
from .storage.database import close_db, init_db, session_factory
from .storage.repositories import CTARepository, WebsitePageRepository

logger = get_logger(__name__)

# Shared, process-wide service instances (populated on startup).
app_state: dict[str, Any] = {}


def build_orchestrator() -> DiscoveryOrchestrator:
    settings = get_settings()
    fetcher = Fetcher.from_settings(settings)
    return DiscoveryOrchestrator(
        fetcher=fetcher,
        sitemap_discoverer=SitemapDiscoverer(settings),
        post_link_finder=PostLinkFinder(fetcher, settings),
        content_extractor=ContentExtractor(
            fetcher,
            content_filter=ContentFilter(settings.boilerplate_selectors),
            settings=settings,
        ),
        settings=settings,
    )


@asynccontextmanager
async def lifespan_manager():
    """Manage application lifespan (startup and shutdown)."""
    settings = get_settings()

    configure_logging()
    logger.info(
        "starting_application",
        service_name=settings.service_name,
        dynamic_rendering=settings.enable_dynamic_rendering,
    )

    await init_db()
    logger.info("database_initialized")

    orchestrator = build_orchestrator()
    app_state["orchestrator"] = orchestrator
    app_state["content_extractor"] = orchestrator.content_extractor
    app_state["website_content_service"] = WebsiteContentService(
        orchestrator=orchestrator,
        pages=WebsitePageRepository(session_factory=session_factory),
        ctas=CTARepository(session_factory=session_factory),
    )

    logger.info("application_started")
    try:
        yield
    finally:
        app_state.clear()
        await close_db()
        logger.info("application_shutdown_complete")
