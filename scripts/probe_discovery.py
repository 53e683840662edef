#!/usr/bin/env python3
"""Run blog discovery against a few sites and print what it finds.

This is a dev helper for checking selector and threshold changes against
real sites before shipping them.
"""

from __future__ import annotations

import asyncio
import sys

from blog_discovery.lifespan import build_orchestrator
from blog_discovery.observability.logger import configure_logging


SITES = [
    "https://blog.cloudflare.com",
    "https://www.djangoproject.com/weblog",
]


async def main(sites: list[str]) -> None:
    orchestrator = build_orchestrator()

    for site in sites:
        try:
            result = await orchestrator.discover_blog_pages(site)
            a = result.analysis
            print(
                f"{site} posts={len(result.blog_posts)}/{result.total_posts_found} "
                f"quality={a.quality_score:.2f} methods={','.join(a.discovery_methods)} "
                f"duration_ms={result.duration_ms}"
            )
            for r in result.blog_posts:
                print(f"  [{r.candidate.discovered_from.value}] {r.url} words={r.word_count}")
        except Exception as e:
            print(f"{site} ERROR {type(e).__name__}: {str(e)[:200]}")


if __name__ == "__main__":
    configure_logging("WARNING")
    asyncio.run(main(sys.argv[1:] or SITES))
