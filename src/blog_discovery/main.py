"""Service entrypoint: serves the internal HTTP API inside the app lifespan."""

import asyncio
import sys

import uvicorn

from .config.settings import BlogDiscoverySettings, get_settings
from .http_app import app
from .lifespan import lifespan_manager
from .observability.logger import get_logger

logger = get_logger(__name__)


def build_server(settings: BlogDiscoverySettings) -> uvicorn.Server:
    config = uvicorn.Config(
        app=app,
        host=settings.http_host,
        port=settings.http_port,
        log_level="warning",  # structlog is the primary logger
        loop="asyncio",
        lifespan="off",
    )
    return uvicorn.Server(config)


async def main() -> None:
    settings = get_settings()
    settings.validate()
    if not settings.http_enable:
        print("HTTP surface disabled (HTTP_ENABLE=false); nothing to serve", file=sys.stderr)
        return

    async with lifespan_manager():
        server = build_server(settings)
        logger.info("http_server_started", address=f"http://{settings.http_host}:{settings.http_port}")
        await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nShutting down...")
        sys.exit(0)
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(1)
