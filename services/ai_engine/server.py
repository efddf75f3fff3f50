"""
AI Engine server entry point.

Usage:
    ai-engine
    python -m services.ai_engine.server

PORT selects the listen port (default 8080). SIGINT/SIGTERM trigger a
graceful shutdown: uvicorn stops accepting connections, waits up to
SHUTDOWN_GRACE_SECONDS for in-flight requests, then the lifespan stops
the data collector.
"""
import logging

import uvicorn

from shared.config import settings


def configure_logging():
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    configure_logging()
    logger = logging.getLogger(__name__)
    logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION} on {settings.HOST}:{settings.PORT}")

    # uvicorn exits non-zero when startup (including the lifespan) fails
    uvicorn.run(
        "services.ai_engine.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        timeout_graceful_shutdown=settings.SHUTDOWN_GRACE_SECONDS,
    )


if __name__ == "__main__":
    main()
