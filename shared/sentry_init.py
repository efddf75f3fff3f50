"""
Sentry initialization for the AI Engine.
"""
import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from shared.config import settings

logger = logging.getLogger(__name__)


def _before_send(event, hint):
    # Warnings are noise outside production-like environments
    if settings.SENTRY_ENVIRONMENT == "development" and event.get("level") == "warning":
        return None
    return event


def init_sentry() -> bool:
    """Initialize Sentry if DSN is provided. Returns True when enabled."""
    if not settings.SENTRY_DSN:
        logger.info("Sentry DSN not provided. Error tracking disabled.")
        return False

    try:
        logging_integration = LoggingIntegration(
            level=logging.INFO,        # Capture info and above as breadcrumbs
            event_level=logging.ERROR   # Send errors as events
        )

        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.SENTRY_ENVIRONMENT,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            integrations=[
                FastApiIntegration(),
                HttpxIntegration(),
                logging_integration,
            ],
            release=settings.APP_VERSION,
            before_send=_before_send,
            send_default_pii=False,
            max_breadcrumbs=50,
        )
        logger.info(
            f"Sentry initialized for environment: {settings.SENTRY_ENVIRONMENT}, "
            f"release: {settings.APP_VERSION}"
        )
        return True
    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")
        return False
