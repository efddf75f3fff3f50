"""
Shared configuration module for the AI Engine backend.
All components read their settings from this module.
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator
import logging

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "AI Engine"
    APP_VERSION: str = "1.0.0"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = DEFAULT_PORT
    REQUEST_TIMEOUT_SECONDS: float = 30.0
    SHUTDOWN_GRACE_SECONDS: int = 30
    MAX_REQUEST_BODY_BYTES: int = 1048576  # 1 MiB
    MAX_ANALYSIS_TOKENS: int = 10

    @field_validator('PORT', mode='before')
    @classmethod
    def validate_port(cls, v):
        """Fall back to the default port on unparseable values."""
        try:
            port = int(v)
        except (TypeError, ValueError):
            logger.warning(f"Invalid PORT value {v!r}, using default {DEFAULT_PORT}")
            return DEFAULT_PORT
        if not 0 < port < 65536:
            logger.warning(f"PORT {port} out of range, using default {DEFAULT_PORT}")
            return DEFAULT_PORT
        return port

    # External APIs
    COINGECKO_API_URL: str = "https://api.coingecko.com/api/v3"
    COINGECKO_API_KEY: str = ""  # Optional: CoinGecko works without API key (free tier)
    DEFILLAMA_YIELDS_URL: str = "https://yields.llama.fi"

    # Data collector
    PRICE_REFRESH_INTERVAL_SECONDS: float = 30.0
    YIELD_REFRESH_INTERVAL_SECONDS: float = 60.0
    PRICE_REQUEST_TIMEOUT_SECONDS: float = 10.0
    PRICE_CLIENT_TIMEOUT_SECONDS: float = 15.0
    STALE_THRESHOLD_SECONDS: int = 300  # 5 minutes

    # Sentry
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()
