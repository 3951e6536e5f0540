"""
Configuration Management Module

This module handles loading, validating, and providing access to connector
configuration from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Validates URLs, log level, timeouts and retry counts
- Provides type-safe access to configuration values
- Bundles the API key and secret into a Credentials model for the signer

Usage:
    from core.config import settings

    print(settings.indodax_public_url)
    signer = RequestSigner(settings.credentials)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from core.schemas import Credentials


class Settings(BaseSettings):
    """
    Application Settings

    Values are automatically loaded from environment variables or .env file.

    Attributes:
        indodax_public_url: Base URL for unauthenticated market data endpoints
        indodax_private_url: URL for authenticated (trade API) endpoints
        indodax_api_key: API key sent in the `Key` header of private calls
        indodax_secret_key: Secret used to sign private request bodies
        log_level: Logging level
        request_timeout: Timeout for HTTP requests in seconds
        max_retries: Attempts for public calls hitting HTTP 429/503
    """

    # ============================================
    # Indodax API Configuration
    # ============================================

    indodax_public_url: str = Field(
        default="https://indodax.com/api",
        description="Indodax public REST API base URL"
    )

    indodax_private_url: str = Field(
        default="https://indodax.com/tapi",
        description="Indodax private trade API URL"
    )

    indodax_api_key: str = Field(
        default="",
        description="Indodax API key (required for private endpoints)"
    )

    indodax_secret_key: str = Field(
        default="",
        description="Indodax secret key (required for private endpoints)"
    )

    # ============================================
    # Application Configuration
    # ============================================

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # ============================================
    # Transport
    # ============================================

    request_timeout: int = Field(
        default=10,
        description="HTTP request timeout in seconds"
    )

    max_retries: int = Field(
        default=3,
        description="Attempts for public requests that hit rate limits (429/503)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    @property
    def credentials(self) -> Credentials:
        """
        Bundle the configured API key and secret.

        Returns:
            Credentials model (fields may be empty; the signer rejects that
            only when a private request is actually built)
        """
        return Credentials(api_key=self.indodax_api_key, secret=self.indodax_secret_key)

    @property
    def has_credentials(self) -> bool:
        return bool(self.indodax_api_key and self.indodax_secret_key)


settings = Settings()


def validate_configuration() -> None:
    """
    Validate critical configuration settings on startup.

    Raises:
        ValueError: If a setting is missing or out of range
    """
    # logging.py imports config.py, so the logger is imported lazily
    from core.logging import logger

    for name in ("indodax_public_url", "indodax_private_url"):
        url = getattr(settings, name)
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"{name.upper()} must be an http(s) URL, got '{url}'")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if settings.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{settings.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    if settings.request_timeout <= 0:
        raise ValueError(f"REQUEST_TIMEOUT must be positive, got {settings.request_timeout}")

    if settings.max_retries < 1:
        raise ValueError(f"MAX_RETRIES must be at least 1, got {settings.max_retries}")

    logger.info("Configuration validated successfully")
    logger.info(f"Public API: {settings.indodax_public_url}")
    logger.info(f"Private API: {settings.indodax_private_url}")
    logger.info(f"Credentials: {'configured' if settings.has_credentials else 'not configured (public only)'}")
    logger.info(f"Log level: {settings.log_level.upper()}")
