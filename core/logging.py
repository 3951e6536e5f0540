"""
Unified Logging Configuration

This module sets up a centralized logging system for the connector.
All modules should import and use the logger from this module instead of
using print() statements.

Usage:
    from core.logging import logger, get_logger

    logger.info("Connector initialized")

    log = get_logger(__name__)
    log.debug("Parsed 12 open orders")

Log Levels (from most to least verbose):
    DEBUG    - Request/response tracing, parser details
    INFO     - Lifecycle and operation summaries (e.g., "Fetched balance")
    WARNING  - Classified exchange failures, unknown market ids
    ERROR    - Transport failures
    CRITICAL - Not used by the connector itself

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file.

Notes:
    Private request bodies are never logged verbatim: they carry the nonce,
    and headers carry the key and signature. Only endpoint names and
    caller parameters are logged.
"""

import logging
import sys
from typing import Optional


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    include_module: bool = True
) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string (uses default if None)
        include_timestamp: Include timestamp in log messages
        include_module: Include logger name in log messages

    Returns:
        logging.Logger: Configured "indodax" logger

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Connector started")
        2024-01-01 12:00:00 [INFO] indodax: Connector started
    """
    if log_format is None:
        format_parts = []

        if include_timestamp:
            format_parts.append("%(asctime)s")

        format_parts.append("[%(levelname)s]")

        if include_module:
            format_parts.append("%(name)s")

        format_parts.append("%(message)s")

        log_format = " ".join(format_parts)

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True
    )

    logger = logging.getLogger("indodax")
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

try:
    from core.config import settings
    log_level = settings.log_level if hasattr(settings, 'log_level') else "INFO"
except ImportError:
    log_level = "INFO"

logger = setup_logging(log_level=log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a child of the application logger.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Logger named "indodax.<name>"

    Example:
        # In exchanges/indodax/api_client.py:
        logger = get_logger(__name__)  # "indodax.exchanges.indodax.api_client"
    """
    return logging.getLogger(f"indodax.{name}")


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(exchange: str, endpoint: str, params: dict = None) -> None:
    """
    Log an API request with consistent formatting.

    Args:
        exchange: Exchange name (e.g., "indodax")
        endpoint: Endpoint name or path being called
        params: Caller parameters (never the signed body)

    Example:
        >>> log_api_request("indodax", "openOrders", {"pair": "btc_idr"})
        [DEBUG] API Request: indodax openOrders | Params: {'pair': 'btc_idr'}
    """
    if params:
        logger.debug(f"API Request: {exchange} {endpoint} | Params: {params}")
    else:
        logger.debug(f"API Request: {exchange} {endpoint}")


def log_api_response(exchange: str, endpoint: str, status: int, response_time: float = None) -> None:
    """
    Log an API response with status and timing information.

    Args:
        exchange: Exchange name
        endpoint: Endpoint name or path
        status: HTTP status code
        response_time: Response time in seconds (optional)

    Example:
        >>> log_api_response("indodax", "btc_idr/ticker", 200, 0.342)
        [DEBUG] API Response: indodax btc_idr/ticker | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {exchange} {endpoint} | Status: {status}{time_str}")


logger.debug("Logging system initialized")
