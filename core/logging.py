"""
Unified Logging Configuration

This module sets up the centralized logging used by the volume pipeline.
Every module imports its logger from here instead of configuring its own
handlers or using print().

Usage:
    from core.logging import logger, get_logger

    logger.info("Aggregation started")

    log = get_logger(__name__)   # "volumeboard.exchanges.woox"
    log.warning("Tier failed, falling through")

Log Levels used by the pipeline:
    DEBUG    - Request/response details (never credentials)
    INFO     - Tier successes, aggregation runs
    WARNING  - Tier fallthroughs, persistence failures
    ERROR    - Terminal fallback (degraded placeholder returned)

Configuration:
    Log level is controlled by the LOG_LEVEL setting (see core.config).
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "volumeboard"


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
        logging.Logger: Configured root application logger

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Application started")
        2024-01-01 12:00:00 [INFO] volumeboard: Application started
    """
    if log_format is None:
        format_parts = []

        if include_timestamp:
            format_parts.append("%(asctime)s")

        format_parts.append("[%(levelname)s]")

        if include_module:
            format_parts.append("%(name)s:")

        format_parts.append("%(message)s")

        log_format = " ".join(format_parts)

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True
    )

    logger = logging.getLogger(ROOT_LOGGER_NAME)
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
    Get a child logger for a module.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Logger named "volumeboard.<name>"

    Example:
        # In exchanges/woox/api_client.py:
        logger = get_logger(__name__)  # "volumeboard.exchanges.woox.api_client"
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(exchange: str, endpoint: str, params: dict = None) -> None:
    """
    Log an outgoing venue request with consistent formatting.

    Only parameter names and public values are passed in here; signatures
    and tokens live in headers, which are never logged.

    Example:
        >>> log_api_request("woox", "/v1/client/trades", {"page": 2})
        [DEBUG] API Request: woox /v1/client/trades | Params: {'page': 2}
    """
    if params:
        logger.debug(f"API Request: {exchange} {endpoint} | Params: {params}")
    else:
        logger.debug(f"API Request: {exchange} {endpoint}")


def log_api_response(exchange: str, endpoint: str, status: int, response_time: float = None) -> None:
    """
    Log a venue response with status and timing information.

    Example:
        >>> log_api_response("paradex", "/account/info", 200, 0.342)
        [DEBUG] API Response: paradex /account/info | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {exchange} {endpoint} | Status: {status}{time_str}")


logger.debug("Logging system initialized")
