"""
Unified Logging Configuration

This module sets up a centralized logging system for the entire application.
All modules should import and use the logger from this module instead of
using print() statements.

Usage:
    from core.logging import logger, get_logger

    logger.info("General informational messages")
    log = get_logger(__name__)
    log.warning("mempool.space failed: Timeout")

Log Levels (from most to least verbose):
    DEBUG    - Request/response details (e.g., "API Request: coingecko ...")
    INFO     - Lifecycle and successful updates (e.g., "Bitcoin fees from mempool.space")
    WARNING  - Provider failures and cache fallbacks
    ERROR    - Fetches that failed with nothing to fall back to

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file (DEBUG=true forces DEBUG).
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
        logging.Logger: Configured logger instance

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Application started")
        2024-01-01 12:00:00 [INFO] coinpeek Application started
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

    logger = logging.getLogger("coinpeek")
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

try:
    from core.config import settings
    log_level = settings.effective_log_level
except ImportError:
    log_level = "INFO"

logger = setup_logging(log_level=log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger for a specific module or component.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Logger named "coinpeek.<name>"

    Example:
        # In providers/bitcoin_fees.py:
        logger = get_logger(__name__)  # "coinpeek.providers.bitcoin_fees"
    """
    return logging.getLogger(f"coinpeek.{name}")


def set_log_level(level: str) -> None:
    """
    Change the log level at runtime.

    Args:
        level: New log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(provider: str, url: str, timeout_ms: Optional[int] = None) -> None:
    """
    Log an outbound API request with consistent formatting.

    Example:
        >>> log_api_request("coingecko", "https://api.coingecko.com/...", 10000)
        [DEBUG] API Request: coingecko https://api.coingecko.com/... | Timeout: 10000ms
    """
    timeout_str = f" | Timeout: {timeout_ms}ms" if timeout_ms else ""
    logger.debug(f"API Request: {provider} {url}{timeout_str}")


def log_api_response(provider: str, url: str, status: int, response_time: float = None) -> None:
    """
    Log an API response with status and timing information.

    Example:
        >>> log_api_response("mempool.space", "/fees/recommended", 200, 0.342)
        [DEBUG] API Response: mempool.space /fees/recommended | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {provider} {url} | Status: {status}{time_str}")


def log_provider_failure(provider: str, reason: str) -> None:
    """
    Log a single provider failure. Provider failures are never surfaced to
    callers, so this is the only trace they leave.

    Example:
        >>> log_provider_failure("blockchair.com", "HTTP 503")
        [WARNING] Provider failed: blockchair.com | HTTP 503
    """
    logger.warning(f"Provider failed: {provider} | {reason}")


def log_websocket_event(stream: str, event: str, details: str = None) -> None:
    """
    Log a WebSocket event on one of the streams this server exposes (e.g. /ws/updates).

    Example:
        >>> log_websocket_event("updates", "connected")
        [INFO] WebSocket: updates connected
    """
    details_str = f" | {details}" if details else ""
    level = logging.ERROR if event == "error" else logging.INFO
    logger.log(level, f"WebSocket: {stream} {event}{details_str}")


logger.debug("Logging system initialized")
