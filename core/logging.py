"""
Unified Logging Configuration

This module sets up a centralized logging system for the entire relay.
All modules should import and use the logger from this module instead of
using print() statements.

Usage:
    from core.logging import logger, get_logger

    logger.info("Relay started")

    log = get_logger(__name__)
    log.warning("Upstream closed, reconnecting")

Log Levels (from most to least verbose):
    DEBUG    - Per-batch diagnostics (e.g., "Applied 4 changes from batch")
    INFO     - Lifecycle messages (e.g., "Connected to Binance ticker stream")
    WARNING  - Recoverable problems (e.g., "Discarding malformed ticker batch")
    ERROR    - Transport failures (e.g., "Upstream connect failed")
    CRITICAL - Startup failures

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file.
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
        include_module: Include module name in log messages

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Relay started")
        2024-01-01 12:00:00 [INFO] deboard: Relay started
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
        force=True  # Override any existing configuration
    )

    logger = logging.getLogger("deboard")
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

try:
    from core.config import settings
    log_level = settings.log_level
except ImportError:
    log_level = "INFO"

# Create the global logger instance
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
        logging.Logger: Logger named "deboard.<name>"

    Example:
        # In services/price_feed.py:
        logger = get_logger(__name__)  # "deboard.services.price_feed"
    """
    return logging.getLogger(f"deboard.{name}")


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

def log_websocket_event(source: str, event: str, details: str = None) -> None:
    """
    Log an upstream WebSocket event with consistent formatting.

    Args:
        source: Upstream name (e.g., "binance")
        event: Event type (e.g., "connecting", "connected", "disconnected", "error")
        details: Additional details (optional)

    Example:
        >>> log_websocket_event("binance", "error", "Connection timeout")
        [ERROR] WebSocket: binance error | Connection timeout
    """
    details_str = f" | {details}" if details else ""

    level = logging.ERROR if event == "error" else logging.INFO
    logger.log(level, f"WebSocket: {source} {event}{details_str}")


def log_subscriber_event(event: str, subscriber: str, total: int) -> None:
    """
    Log a subscriber lifecycle event.

    Args:
        event: "registered", "unregistered" or "dropped"
        subscriber: Subscriber name (usually the client address)
        total: Subscribers remaining in the registry

    Example:
        >>> log_subscriber_event("registered", "127.0.0.1:51234", 3)
        [INFO] Subscriber registered: 127.0.0.1:51234 | total=3
    """
    level = logging.WARNING if event == "dropped" else logging.INFO
    logger.log(level, f"Subscriber {event}: {subscriber} | total={total}")


logger.debug("Logging system initialized")
