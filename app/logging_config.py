"""
Application logging configuration.

This module provides unified logging configuration for the media storage
service. Storage drivers, the proxy endpoint and the migration CLI all log
through the same named logger so backend failures can be traced per request.
"""
import logging
import sys


def setup_logging() -> logging.Logger:
    """
    Configure and return the application logger.

    The logger outputs to stdout with a structured format including:
    - Timestamp
    - Logger name
    - Log level
    - Message

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger("portfolio_media")
    logger.setLevel(logging.INFO)

    # Prevent duplicate handlers if called multiple times
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger
