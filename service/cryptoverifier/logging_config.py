"""
Logging configuration for CryptoVerifier.

All modules log through children of the "cryptoverifier" logger.
"""

import logging
import sys

ROOT_LOGGER_NAME = "cryptoverifier"


def setup_logging(level: str = "DEBUG") -> logging.Logger:
    """Setup logging with proper format and handlers."""

    # Create logger
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level.upper())

    # Remove existing handlers
    logger.handlers.clear()

    # Create console handler with formatting
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level.upper())

    formatter = logging.Formatter(
        '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger, e.g. get_logger("workflow") -> cryptoverifier.workflow."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


# Global logger instance
app_logger = setup_logging()
