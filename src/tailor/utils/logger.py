"""Minimal logging utilities for Tailor.

Provides a simple get_logger function that wraps the standard library logging.

Example:
    >>> from tailor.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Checking file")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "tailor." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("mymodule")
        >>> logger.name
        'tailor.mymodule'
    """
    # Ensure tailor prefix for consistent namespacing
    if not (name == "tailor" or name.startswith("tailor.")):
        name = f"tailor.{name}"
    return logging.getLogger(name)
