"""Utility modules for Tailor.

Provides:
- logger: get_logger for logging
"""

from tailor.utils.logger import get_logger

__all__ = [
    "get_logger",
]
