"""
Cross-cutting helpers (logging). Keep free of platform logic.
"""

from platform_autoconfig.utils.logging import JsonFormatter, configure_logging, get_logger

__all__ = [
    "JsonFormatter",
    "configure_logging",
    "get_logger",
]
