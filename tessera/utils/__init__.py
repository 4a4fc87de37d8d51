"""
Tessera Utilities
=================

Structured logging used across the package.
"""

from tessera.utils.logger import (
    LogLevel,
    Logger,
    configure_logging,
    get_logger,
)

__all__ = [
    "LogLevel",
    "Logger",
    "configure_logging",
    "get_logger",
]
