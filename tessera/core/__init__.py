"""
Tessera Core Module
===================

Configuration shared by the parser, the view registry and the CLI.
"""

from tessera.core.config import Config, config, get_config, reset_config

__all__ = [
    "Config",
    "config",
    "get_config",
    "reset_config",
]
