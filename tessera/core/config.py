"""
Tessera Configuration Management
================================

Layered configuration for the parser, the view registry and logging.

Configuration Loading Priority (highest to lowest):
1. Runtime overrides (Config.set)
2. Environment variables (TESSERA_*)
3. JSON configuration files (Config.load_file)
4. Default values

Environment variables map to dotted keys by splitting on the first
underscore after the prefix:

    TESSERA_PARSER_MINIFY=false       -> parser.minify = False
    TESSERA_PARSER_STRICT_CLOSE=0     -> parser.strict_close = False
    TESSERA_LOGGING_LEVEL=DEBUG       -> logging.level = "DEBUG"

Example:
    config = get_config()
    if config.get_bool("parser.minify", True):
        ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, TypeVar, Union

import orjson

T = TypeVar("T")

ENV_PREFIX = "TESSERA_"

DEFAULTS: Dict[str, Any] = {
    "parser": {
        "minify": True,
        "strict_close": True,
    },
    "logging": {
        "level": "WARNING",
        "format": "text",
    },
}


@dataclass
class ConfigSource:
    """Represents a configuration source with priority."""
    name: str
    data: Dict[str, Any]
    priority: int = 0


class Config:
    """
    Configuration container with dot-notation access.

    Example:
        config = Config()
        config.set("parser.minify", False)
        config.get("parser.minify")            # False
        config.get("parser.missing", "x")      # "x"
    """

    def __init__(self, load_env: bool = True) -> None:
        self._sources: List[ConfigSource] = []
        self._cache: Dict[str, Any] = {}
        self._merged: Dict[str, Any] = {}
        self._dirty = True

        self.add_source("defaults", DEFAULTS, priority=0)
        if load_env:
            self._load_env_overrides()

    def load_file(self, path: Union[str, Path]) -> None:
        """Load a JSON configuration file as a source."""
        data = orjson.loads(Path(path).read_bytes())
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain an object")
        self.add_source(f"file:{path}", data, priority=10)

    def _load_env_overrides(self) -> None:
        """Load overrides from TESSERA_* environment variables."""
        overrides: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            config_key = ".".join(key[len(ENV_PREFIX):].lower().split("_", 1))
            overrides[config_key] = self._parse_env_value(value)

        if overrides:
            self.add_source("env_vars", self._unflatten(overrides), priority=100)

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ("true", "yes", "1"):
            return True
        if value.lower() in ("false", "no", "0"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return orjson.loads(value)
            except orjson.JSONDecodeError:
                pass

        return value

    def _unflatten(self, flat: Dict[str, Any]) -> Dict[str, Any]:
        """Convert flat dot-notation keys to nested dict."""
        result: Dict[str, Any] = {}

        for key, value in flat.items():
            parts = key.split(".")
            current = result
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

        return result

    def add_source(
        self,
        name: str,
        data: Dict[str, Any],
        priority: int = 0,
    ) -> None:
        """Add a configuration source."""
        self._sources.append(ConfigSource(name=name, data=data, priority=priority))
        self._dirty = True
        self._cache.clear()

    def _merge(self) -> None:
        """Merge all sources into single configuration."""
        if not self._dirty:
            return

        self._merged = {}
        for source in sorted(self._sources, key=lambda s: s.priority):
            self._deep_merge(self._merged, source.data)

        self._dirty = False
        self._cache.clear()

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Deep merge override into base."""
        for key, value in override.items():
            if isinstance(base.get(key), dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            elif isinstance(value, dict):
                base[key] = {}
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: T = None) -> Union[Any, T]:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "parser.minify")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        self._merge()
        if key in self._cache:
            return self._cache[key]

        current: Any = self._merged
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        self._cache[key] = current
        return current

    def get_int(self, key: str, default: int = 0) -> int:
        """Get configuration value as integer."""
        try:
            return int(self.get(key, default))
        except (TypeError, ValueError):
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get configuration value as boolean."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "yes", "1")
        return bool(value)

    def get_list(self, key: str, default: Optional[List] = None) -> List:
        """Get configuration value as list."""
        value = self.get(key, default)
        if value is None:
            return default or []
        if isinstance(value, list):
            return value
        return [value]

    def set(self, key: str, value: Any) -> None:
        """
        Set a runtime configuration value.

        Runtime values have the highest priority.
        """
        runtime = next((s for s in self._sources if s.name == "runtime"), None)
        if runtime is None:
            runtime = ConfigSource(name="runtime", data={}, priority=1000)
            self._sources.append(runtime)

        parts = key.split(".")
        current = runtime.data
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value

        self._dirty = True
        self._cache.clear()

    def has(self, key: str) -> bool:
        """Check if configuration key exists."""
        return self.get(key) is not None

    def section(self, prefix: str) -> Dict[str, Any]:
        """Get all values under a prefix."""
        value = self.get(prefix)
        return dict(value) if isinstance(value, dict) else {}

    def all(self) -> Dict[str, Any]:
        """Get all configuration as dict."""
        self._merge()
        return self._merged.copy()

    def __contains__(self, key: str) -> bool:
        return self.has(key)


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the global configuration so the next access reloads it."""
    global _config
    _config = None


def config(key: str, default: Any = None) -> Any:
    """Shortcut function for configuration access."""
    return get_config().get(key, default)
