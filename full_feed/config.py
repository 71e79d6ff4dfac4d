"""Configuration settings for the full feed proxy."""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from dotenv import load_dotenv

ENV_PREFIX = "FULL_FEED_"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ProxyConfig:
    """Configuration for the proxy.

    Attributes:
        host: Interface the HTTP server binds to
        port: Port the HTTP server listens on
        cache_backend: Cache store backend, "memory" or "sqlite"
        cache_path: Database file used by the sqlite backend
        cache_ttl: Seconds a cached article stays valid
        cache_max_size: Maximum entries held by the memory backend
        max_articles: Maximum articles fetched per feed
        request_timeout: Total timeout in seconds for each outbound request
        user_agent: User-Agent header sent on outbound requests
        log_level: Minimum log level
        log_json: Render logs as JSON instead of console output
    """

    host: str = "0.0.0.0"
    port: int = 8000
    cache_backend: str = "memory"
    cache_path: str = "full_feed_cache.db"
    cache_ttl: float = 60.0
    cache_max_size: int = 1024
    max_articles: int = 10
    request_timeout: float = 30.0
    user_agent: str = "FullFeed/1.0 (+https://github.com/full-feed/full-feed)"
    log_level: str = "INFO"
    log_json: bool = True

    def __post_init__(self) -> None:
        if self.cache_backend not in ("memory", "sqlite"):
            raise ValueError(f"cache_backend must be 'memory' or 'sqlite', got {self.cache_backend!r}")
        if self.cache_ttl <= 0:
            raise ValueError("cache_ttl must be positive")
        if self.max_articles < 1:
            raise ValueError("max_articles must be at least 1")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "ProxyConfig":
        """Create a ProxyConfig instance from a dictionary.

        Args:
            config_dict: Dictionary containing configuration values

        Returns:
            ProxyConfig instance with values from dictionary
        """
        return cls(**{k: v for k, v in config_dict.items() if k in cls.__dataclass_fields__})

    @classmethod
    def from_env(cls, env: Optional[Dict[str, str]] = None) -> "ProxyConfig":
        """Create a ProxyConfig from ``FULL_FEED_*`` environment variables.

        A ``.env`` file is loaded first when reading the process environment.

        Args:
            env: Mapping to read instead of ``os.environ``
        """
        if env is None:
            load_dotenv()
            env = dict(os.environ)

        values: Dict[str, Any] = {}
        for field in fields(cls):
            raw = env.get(ENV_PREFIX + field.name.upper())
            if raw is None:
                continue
            if field.type is bool:
                values[field.name] = raw.strip().lower() in _TRUE_VALUES
            elif field.type is int:
                values[field.name] = int(raw)
            elif field.type is float:
                values[field.name] = float(raw)
            else:
                values[field.name] = raw
        return cls.from_dict(values)
