"""
Configuration management for StreamWaves.

Handles loading, validation, and access to application configuration.
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field

# Global configuration instance
_config: Optional["StreamWavesConfig"] = None

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class ServerConfig(BaseModel):
    """Server configuration."""
    host: str = "0.0.0.0"
    port: int = 3001
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development, production
    production_origin: str = "https://appstream.onrender.com"
    development_origin: str = "http://localhost:5173"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def public_origin(self) -> str:
        """Origin the relay presents to upstream servers."""
        if self.is_production:
            return self.production_origin
        return self.development_origin


class CacheSettings(BaseModel):
    """Response cache configuration."""
    ttl_seconds: int = 300
    cleanup_interval_seconds: int = 60
    enable_stats: bool = True


class ProxyConfig(BaseModel):
    """IPTV API proxy configuration."""
    timeout_seconds: float = 5.0
    user_agent: str = DEFAULT_USER_AGENT
    follow_redirects: bool = True


class StreamConfig(BaseModel):
    """Stream relay configuration."""
    timeout_seconds: float = 30.0
    max_redirects: int = 5
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "en-US,en;q=0.9"


class DNSConfig(BaseModel):
    """Custom DNS lookup configuration."""
    timeout_seconds: float = 3.0


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    file: str = "logs/streamwaves.log"
    max_size: str = "10MB"
    backup_count: int = 5
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_to_file: bool = True
    slow_request_threshold_ms: float = 5000


class StreamWavesConfig(BaseModel):
    """Main StreamWaves configuration."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
    dns: DNSConfig = Field(default_factory=DNSConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: Optional[str] = None) -> StreamWavesConfig:
    """
    Load configuration from file.

    Args:
        config_path: Path to config file. Defaults to config.yaml in project root.

    Returns:
        Loaded and validated configuration.
    """
    global _config

    if config_path is None:
        possible_paths = [
            Path("config.yaml"),
            Path(__file__).parent.parent / "config.yaml",
        ]
        for path in possible_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data: dict[str, Any] = {}

    if config_path and Path(config_path).exists():
        with open(config_path) as f:
            config_data = yaml.safe_load(f) or {}

    # Apply environment variable overrides
    env_overrides = _get_env_overrides()
    _deep_merge(config_data, env_overrides)

    _config = StreamWavesConfig(**config_data)
    return _config


def get_config() -> StreamWavesConfig:
    """
    Get the current configuration.

    Returns:
        Current configuration (loads default if not yet loaded).
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> StreamWavesConfig:
    """Reload configuration from disk and environment."""
    global _config
    _config = None
    return load_config()


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    # Later entries win, so the STREAMWAVES_* names override the generic ones
    env_map = [
        ("PORT", ("server", "port")),
        ("NODE_ENV", ("server", "environment")),
        ("STREAMWAVES_HOST", ("server", "host")),
        ("STREAMWAVES_PORT", ("server", "port")),
        ("STREAMWAVES_ENV", ("server", "environment")),
        ("STREAMWAVES_DEBUG", ("server", "debug")),
        ("STREAMWAVES_LOG_LEVEL", ("logging", "level")),
        ("STREAMWAVES_PRODUCTION_ORIGIN", ("server", "production_origin")),
        ("STREAMWAVES_CACHE_TTL", ("cache", "ttl_seconds")),
    ]

    for env_var, path in env_map:
        value = os.environ.get(env_var)
        if value is not None:
            _set_nested(overrides, path, _parse_env_value(value))

    return overrides


def _parse_env_value(value: str) -> Any:
    """Parse environment variable value to appropriate type."""
    # Boolean
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False

    # Integer
    try:
        return int(value)
    except ValueError:
        pass

    # Float
    try:
        return float(value)
    except ValueError:
        pass

    return value


def _set_nested(d: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    """Set a nested dictionary value from a path tuple."""
    for key in path[:-1]:
        d = d.setdefault(key, {})
    d[path[-1]] = value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Deep merge override into base dictionary."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
