"""CLI utilities."""

from .config import ConfigError, ConfigManager, ProfileConfig
from .validation import validate_jobs, validate_key, validate_server_url

__all__ = [
    "ConfigError",
    "ConfigManager",
    "ProfileConfig",
    "validate_jobs",
    "validate_key",
    "validate_server_url",
]
