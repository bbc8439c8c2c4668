"""Application configuration helpers."""

from __future__ import annotations

from .buildium import BuildiumConfig, get_buildium_config
from .env import choice_env_var, optional_env_var, positive_int_env_var, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .hubspot import HubSpotConfig, get_hubspot_config
from .logging import configure_logging
from .storage import StorageConfig, get_http_cache_path, get_storage_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "BuildiumConfig",
    "CacheConfig",
    "ConfigurationError",
    "HubSpotConfig",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "choice_env_var",
    "configure_logging",
    "get_buildium_config",
    "get_http_cache_path",
    "get_hubspot_config",
    "get_storage_config",
    "get_sync_config",
    "optional_env_var",
    "positive_int_env_var",
    "require_env_vars",
]
