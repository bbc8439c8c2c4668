"""Buildium (source system) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import choice_env_var, optional_env_var, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy, ShouldCacheHook

DEFAULT_BUILDIUM_BASE_URL = "https://api.buildium.com/v1"
BUILDIUM_TIMEOUT_SECONDS = 30.0
HTTP_CACHE_MODES = ("memory", "sqlite", "off")


@dataclass(frozen=True)
class BuildiumConfig:
    """Holds Buildium API credentials and transport settings."""

    client_id: str
    client_secret: str
    resilience: ResilienceConfig


def _cache_config(cache_predicate: ShouldCacheHook | None) -> CacheConfig | None:
    mode = choice_env_var("LEASESYNC_HTTP_CACHE", "memory", HTTP_CACHE_MODES)
    if mode == "off":
        return None
    if mode == "sqlite":
        return CacheConfig(backend="sqlite", should_cache=cache_predicate)
    return CacheConfig(backend="memory", should_cache=cache_predicate)


def get_buildium_config(
    *,
    resilience: ResilienceConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> BuildiumConfig:
    values = require_env_vars(("BUILDIUM_CLIENT_ID", "BUILDIUM_CLIENT_SECRET"))
    if resilience is None:
        base_url = optional_env_var("BUILDIUM_BASE_URL", DEFAULT_BUILDIUM_BASE_URL)
        resilience = ResilienceConfig(
            name="buildium",
            base_url=base_url.rstrip("/"),
            timeout_seconds=BUILDIUM_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=3, backoff_factor=0.2),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            cache=_cache_config(cache_predicate),
            default_headers={
                "x-buildium-client-id": values["BUILDIUM_CLIENT_ID"],
                "x-buildium-client-secret": values["BUILDIUM_CLIENT_SECRET"],
                "Content-Type": "application/json",
            },
        )
    return BuildiumConfig(
        client_id=values["BUILDIUM_CLIENT_ID"],
        client_secret=values["BUILDIUM_CLIENT_SECRET"],
        resilience=resilience,
    )
