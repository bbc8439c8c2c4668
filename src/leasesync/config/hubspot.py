"""HubSpot (target system) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_HUBSPOT_BASE_URL = "https://api.hubapi.com"
HUBSPOT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class HubSpotConfig:
    """Holds the HubSpot private-app token and transport settings."""

    access_token: str
    resilience: ResilienceConfig


def get_hubspot_config(*, resilience: ResilienceConfig | None = None) -> HubSpotConfig:
    token = require_env_vars(("HUBSPOT_ACCESS_TOKEN",))["HUBSPOT_ACCESS_TOKEN"]
    base_url = optional_env_var("HUBSPOT_BASE_URL", DEFAULT_HUBSPOT_BASE_URL)
    return HubSpotConfig(
        access_token=token,
        resilience=resilience
        or ResilienceConfig(
            name="hubspot",
            base_url=base_url.rstrip("/"),
            timeout_seconds=HUBSPOT_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=3, backoff_factor=0.55),
            ratelimit=RateLimit(max_calls=9, per_seconds=1.0),
            cache=None,
            default_headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
        ),
    )
