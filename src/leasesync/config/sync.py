"""Synchronization defaults for lifecycle runs."""

from __future__ import annotations

from dataclasses import dataclass

from leasesync.domain.data_integration import DEFAULT_LOOKBACK_DAYS
from leasesync.domain.fetcher import (
    DEFAULT_MAX_PAGES,
    DEFAULT_PAGE_SIZE,
    DEFAULT_PROPERTY_CHUNK_SIZE,
)
from leasesync.domain.resolver import DEFAULT_LISTING_CHUNK_SIZE

from .env import positive_int_env_var


@dataclass(frozen=True, slots=True)
class SyncConfig:
    page_size: int = DEFAULT_PAGE_SIZE
    max_pages: int = DEFAULT_MAX_PAGES
    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    listing_chunk_size: int = DEFAULT_LISTING_CHUNK_SIZE
    property_chunk_size: int = DEFAULT_PROPERTY_CHUNK_SIZE


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        page_size=positive_int_env_var("LEASESYNC_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        max_pages=positive_int_env_var("LEASESYNC_MAX_PAGES", DEFAULT_MAX_PAGES),
        lookback_days=positive_int_env_var("LEASESYNC_LOOKBACK_DAYS", DEFAULT_LOOKBACK_DAYS),
    )
