"""Location of local files (currently only the optional sqlite HTTP cache)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "leasesync"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


def default_data_dir() -> Path:
    if os.name == "nt":
        local_app_data = os.getenv("LOCALAPPDATA")
        root = Path(local_app_data) if local_app_data else Path.home() / "AppData" / "Local"
    else:
        xdg_data_home = os.getenv("XDG_DATA_HOME")
        root = Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"
    return root / APP_DIR_NAME


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def http_cache_path(self) -> Path:
        """Path of the sqlite cache file; creates the data directory on first use."""

        data_dir = self.data_dir.expanduser().resolve()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / HTTP_CACHE_FILENAME


def get_storage_config() -> StorageConfig:
    override = optional_env_var("LEASESYNC_DATA_DIR", "")
    return StorageConfig(data_dir=Path(override) if override else default_data_dir())


def get_http_cache_path() -> Path:
    return get_storage_config().http_cache_path()
