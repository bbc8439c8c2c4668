"""Environment variable readers."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import InvalidConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable


def _read(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip() or None


def require_env_vars(names: Iterable[str]) -> dict[str, str]:
    """Return every requested variable, or raise naming all of the missing ones."""

    values = {name: _read(name) for name in names}
    missing = sorted(name for name, value in values.items() if value is None)
    if missing:
        raise MissingConfigurationError(f"Missing configuration for: {', '.join(missing)}")
    return {name: value for name, value in values.items() if value is not None}


def optional_env_var(name: str, default: str) -> str:
    value = _read(name)
    return default if value is None else value


def positive_int_env_var(name: str, default: int) -> int:
    """Read a positive integer override, falling back to ``default`` when unset."""

    raw = _read(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise InvalidConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise InvalidConfigurationError(f"{name} must be positive, got {value}")
    return value


def choice_env_var(name: str, default: str, choices: Iterable[str]) -> str:
    allowed = tuple(choices)
    value = optional_env_var(name, default).lower()
    if value not in allowed:
        raise InvalidConfigurationError(
            f"{name} must be one of {', '.join(allowed)}, got {value!r}"
        )
    return value
