"""Configuration errors raised while reading the environment."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Base class for unusable configuration."""


class MissingConfigurationError(ConfigurationError):
    """A required environment variable is unset or blank."""


class InvalidConfigurationError(ConfigurationError):
    """An environment variable is set to a value leasesync cannot use."""
