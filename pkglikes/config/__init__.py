"""Configuration module."""

from .config_loader import Config, ConfigLoader
from .exceptions import ConfigError, ConfigFileNotFoundError, ConfigValidationError

__all__ = [
    "ConfigLoader",
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "ConfigFileNotFoundError",
]
