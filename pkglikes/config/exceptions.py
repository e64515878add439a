"""Configuration exceptions."""


class ConfigError(Exception):
    """Raised when configuration cannot be loaded."""
    pass


class ConfigValidationError(ConfigError):
    """Raised when configuration values are invalid or inconsistent."""
    pass


class ConfigFileNotFoundError(ConfigError):
    """Raised when a configuration file exists but cannot be read."""
    pass
