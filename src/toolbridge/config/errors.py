"""Configuration errors."""


class ConfigError(Exception):
    """Raised when configuration values are invalid."""
