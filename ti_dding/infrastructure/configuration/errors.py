"""Configuration errors."""


class ConfigError(Exception):
    """Raised when the configuration is missing, unreadable or invalid."""
