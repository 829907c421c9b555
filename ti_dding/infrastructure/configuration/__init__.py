"""Infrastructure configuration module - public API.

Settings are loaded once per command with ``load_settings`` and handed to
each component's constructor; nothing reads configuration from a global.

Exports:
    Settings: Main settings class
    load_settings: Resolve, read and validate the configuration
    ConfigError: Raised for missing or invalid configuration

Example:
    ```python
    from ti_dding.infrastructure.configuration import load_settings

    settings = load_settings(config_path)
    data_dir = settings.app.data_dir
    base_url = settings.dingtalk.base_url
    ```
"""

from ti_dding.infrastructure.configuration.errors import ConfigError
from ti_dding.infrastructure.configuration.features import (
    GroupDefaultSettings,
    GroupsFeatureSettings,
)
from ti_dding.infrastructure.configuration.infrastructure import AppSettings
from ti_dding.infrastructure.configuration.integrations import DingTalkSettings
from ti_dding.infrastructure.configuration.settings import (
    Settings,
    load_settings,
    resolve_config_path,
    validate_settings,
)

__all__ = [
    "AppSettings",
    "ConfigError",
    "DingTalkSettings",
    "GroupDefaultSettings",
    "GroupsFeatureSettings",
    "Settings",
    "load_settings",
    "resolve_config_path",
    "validate_settings",
]
