"""ti-dding configuration settings - main aggregator and loader."""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from ti_dding.infrastructure.configuration.errors import ConfigError
from ti_dding.infrastructure.configuration.features import GroupsFeatureSettings
from ti_dding.infrastructure.configuration.infrastructure import AppSettings
from ti_dding.infrastructure.configuration.integrations import DingTalkSettings

DEFAULT_CONFIG_LOCATIONS = (
    Path("configs") / "config.yaml",
    Path("config.yaml"),
    Path("~/.ti-dding/config.yaml"),
    Path("/etc/ti-dding/config.yaml"),
)


class Settings(BaseSettings):
    """ti-dding configuration settings - main aggregator.

    Aggregates the per-concern sections into a single configuration object:

    - **dingtalk**: credentials and endpoint of the remote platform
    - **app**: data directory, logging, locale
    - **group**: defaults applied when creating groups

    Values come from the YAML config file (passed as init kwargs by
    ``load_settings``) overridden by ``TI_DDING_``-prefixed environment
    variables, using ``__`` between nested keys.

    Example:
        ```python
        settings = load_settings("configs/config.yaml")

        client = DingTalkClient(settings.dingtalk, settings.group.default_settings)
        store = FileGroupStore(settings.app.data_dir)
        ```
    """

    dingtalk: DingTalkSettings = Field(default_factory=DingTalkSettings)
    app: AppSettings = Field(default_factory=AppSettings)
    group: GroupsFeatureSettings = Field(default_factory=GroupsFeatureSettings)

    model_config = SettingsConfigDict(
        env_prefix="TI_DDING_",
        env_nested_delimiter="__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats the config file, which arrives as init kwargs.
        return (env_settings, dotenv_settings, init_settings)

    @property
    def data_dir(self) -> Path:
        return Path(self.app.data_dir).expanduser()


def resolve_config_path(config_path: Optional[str] = None) -> Optional[Path]:
    """Find the YAML config file to load.

    Args:
        config_path: Explicit path from ``--config``. It must exist.

    Returns:
        The path to load, or None when no default location holds a file.

    Raises:
        ConfigError: If an explicit path does not exist.
    """
    if config_path:
        path = Path(config_path).expanduser()
        if not path.is_file():
            raise ConfigError(f"config file not found: {config_path}")
        return path

    for candidate in DEFAULT_CONFIG_LOCATIONS:
        path = candidate.expanduser()
        if path.is_file():
            return path
    return None


def read_config_file(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"failed to read config file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping at top level")
    return data


def validate_settings(settings: Settings) -> None:
    """Check the settings are usable and prepare the data directory.

    Raises:
        ConfigError: If credentials are missing, the data directory is empty
            or it cannot be created.
    """
    if not settings.dingtalk.has_credentials:
        raise ConfigError(
            "incomplete DingTalk configuration: provide app_key/app_secret "
            "or access_token"
        )

    if not settings.app.data_dir:
        raise ConfigError("data directory must not be empty")

    try:
        os.makedirs(settings.data_dir.resolve(), exist_ok=True)
    except OSError as exc:
        raise ConfigError(
            f"failed to create data directory {settings.app.data_dir}: {exc}"
        ) from exc


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Build and validate the settings for one command invocation.

    Args:
        config_path: Optional explicit YAML file. Without it the default
            locations are searched and defaults apply when none exists.

    Returns:
        Validated Settings instance.

    Raises:
        ConfigError: On any unreadable, invalid or incomplete configuration.
    """
    path = resolve_config_path(config_path)
    file_values = read_config_file(path) if path else {}

    try:
        settings = Settings(**file_values)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc

    validate_settings(settings)
    return settings
