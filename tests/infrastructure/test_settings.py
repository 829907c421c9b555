"""Unit tests for settings loading and validation."""

from pathlib import Path

import pytest
import yaml

from ti_dding.infrastructure.configuration import (
    ConfigError,
    Settings,
    load_settings,
    resolve_config_path,
    validate_settings,
)


def write_config(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")
    return path


@pytest.mark.unit
class TestSettingsDefaults:
    def test_defaults(self):
        settings = Settings()
        assert settings.dingtalk.base_url == "https://oapi.dingtalk.com"
        assert settings.dingtalk.timeout == 30
        assert settings.app.data_dir == "./data"
        assert settings.app.log_level == "INFO"
        assert settings.app.locale == "en-US"
        assert settings.group.default_settings.allow_member_invite is True
        assert settings.group.default_settings.allow_member_view is True
        assert settings.app.debug is False

    def test_log_level_upper_cased(self):
        settings = Settings(app={"log_level": "debug"})
        assert settings.app.log_level == "DEBUG"

    def test_has_credentials(self):
        assert not Settings().dingtalk.has_credentials
        assert Settings(dingtalk={"access_token": "t"}).dingtalk.has_credentials
        assert Settings(
            dingtalk={"app_key": "k", "app_secret": "s"}
        ).dingtalk.has_credentials
        assert not Settings(dingtalk={"app_key": "k"}).dingtalk.has_credentials


@pytest.mark.unit
class TestLoadSettings:
    def test_load_from_explicit_file(self, tmp_path):
        config = write_config(
            tmp_path / "config.yaml",
            {
                "dingtalk": {"app_key": "k", "app_secret": "s", "timeout": 10},
                "app": {"data_dir": str(tmp_path / "store"), "locale": "zh-CN"},
                "group": {"default_settings": {"allow_member_view": False}},
            },
        )

        settings = load_settings(str(config))

        assert settings.dingtalk.app_key == "k"
        assert settings.dingtalk.timeout == 10
        assert settings.app.locale == "zh-CN"
        assert settings.group.default_settings.allow_member_view is False
        assert settings.group.default_settings.allow_member_invite is True
        assert (tmp_path / "store").is_dir()

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        config = write_config(
            tmp_path / "config.yaml",
            {
                "dingtalk": {"app_key": "file-key", "app_secret": "file-secret"},
                "app": {"data_dir": str(tmp_path / "store")},
            },
        )
        monkeypatch.setenv("TI_DDING_DINGTALK__APP_KEY", "env-key")

        settings = load_settings(str(config))

        assert settings.dingtalk.app_key == "env-key"
        assert settings.dingtalk.app_secret == "file-secret"

    def test_environment_only(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TI_DDING_DINGTALK__ACCESS_TOKEN", "env-token")
        monkeypatch.setenv("TI_DDING_APP__DATA_DIR", str(tmp_path / "env-data"))

        settings = load_settings()

        assert settings.dingtalk.access_token == "env-token"
        assert settings.data_dir == tmp_path / "env-data"

    def test_default_location_is_searched(self, tmp_path):
        (tmp_path / "configs").mkdir()
        write_config(
            tmp_path / "configs" / "config.yaml",
            {
                "dingtalk": {"access_token": "t"},
                "app": {"data_dir": str(tmp_path / "d")},
            },
        )

        assert resolve_config_path() == Path("configs") / "config.yaml"
        assert load_settings().dingtalk.access_token == "t"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match="config file not found"):
            load_settings(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("dingtalk: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="failed to read config file"):
            load_settings(str(config))

    def test_top_level_must_be_mapping(self, tmp_path):
        config = write_config(tmp_path / "config.yaml", ["a", "b"])
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(str(config))

    def test_invalid_value(self, tmp_path):
        config = write_config(
            tmp_path / "config.yaml",
            {"dingtalk": {"access_token": "t", "timeout": 0}},
        )
        with pytest.raises(ConfigError, match="invalid configuration"):
            load_settings(str(config))

    def test_unsupported_locale(self, tmp_path):
        config = write_config(
            tmp_path / "config.yaml",
            {"dingtalk": {"access_token": "t"}, "app": {"locale": "fr-FR"}},
        )
        with pytest.raises(ConfigError, match="invalid configuration"):
            load_settings(str(config))

    def test_missing_credentials(self, tmp_path):
        config = write_config(
            tmp_path / "config.yaml", {"app": {"data_dir": str(tmp_path / "d")}}
        )
        with pytest.raises(ConfigError, match="incomplete DingTalk configuration"):
            load_settings(str(config))


@pytest.mark.unit
class TestValidateSettings:
    def test_empty_data_dir(self):
        settings = Settings(dingtalk={"access_token": "t"}, app={"data_dir": ""})
        with pytest.raises(ConfigError, match="data directory"):
            validate_settings(settings)

    def test_creates_data_dir(self, tmp_path):
        target = tmp_path / "nested" / "data"
        settings = Settings(
            dingtalk={"access_token": "t"}, app={"data_dir": str(target)}
        )
        validate_settings(settings)
        assert target.is_dir()

    def test_data_dir_blocked_by_file(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        settings = Settings(
            dingtalk={"access_token": "t"}, app={"data_dir": str(blocker / "data")}
        )
        with pytest.raises(ConfigError, match="failed to create data directory"):
            validate_settings(settings)
