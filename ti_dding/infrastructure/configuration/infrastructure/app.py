"""Application-level settings."""

from pydantic import field_validator

from ti_dding.infrastructure.configuration.base import InfrastructureSettings

SUPPORTED_LOCALES = ("en-US", "zh-CN")


class AppSettings(InfrastructureSettings):
    """Local data directory, logging and output locale.

    Environment Variables:
        TI_DDING_APP__DATA_DIR: Directory holding ``groups.json``
        TI_DDING_APP__LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        TI_DDING_APP__DEBUG: Human-readable console logs instead of JSON
        TI_DDING_APP__LOCALE: Locale of CSV export headers (en-US, zh-CN)
    """

    data_dir: str = "./data"
    log_level: str = "INFO"
    debug: bool = False
    locale: str = "en-US"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("locale")
    @classmethod
    def validate_locale(cls, value: str) -> str:
        if value not in SUPPORTED_LOCALES:
            raise ValueError(
                f"unsupported locale {value!r}, expected one of {SUPPORTED_LOCALES}"
            )
        return value
