"""DingTalk open platform settings."""

from pydantic import Field

from ti_dding.infrastructure.configuration.base import IntegrationSettings


class DingTalkSettings(IntegrationSettings):
    """Credentials and endpoint of the DingTalk open API.

    Either ``app_key``/``app_secret`` (exchanged for a token at runtime) or a
    pre-issued ``access_token`` must be provided.

    Environment Variables:
        TI_DDING_DINGTALK__APP_KEY
        TI_DDING_DINGTALK__APP_SECRET
        TI_DDING_DINGTALK__ACCESS_TOKEN
        TI_DDING_DINGTALK__BASE_URL
        TI_DDING_DINGTALK__TIMEOUT
    """

    app_key: str = ""
    app_secret: str = ""
    access_token: str = ""
    base_url: str = "https://oapi.dingtalk.com"
    timeout: int = Field(default=30, gt=0, description="HTTP timeout in seconds")

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_token) or bool(self.app_key and self.app_secret)
