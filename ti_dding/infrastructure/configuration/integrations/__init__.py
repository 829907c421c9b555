from ti_dding.infrastructure.configuration.integrations.dingtalk import (
    DingTalkSettings,
)

__all__ = ["DingTalkSettings"]
