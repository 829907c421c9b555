from ti_dding.infrastructure.configuration.features.groups import (
    GroupDefaultSettings,
    GroupsFeatureSettings,
)

__all__ = ["GroupDefaultSettings", "GroupsFeatureSettings"]
