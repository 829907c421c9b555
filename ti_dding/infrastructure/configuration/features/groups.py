"""Groups feature settings."""

from pydantic import Field

from ti_dding.infrastructure.configuration.base import FeatureSettings


class GroupDefaultSettings(FeatureSettings):
    """Default attributes applied to newly created internal groups.

    Attributes:
        allow_member_invite: Send ``show_history_type=1`` on creation.
        allow_member_view: Send ``validation_type=1`` on creation.
    """

    allow_member_invite: bool = True
    allow_member_view: bool = True


class GroupsFeatureSettings(FeatureSettings):
    """Configuration for group management.

    Environment Variables:
        TI_DDING_GROUP__DEFAULT_SETTINGS__ALLOW_MEMBER_INVITE
        TI_DDING_GROUP__DEFAULT_SETTINGS__ALLOW_MEMBER_VIEW
    """

    default_settings: GroupDefaultSettings = Field(
        default_factory=GroupDefaultSettings
    )
