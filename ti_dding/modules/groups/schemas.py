"""Request and response models for group operations."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ti_dding.modules.groups.domain.models import Group


class GroupCreateResponse(BaseModel):
    """Summary of a create-from-import run."""

    success: bool
    message: str
    created: int = 0
    failed: int = 0
    failures: List[str] = Field(default_factory=list)
    group_ids: List[str] = Field(default_factory=list)


class GroupListResponse(BaseModel):
    """Non-deleted groups in storage order."""

    groups: List[Group] = Field(default_factory=list)
    total: int = 0


class GroupMemberRequest(BaseModel):
    """Schema for adding or removing members."""

    user_ids: List[str] = Field(
        default_factory=list,
        description="User ids to add or remove",
        json_schema_extra={"example": ["user123"]},
    )
    group_id: Optional[str] = Field(
        default=None,
        description="Target group id (single-group mode)",
    )
    all_groups: bool = Field(
        default=False, description="Apply to every non-deleted group"
    )

    @field_validator("user_ids")
    @classmethod
    def strip_user_ids(cls, value: List[str]) -> List[str]:
        cleaned: List[str] = []
        for user_id in value:
            user_id = user_id.strip()
            if user_id and user_id not in cleaned:
                cleaned.append(user_id)
        return cleaned


class GroupMemberResponse(BaseModel):
    """Summary of a member add/remove operation."""

    success: bool
    message: str
    affected: int = 0
    errors: List[str] = Field(default_factory=list)
