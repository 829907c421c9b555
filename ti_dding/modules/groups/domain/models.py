"""Group record models for the local store.

``Group`` is the durable record mirrored in ``groups.json``; it is a
Pydantic model so records written by hand or by older versions are
validated on load. ``ImportRow`` is an ephemeral dataclass produced by the
CSV bridge and consumed once by the create-from-import flow.

Invariants enforced on validation and kept by the mutation helpers:
  - owner_id is always in member_ids
  - member_ids has no duplicates
  - member_count == len(member_ids)
  - updated_at is refreshed on every mutation
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


def local_now() -> datetime:
    return datetime.now().astimezone()


class GroupStatus(str, Enum):
    """Lifecycle status of a group record."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    DELETED = "deleted"


class GroupType(str, Enum):
    """Kind of DingTalk group, fixed at creation."""

    INTERNAL = "internal"
    EXTERNAL = "external"


class Group(BaseModel):
    """A managed group chat as recorded locally.

    Attributes:
        id: chat id assigned by DingTalk; empty until created remotely.
        name: unique among non-deleted records.
        description: free text.
        owner_id: user id of the group owner.
        member_ids: ordered, unique member user ids (owner included).
        member_count: len(member_ids), stored for readability of the file.
        status: active, inactive or deleted (soft delete).
        group_type: internal or external.
        created_at: creation time.
        updated_at: time of the last mutation.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    name: str
    description: str = ""
    owner_id: str
    member_ids: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("member_ids", "members"),
    )
    member_count: int = 0
    status: GroupStatus = GroupStatus.ACTIVE
    group_type: GroupType = GroupType.INTERNAL
    created_at: datetime = Field(default_factory=local_now)
    updated_at: datetime = Field(default_factory=local_now)

    @model_validator(mode="after")
    def normalize_members(self) -> "Group":
        # records loaded from disk may predate these rules or be hand-edited
        members: List[str] = []
        for user_id in self.member_ids:
            if user_id not in members:
                members.append(user_id)
        if self.owner_id and self.owner_id not in members:
            members.append(self.owner_id)
        self.member_ids = members
        self.member_count = len(members)
        return self

    @classmethod
    def new(
        cls,
        name: str,
        description: str,
        owner_id: str,
        member_ids: Optional[List[str]] = None,
        group_type: GroupType = GroupType.INTERNAL,
        group_id: str = "",
    ) -> "Group":
        """Build an active record, inserting the owner into the members.

        Args:
            name: Group name.
            description: Group description.
            owner_id: Owner user id.
            member_ids: Initial members; duplicates are dropped.
            group_type: Internal or external.
            group_id: Remote chat id when already known.

        Returns:
            A new Group with both timestamps set to now.
        """
        now = local_now()
        return cls(
            id=group_id,
            name=name,
            description=description,
            owner_id=owner_id,
            member_ids=list(member_ids or []),
            status=GroupStatus.ACTIVE,
            group_type=group_type,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_deleted(self) -> bool:
        return self.status == GroupStatus.DELETED

    @property
    def is_external(self) -> bool:
        return self.group_type == GroupType.EXTERNAL

    def is_member(self, user_id: str) -> bool:
        return user_id in self.member_ids

    def is_owner(self, user_id: str) -> bool:
        return self.owner_id == user_id

    def touch(self) -> None:
        self.updated_at = local_now()

    def add_member(self, user_id: str) -> bool:
        """Add a member locally.

        Returns:
            False if the user is already a member (no-op), True otherwise.
        """
        if self.is_member(user_id):
            return False

        self.member_ids.append(user_id)
        self.member_count = len(self.member_ids)
        self.touch()
        return True

    def remove_member(self, user_id: str) -> bool:
        """Remove a member locally.

        The owner can never be removed.

        Returns:
            False if the user is the owner or not a member (no-op),
            True otherwise.
        """
        if self.is_owner(user_id) or not self.is_member(user_id):
            return False

        self.member_ids.remove(user_id)
        self.member_count = len(self.member_ids)
        self.touch()
        return True

    def mark_deleted(self) -> None:
        self.status = GroupStatus.DELETED
        self.touch()


class GroupStoreDocument(BaseModel):
    """Top-level JSON object of the record file."""

    groups: List[Group] = Field(default_factory=list)
    total: int = 0
    updated_at: datetime = Field(default_factory=local_now)


@dataclass
class ImportRow:
    """One data row of an import CSV, trimmed but not yet normalized.

    Attributes:
        name: Group name (non-empty).
        description: Group description.
        owner_id: Owner user id (non-empty).
        member_ids_raw: Comma-joined member ids as written in the file.
        group_type_label: Optional type label ("" when the column is absent).
        row_number: 1-indexed CSV row, header being row 1.
    """

    name: str
    description: str
    owner_id: str
    member_ids_raw: str
    group_type_label: str = ""
    row_number: int = 0
