"""Label and member-list mappings between CSV files and group records.

Import files are written by people, so group-type labels are matched
loosely (case, whitespace, Chinese synonyms). Export files are written in
one of the supported locales; every label the export writes maps back to the
same group type on import.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Tuple

from ti_dding.modules.groups.domain.models import GroupType


class Locale(str, Enum):
    """Supported export locales (IETF BCP 47 tags)."""

    EN_US = "en-US"
    ZH_CN = "zh-CN"

    @classmethod
    def from_string(cls, locale_str: str) -> "Locale":
        """Convert string to Locale enum.

        Raises:
            ValueError: If locale string is not supported.
        """
        try:
            return cls(locale_str)
        except ValueError as e:
            raise ValueError(f"Unsupported locale: {locale_str}") from e


GROUP_TYPE_SYNONYMS: Dict[str, GroupType] = {
    "external": GroupType.EXTERNAL,
    "外部群": GroupType.EXTERNAL,
    "外部": GroupType.EXTERNAL,
    "internal": GroupType.INTERNAL,
    "内部群": GroupType.INTERNAL,
    "内部": GroupType.INTERNAL,
}

GROUP_TYPE_LABELS: Dict[Locale, Dict[GroupType, str]] = {
    Locale.EN_US: {GroupType.INTERNAL: "Internal", GroupType.EXTERNAL: "External"},
    Locale.ZH_CN: {GroupType.INTERNAL: "内部群", GroupType.EXTERNAL: "外部群"},
}

EXPORT_HEADERS: Dict[Locale, Tuple[str, ...]] = {
    Locale.EN_US: (
        "Group ID",
        "Name",
        "Description",
        "Owner ID",
        "Member Count",
        "Group Type",
        "Created At",
        "Status",
    ),
    Locale.ZH_CN: (
        "群组ID",
        "群名称",
        "群描述",
        "群主用户ID",
        "成员数量",
        "群组类型",
        "创建时间",
        "状态",
    ),
}

EXPORT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_group_type(label: str | None) -> GroupType:
    """Map an import label to a group type.

    Empty or unrecognized labels default to internal.
    """
    if not label:
        return GroupType.INTERNAL
    return GROUP_TYPE_SYNONYMS.get(label.strip().lower(), GroupType.INTERNAL)


def group_type_label(group_type: GroupType, locale: Locale = Locale.EN_US) -> str:
    return GROUP_TYPE_LABELS[locale][group_type]


def export_headers(locale: Locale = Locale.EN_US) -> List[str]:
    return list(EXPORT_HEADERS[locale])


def parse_member_ids(raw: str, owner_id: str) -> List[str]:
    """Split a comma-joined member list and make sure the owner is in it.

    Tokens are trimmed; empty tokens (from trailing or doubled commas) and
    repeated ids are dropped, keeping the first occurrence.

    Args:
        raw: Comma-joined member ids, e.g. ``"u1, u2,u3,"``.
        owner_id: Owner id appended when not already listed.

    Returns:
        Ordered, unique member ids including the owner.
    """
    members: List[str] = []
    for token in (raw or "").split(","):
        user_id = token.strip()
        if user_id and user_id not in members:
            members.append(user_id)

    if owner_id not in members:
        members.append(owner_id)
    return members
