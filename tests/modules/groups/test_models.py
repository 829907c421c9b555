"""Unit tests for the group record model."""

import pytest
from freezegun import freeze_time

from tests.factories.groups import make_group
from ti_dding.modules.groups.domain import Group, GroupStatus, GroupType


@pytest.mark.unit
class TestGroupNew:
    def test_owner_inserted_and_duplicates_dropped(self):
        group = Group.new(
            name="ops", description="", owner_id="o", member_ids=["u1", "u1", "u2"]
        )
        assert group.member_ids == ["u1", "u2", "o"]
        assert group.member_count == 3
        assert group.status == GroupStatus.ACTIVE
        assert group.group_type == GroupType.INTERNAL
        assert group.id == ""

    def test_owner_not_duplicated(self):
        group = Group.new(name="ops", description="", owner_id="o", member_ids=["o"])
        assert group.member_ids == ["o"]

    @freeze_time("2025-01-01 10:00:00")
    def test_timestamps_set_to_now(self):
        group = Group.new(name="ops", description="", owner_id="o")
        assert group.created_at == group.updated_at
        assert group.created_at.strftime("%Y-%m-%d %H:%M:%S") == "2025-01-01 10:00:00"

    def test_member_count_synced_on_validation(self):
        group = Group.model_validate(
            {
                "name": "ops",
                "owner_id": "o",
                "member_ids": ["o", "u1"],
                "member_count": 9,
            }
        )
        assert group.member_count == 2

    def test_legacy_members_key(self):
        group = Group.model_validate(
            {"id": "c1", "name": "ops", "owner_id": "o", "members": ["o", "u1"]}
        )
        assert group.member_ids == ["o", "u1"]

    def test_loaded_record_is_normalized(self):
        group = Group.model_validate(
            {"name": "ops", "owner_id": "o", "member_ids": ["u1", "u1", "u2"]}
        )
        assert group.member_ids == ["u1", "u2", "o"]
        assert group.member_count == 3


@pytest.mark.unit
class TestGroupMutations:
    def test_add_member_is_idempotent(self):
        with freeze_time("2025-01-01 10:00:00") as frozen:
            group = make_group(member_ids=["owner1"])
            frozen.tick(60)

            assert group.add_member("u9") is True
            first_update = group.updated_at
            assert first_update > group.created_at

            frozen.tick(60)
            assert group.add_member("u9") is False
            assert group.updated_at == first_update
            assert group.member_ids == ["owner1", "u9"]
            assert group.member_count == 2

    def test_remove_member(self):
        group = make_group(member_ids=["owner1", "u1"])
        assert group.remove_member("u1") is True
        assert group.member_ids == ["owner1"]
        assert group.member_count == 1

    def test_owner_is_never_removed(self):
        group = make_group(member_ids=["owner1", "u1"])
        assert group.remove_member("owner1") is False
        assert "owner1" in group.member_ids

    def test_remove_non_member_is_noop(self):
        group = make_group(member_ids=["owner1"])
        assert group.remove_member("ghost") is False
        assert group.member_ids == ["owner1"]

    def test_mark_deleted(self):
        group = make_group()
        group.mark_deleted()
        assert group.is_deleted
        assert group.status == GroupStatus.DELETED

    def test_is_external(self):
        assert make_group(group_type=GroupType.EXTERNAL).is_external
        assert not make_group().is_external
