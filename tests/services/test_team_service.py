"""Tests for TeamService."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from tests.conftest import create_team, hire
from workforce.config.settings import WorkforceSettings
from workforce.domain.clock import FixedClock
from workforce.infrastructure.store import Store
from workforce.services.employee import EmployeeService
from workforce.services.team import TeamService


@pytest.fixture
def staff(store: Store) -> list[str]:
    return [
        hire(store, email=f"dev{n}@example.com", first_name=f"Dev{n}")["employee_id"]
        for n in range(3)
    ]


class TestCreate:
    def test_sequential_team_ids(self, store: Store) -> None:
        assert create_team(store)["team_id"] == "TEAM-0001"
        assert create_team(store, "Mobile")["team_id"] == "TEAM-0002"

    def test_parent_must_exist(self, store: Store) -> None:
        result = TeamService(store).create(
            name="Child", team_type="Squad", parent_team_id="TEAM-0042"
        )
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"

    def test_default_max_size_from_settings(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clock: FixedClock
    ) -> None:
        monkeypatch.delenv("WORKFORCE_CONFIG", raising=False)
        monkeypatch.setenv("WORKFORCE_TEAM__DEFAULT_MAX_SIZE", "4")
        settings = WorkforceSettings.from_cli(root=tmp_path, sync=True)
        store = Store(settings, clock=clock)
        try:
            assert create_team(store)["max_size"] == 4
            assert create_team(store, "Capped", max_size=2)["max_size"] == 2
        finally:
            store.close()


class TestMembership:
    def test_size_limit(self, store: Store, staff: list[str]) -> None:
        team_id = create_team(store, max_size=2)["team_id"]
        svc = TeamService(store)
        assert svc.assign_member(team_id, staff[0]).ok
        assert svc.assign_member(team_id, staff[1]).ok
        full = svc.assign_member(team_id, staff[2])
        assert full.error is not None
        assert full.error.code == "TEAM_SIZE_LIMIT"
        assert len(svc.get(team_id).data["members"]) == 2

    def test_single_lead_and_change_lead(self, store: Store, staff: list[str]) -> None:
        team_id = create_team(store)["team_id"]
        svc = TeamService(store)
        svc.assign_member(team_id, staff[0], role="TeamLead")
        second_lead = svc.assign_member(team_id, staff[1], role="TeamLead")
        assert second_lead.error is not None
        assert second_lead.error.detail["rule"] == "team.single_lead"

        svc.assign_member(team_id, staff[1])
        changed = svc.change_team_lead(team_id, staff[1])
        assert changed.data["lead"] == staff[1]
        roles = {m["employee_id"]: m["role"] for m in changed.data["members"]}
        assert roles == {staff[0]: "Member", staff[1]: "TeamLead"}

    def test_allocation_and_role_changes(self, store: Store, staff: list[str]) -> None:
        team_id = create_team(store)["team_id"]
        svc = TeamService(store)
        svc.assign_member(team_id, staff[0], allocation=50)
        updated = svc.change_member_allocation(team_id, staff[0], 80)
        assert updated.data["members"][0]["allocation"] == 80
        bad = svc.change_member_allocation(team_id, staff[0], 120)
        assert bad.error is not None
        assert bad.error.detail["rule"] == "team.allocation"
        role = svc.change_member_role(team_id, staff[0], "TechLead")
        assert role.data["members"][0]["role"] == "TechLead"

    def test_transfer_member(self, store: Store, staff: list[str]) -> None:
        source = create_team(store, "Source")["team_id"]
        target = create_team(store, "Target", max_size=1)["team_id"]
        svc = TeamService(store)
        svc.assign_member(source, staff[0])
        svc.assign_member(source, staff[1])

        moved = svc.transfer_member(staff[0], from_team_id=source, to_team_id=target)
        assert moved.ok
        assert moved.data["to"]["member_count"] == 1

        blocked = svc.transfer_member(staff[1], from_team_id=source, to_team_id=target)
        assert blocked.error is not None
        assert blocked.error.code == "TEAM_SIZE_LIMIT"
        members = [m["employee_id"] for m in svc.get(source).data["members"]]
        assert members == [staff[1]]

    def test_terminated_employee_cannot_join(self, store: Store, staff: list[str]) -> None:
        EmployeeService(store).terminate(
            staff[0],
            termination_date=date(2025, 3, 31),
            last_working_day=date(2025, 3, 31),
            termination_type="Voluntary",
            reason="",
        )
        result = TeamService(store).assign_member(create_team(store)["team_id"], staff[0])
        assert result.error is not None
        assert result.error.code == "EMPLOYEE_TERMINATED"

    def test_remove_from_all_teams_idempotent(self, store: Store, staff: list[str]) -> None:
        first = create_team(store, "One")["team_id"]
        second = create_team(store, "Two")["team_id"]
        svc = TeamService(store)
        svc.assign_member(first, staff[0])
        svc.assign_member(second, staff[0])
        removed = svc.remove_from_all_teams(staff[0])
        assert sorted(removed.data["team_ids"]) == [first, second]
        assert svc.remove_from_all_teams(staff[0]).data["team_ids"] == []


class TestDisband:
    def test_disband_requires_empty(self, store: Store, staff: list[str]) -> None:
        team_id = create_team(store)["team_id"]
        svc = TeamService(store)
        svc.assign_member(team_id, staff[0])
        assert svc.disband(team_id).error is not None
        svc.remove_member(team_id, staff[0])
        assert svc.disband(team_id).data["is_disbanded"] is True
        renamed = svc.rename(team_id, "Zombie")
        assert renamed.error is not None
        assert renamed.error.detail["rule"] == "team.not_disbanded"
