"""TeamService — team structure and membership."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from workforce.domain.errors import BusinessRuleViolation
from workforce.domain.ids import EmployeeId, TeamId
from workforce.domain.team import MAX_ALLOCATION, MemberRole, Team, TeamName, TeamType
from workforce.services.base import BaseService

if TYPE_CHECKING:
    from workforce.infrastructure.store import StoreTransaction
    from workforce.services.result import ServiceResult


def _members(team: Team) -> list[dict[str, Any]]:
    return [
        {
            "employee_id": str(m.employee_id),
            "role": str(m.role),
            "allocation": m.allocation,
            "assigned_at": m.assigned_at.isoformat(),
        }
        for m in team.members
    ]


class TeamService(BaseService):
    def create(
        self,
        *,
        name: str,
        team_type: str,
        description: str = "",
        parent_team_id: str | None = None,
        max_size: int | None = None,
    ) -> ServiceResult:
        """Create a team. ``max_size`` falls back to ``[team] default_max_size``."""
        default_max_size = self._store.settings.team.default_max_size

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            parent = None
            if parent_team_id is not None:
                parent_team = txn.teams.load(parent_team_id)
                if parent_team.is_disbanded:
                    msg = f"Parent team {parent_team.id} is disbanded"
                    raise BusinessRuleViolation(msg, rule="team.parent_active")
                parent = parent_team.team_id
            team = Team.create(
                txn.teams.next_identity(),
                TeamName(name),
                TeamType.parse(team_type),
                description=description,
                parent_team_id=parent,
                max_size=max_size if max_size is not None else default_max_size,
                clock=self._clock,
            )
            txn.save(team)
            return team.summary()

        return self._run("create_team", work)

    def get(self, team_id: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            team = txn.teams.load(team_id)
            return {**team.summary(), "description": team.description, "members": _members(team)}

        return self._run("get_team", work)

    def rename(self, team_id: str, name: str, description: str | None = None) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            team = txn.teams.load(team_id)
            team.rename(TeamName(name), description, clock=self._clock)
            txn.save(team)
            return team.summary()

        return self._run("rename_team", work)

    def assign_member(
        self,
        team_id: str,
        employee_id: str,
        *,
        role: str = "Member",
        allocation: int = MAX_ALLOCATION,
    ) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            employee = self._require_employed(txn, employee_id)
            team = txn.teams.load(team_id)
            team.assign_member(
                employee.employee_id, MemberRole.parse(role), allocation, clock=self._clock
            )
            txn.save(team)
            return {**team.summary(), "members": _members(team)}

        return self._run("assign_member", work)

    def remove_member(self, team_id: str, employee_id: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            team = txn.teams.load(team_id)
            team.remove_member(EmployeeId(employee_id), clock=self._clock)
            txn.save(team)
            return {**team.summary(), "members": _members(team)}

        return self._run("remove_member", work)

    def transfer_member(
        self,
        employee_id: str,
        *,
        from_team_id: str,
        to_team_id: str,
        role: str = "Member",
        allocation: int = MAX_ALLOCATION,
    ) -> ServiceResult:
        """Move a member between teams in one transaction."""

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            employee = self._require_employed(txn, employee_id)
            source = txn.teams.load(from_team_id)
            target = txn.teams.load(to_team_id)
            source.remove_member(employee.employee_id, clock=self._clock)
            target.assign_member(
                employee.employee_id, MemberRole.parse(role), allocation, clock=self._clock
            )
            txn.save(source)
            txn.save(target)
            return {"employee_id": employee.id, "from": source.summary(), "to": target.summary()}

        return self._run("transfer_member", work)

    def change_team_lead(self, team_id: str, employee_id: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            team = txn.teams.load(team_id)
            team.change_team_lead(EmployeeId(employee_id), clock=self._clock)
            txn.save(team)
            return {**team.summary(), "members": _members(team)}

        return self._run("change_team_lead", work)

    def change_member_role(self, team_id: str, employee_id: str, role: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            team = txn.teams.load(team_id)
            team.change_member_role(
                EmployeeId(employee_id), MemberRole.parse(role), clock=self._clock
            )
            txn.save(team)
            return {**team.summary(), "members": _members(team)}

        return self._run("change_member_role", work)

    def change_member_allocation(
        self, team_id: str, employee_id: str, allocation: int
    ) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            team = txn.teams.load(team_id)
            team.change_member_allocation(EmployeeId(employee_id), allocation, clock=self._clock)
            txn.save(team)
            return {**team.summary(), "members": _members(team)}

        return self._run("change_member_allocation", work)

    def disband(self, team_id: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            team = txn.teams.load(team_id)
            team.disband(clock=self._clock)
            txn.save(team)
            return team.summary()

        return self._run("disband_team", work)

    def remove_from_all_teams(self, employee_id: str) -> ServiceResult:
        """Drop *employee_id* from every team. Idempotent."""

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            member = EmployeeId(employee_id)
            removed: list[str] = []
            for team_id in txn.teams.team_ids_for(member):
                team = txn.teams.load(TeamId(team_id))
                team.remove_member(member, clock=self._clock)
                txn.save(team)
                removed.append(team.id)
            return {"employee_id": employee_id, "team_ids": removed}

        return self._run("remove_from_all_teams", work)
