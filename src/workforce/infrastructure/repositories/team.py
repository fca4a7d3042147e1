"""Team persistence. Membership rows are rewritten on every save."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select

from workforce.domain.ids import EmployeeId, TeamId
from workforce.domain.team import MemberRole, Team, TeamMember, TeamName, TeamType
from workforce.infrastructure.database.schema import team_members, teams
from workforce.infrastructure.database.sequences import next_business_key
from workforce.infrastructure.repositories.base import NotFoundError, save_versioned, to_datetime

if TYPE_CHECKING:
    from sqlalchemy import Connection, Row

    from workforce.domain.clock import Clock


class TeamRepository:
    def __init__(self, conn: Connection, clock: Clock) -> None:
        self._conn = conn
        self._clock = clock

    def next_identity(self) -> TeamId:
        return TeamId(next_business_key(self._conn, teams.c.team_id, "team"))

    def find(self, team_id: TeamId | str) -> Team | None:
        row = self._conn.execute(select(teams).where(teams.c.team_id == str(team_id))).first()
        return self._to_aggregate(row) if row is not None else None

    def load(self, team_id: TeamId | str) -> Team:
        team = self.find(team_id)
        if team is None:
            raise NotFoundError("team", team_id)
        return team

    def team_ids_for(self, employee_id: EmployeeId | str) -> list[str]:
        """Teams that currently list *employee_id* as a member."""
        rows = self._conn.execute(
            select(team_members.c.team_id)
            .where(team_members.c.employee_id == str(employee_id))
            .order_by(team_members.c.team_id)
        )
        return [row.team_id for row in rows]

    def save(self, team: Team) -> None:
        now = self._clock.now().isoformat()
        values: dict[str, Any] = {
            "team_id": team.id,
            "name": str(team.name),
            "description": team.description,
            "type": str(team.team_type),
            "parent_team_id": str(team.parent_team_id) if team.parent_team_id else None,
            "max_size": team.max_size,
            "is_disbanded": int(team.is_disbanded),
            "modified": now,
        }
        if team.version == 0:
            values["created"] = now
        team.version = save_versioned(
            self._conn,
            teams,
            teams.c.team_id == team.id,
            values,
            version=team.version,
            kind="team",
            key=team.id,
        )
        self._conn.execute(delete(team_members).where(team_members.c.team_id == team.id))
        for member in team.members:
            self._conn.execute(
                insert(team_members).values(
                    team_id=team.id,
                    employee_id=str(member.employee_id),
                    role=str(member.role),
                    allocation=member.allocation,
                    assigned_at=member.assigned_at.isoformat(),
                )
            )

    def _to_aggregate(self, row: Row[Any]) -> Team:
        members = [
            TeamMember(
                employee_id=EmployeeId(m.employee_id),
                role=MemberRole(m.role),
                allocation=m.allocation,
                assigned_at=to_datetime(m.assigned_at),  # type: ignore[arg-type]
            )
            for m in self._conn.execute(
                select(team_members)
                .where(team_members.c.team_id == row.team_id)
                .order_by(team_members.c.assigned_at, team_members.c.employee_id)
            )
        ]
        return Team(
            team_id=TeamId(row.team_id),
            name=TeamName(row.name),
            team_type=TeamType(row.type),
            description=row.description or "",
            parent_team_id=TeamId(row.parent_team_id) if row.parent_team_id else None,
            max_size=row.max_size,
            members=members,
            is_disbanded=bool(row.is_disbanded),
            version=row.version,
        )
