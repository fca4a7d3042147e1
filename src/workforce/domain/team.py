"""Team aggregate and the TeamMember entity.

INVARIANT: No duplicate membership, at most one TeamLead, member count
within ``max_size`` when set, and no mutation once disbanded.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

from workforce.domain.errors import (
    BusinessRuleViolation,
    InvariantViolation,
    TeamSizeLimitExceeded,
)
from workforce.domain.events import DomainEvent, EventRecorder
from workforce.domain.ids import EmployeeId, TeamId

if TYPE_CHECKING:
    from workforce.domain.clock import Clock

MAX_TEAM_NAME_LENGTH = 100
MIN_ALLOCATION = 1
MAX_ALLOCATION = 100


class TeamType(StrEnum):
    DEPARTMENT = "Department"
    PROJECT = "Project"
    CROSS_FUNCTIONAL = "CrossFunctional"
    SQUAD = "Squad"

    @classmethod
    def parse(cls, raw: object) -> TeamType:
        try:
            return cls(str(raw).strip())
        except ValueError as exc:
            msg = f"Invalid team type: {raw!r}"
            raise InvariantViolation(msg, rule="team.type") from exc


class MemberRole(StrEnum):
    MEMBER = "Member"
    TEAM_LEAD = "TeamLead"
    TECH_LEAD = "TechLead"

    @classmethod
    def parse(cls, raw: object) -> MemberRole:
        try:
            return cls(str(raw).strip())
        except ValueError as exc:
            msg = f"Invalid member role: {raw!r}"
            raise InvariantViolation(msg, rule="team.member_role") from exc


@dataclass(frozen=True)
class TeamName:
    value: str

    def __post_init__(self) -> None:
        value = str(self.value).strip()
        if not value:
            msg = "Team name cannot be empty"
            raise InvariantViolation(msg, rule="team.name_required")
        if len(value) > MAX_TEAM_NAME_LENGTH:
            msg = f"Team name cannot exceed {MAX_TEAM_NAME_LENGTH} characters"
            raise InvariantViolation(msg, rule="team.name_length")
        object.__setattr__(self, "value", value)

    def __str__(self) -> str:
        return self.value


def _check_allocation(allocation: int) -> int:
    if isinstance(allocation, bool) or not isinstance(allocation, int):
        msg = f"Allocation must be a whole percentage: {allocation!r}"
        raise InvariantViolation(msg, rule="team.allocation")
    if not MIN_ALLOCATION <= allocation <= MAX_ALLOCATION:
        msg = f"Allocation must be between {MIN_ALLOCATION} and {MAX_ALLOCATION}: {allocation}"
        raise InvariantViolation(msg, rule="team.allocation")
    return allocation


@dataclass(frozen=True)
class TeamMember:
    """Membership of one employee in one team. Identity is ``employee_id``."""

    employee_id: EmployeeId
    role: MemberRole
    allocation: int
    assigned_at: datetime

    def __post_init__(self) -> None:
        _check_allocation(self.allocation)

    @property
    def is_lead(self) -> bool:
        return self.role is MemberRole.TEAM_LEAD

    def change_role(self, role: MemberRole) -> TeamMember:
        return replace(self, role=role)

    def change_allocation(self, allocation: int) -> TeamMember:
        return replace(self, allocation=_check_allocation(allocation))


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class TeamCreated(DomainEvent):
    event_type: ClassVar[str] = "team.created"

    name: str
    team_type: str
    parent_team_id: str | None
    max_size: int | None


class TeamUpdated(DomainEvent):
    event_type: ClassVar[str] = "team.updated"

    name: str
    description: str


class TeamEmployeeAssigned(DomainEvent):
    event_type: ClassVar[str] = "team.employee_assigned"

    employee_id: str
    role: str
    allocation: int


class TeamEmployeeRemoved(DomainEvent):
    event_type: ClassVar[str] = "team.employee_removed"

    employee_id: str
    role: str


class TeamMemberUpdated(DomainEvent):
    event_type: ClassVar[str] = "team.member_updated"

    employee_id: str
    role: str
    allocation: int


class TeamLeadChanged(DomainEvent):
    event_type: ClassVar[str] = "team.lead_changed"

    previous_lead_id: str | None
    new_lead_id: str


class TeamDisbanded(DomainEvent):
    event_type: ClassVar[str] = "team.disbanded"

    name: str


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


class Team:
    """Team aggregate root."""

    def __init__(
        self,
        *,
        team_id: TeamId,
        name: TeamName,
        team_type: TeamType,
        description: str = "",
        parent_team_id: TeamId | None = None,
        max_size: int | None = None,
        members: Iterable[TeamMember] = (),
        is_disbanded: bool = False,
        version: int = 0,
    ) -> None:
        self._id = team_id
        self._name = name
        self._type = team_type
        self._description = description
        self._parent_id = parent_team_id
        self._max_size = max_size
        self._members = list(members)
        self._disbanded = is_disbanded
        self.version = version
        self._events = EventRecorder()

    @classmethod
    def create(
        cls,
        team_id: TeamId,
        name: TeamName,
        team_type: TeamType,
        *,
        description: str = "",
        parent_team_id: TeamId | None = None,
        max_size: int | None = None,
        clock: Clock,
    ) -> Team:
        if max_size is not None and max_size < 1:
            msg = f"Team max size must be positive: {max_size}"
            raise InvariantViolation(msg, rule="team.max_size_positive")
        if parent_team_id is not None and parent_team_id == team_id:
            msg = "A team cannot be its own parent"
            raise InvariantViolation(msg, rule="team.parent")

        team = cls(
            team_id=team_id,
            name=name,
            team_type=team_type,
            description=description.strip(),
            parent_team_id=parent_team_id,
            max_size=max_size,
        )
        team._events.record(
            TeamCreated(
                aggregate_id=team.id,
                occurred_at=clock.now(),
                name=str(name),
                team_type=str(team_type),
                parent_team_id=str(parent_team_id) if parent_team_id else None,
                max_size=max_size,
            )
        )
        return team

    # --- Mutators ---

    def rename(self, name: TeamName, description: str | None = None, *, clock: Clock) -> None:
        self._ensure_not_disbanded()
        self._name = name
        if description is not None:
            self._description = description.strip()
        self._events.record(
            TeamUpdated(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                name=str(self._name),
                description=self._description,
            )
        )

    def assign_member(
        self,
        employee_id: EmployeeId,
        role: MemberRole = MemberRole.MEMBER,
        allocation: int = MAX_ALLOCATION,
        *,
        clock: Clock,
    ) -> TeamMember:
        """Add *employee_id* to the team.

        Checks, in order: not disbanded, size cap, no duplicate, single lead.
        """
        self._ensure_not_disbanded()
        if self._max_size is not None and len(self._members) >= self._max_size:
            raise TeamSizeLimitExceeded(self.id, self._max_size)
        if self.has_member(employee_id):
            msg = f"Employee {employee_id} is already a member of team {self.id}"
            raise InvariantViolation(msg, rule="team.duplicate_member")
        if role is MemberRole.TEAM_LEAD and self.lead is not None:
            msg = f"Team {self.id} already has a team lead"
            raise BusinessRuleViolation(msg, rule="team.single_lead")

        member = TeamMember(
            employee_id=employee_id,
            role=role,
            allocation=allocation,
            assigned_at=clock.now(),
        )
        self._members.append(member)
        self._events.record(
            TeamEmployeeAssigned(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                employee_id=str(employee_id),
                role=str(role),
                allocation=allocation,
            )
        )
        return member

    def remove_member(self, employee_id: EmployeeId, *, clock: Clock) -> None:
        self._ensure_not_disbanded()
        member = self._find(employee_id)
        self._members = [m for m in self._members if m.employee_id != employee_id]
        self._events.record(
            TeamEmployeeRemoved(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                employee_id=str(employee_id),
                role=str(member.role),
            )
        )

    def change_team_lead(self, new_lead_id: EmployeeId, *, clock: Clock) -> None:
        """Promote a member to TeamLead, demoting any existing lead to Member.

        Demotion and promotion are separate passes over a working copy, so
        the member list is never observed with two leads.
        """
        self._ensure_not_disbanded()
        self._find(new_lead_id)
        previous = self.lead

        demoted = [
            m.change_role(MemberRole.MEMBER) if m.is_lead else m for m in self._members
        ]
        promoted = [
            m.change_role(MemberRole.TEAM_LEAD) if m.employee_id == new_lead_id else m
            for m in demoted
        ]
        self._members = promoted
        self._events.record(
            TeamLeadChanged(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                previous_lead_id=str(previous.employee_id) if previous else None,
                new_lead_id=str(new_lead_id),
            )
        )

    def change_member_role(
        self, employee_id: EmployeeId, role: MemberRole, *, clock: Clock
    ) -> None:
        self._ensure_not_disbanded()
        member = self._find(employee_id)
        lead = self.lead
        if role is MemberRole.TEAM_LEAD and lead is not None and lead.employee_id != employee_id:
            msg = f"Team {self.id} already has a team lead; use change_team_lead"
            raise BusinessRuleViolation(msg, rule="team.single_lead")
        self._replace(member.change_role(role), clock)

    def change_member_allocation(
        self, employee_id: EmployeeId, allocation: int, *, clock: Clock
    ) -> None:
        self._ensure_not_disbanded()
        member = self._find(employee_id)
        self._replace(member.change_allocation(allocation), clock)

    def disband(self, *, clock: Clock) -> None:
        self._ensure_not_disbanded()
        if self._members:
            msg = f"Cannot disband team {self.id} with {len(self._members)} member(s)"
            raise BusinessRuleViolation(msg, rule="team.disband_requires_empty")
        self._disbanded = True
        self._events.record(
            TeamDisbanded(aggregate_id=self.id, occurred_at=clock.now(), name=str(self._name))
        )

    # --- Event source ---

    def release_events(self) -> list[DomainEvent]:
        return self._events.release()

    def recorded_events(self) -> tuple[DomainEvent, ...]:
        return self._events.peek()

    # --- Accessors ---

    @property
    def id(self) -> str:
        return str(self._id)

    @property
    def team_id(self) -> TeamId:
        return self._id

    @property
    def name(self) -> TeamName:
        return self._name

    @property
    def team_type(self) -> TeamType:
        return self._type

    @property
    def description(self) -> str:
        return self._description

    @property
    def parent_team_id(self) -> TeamId | None:
        return self._parent_id

    @property
    def max_size(self) -> int | None:
        return self._max_size

    @property
    def is_disbanded(self) -> bool:
        return self._disbanded

    @property
    def members(self) -> tuple[TeamMember, ...]:
        return tuple(self._members)

    @property
    def member_count(self) -> int:
        return len(self._members)

    @property
    def lead(self) -> TeamMember | None:
        return next((m for m in self._members if m.is_lead), None)

    def has_member(self, employee_id: EmployeeId) -> bool:
        return any(m.employee_id == employee_id for m in self._members)

    def summary(self) -> dict[str, Any]:
        lead = self.lead
        return {
            "team_id": self.id,
            "name": str(self._name),
            "type": str(self._type),
            "parent_team_id": str(self._parent_id) if self._parent_id else None,
            "max_size": self._max_size,
            "member_count": len(self._members),
            "lead": str(lead.employee_id) if lead else None,
            "is_disbanded": self._disbanded,
        }

    # --- Internal ---

    def _ensure_not_disbanded(self) -> None:
        if self._disbanded:
            msg = f"Team {self.id} is disbanded"
            raise BusinessRuleViolation(msg, rule="team.not_disbanded")

    def _find(self, employee_id: EmployeeId) -> TeamMember:
        for member in self._members:
            if member.employee_id == employee_id:
                return member
        msg = f"Employee {employee_id} is not a member of team {self.id}"
        raise BusinessRuleViolation(msg, rule="team.not_a_member")

    def _replace(self, updated: TeamMember, clock: Clock) -> None:
        self._members = [
            updated if m.employee_id == updated.employee_id else m for m in self._members
        ]
        self._events.record(
            TeamMemberUpdated(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                employee_id=str(updated.employee_id),
                role=str(updated.role),
                allocation=updated.allocation,
            )
        )
