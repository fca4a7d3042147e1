"""Employee aggregate and its value objects.

Closed catalogs (positions, locations, weekdays) are StrEnums with a
``parse`` constructor so unknown values are rejected at the boundary.
The remote-work policy is a tagged union: ``FullRemote``, ``Hybrid``
(carrying a non-empty weekday set) or ``OfficeOnly``.

INVARIANT: Once an employee is Terminated, every mutator except
:meth:`Employee.reinstate` raises :class:`CannotModifyTerminatedEmployee`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from workforce.domain.errors import (
    BusinessRuleViolation,
    CannotModifyTerminatedEmployee,
    InvalidTransition,
    InvariantViolation,
)
from workforce.domain.events import DomainEvent, EventRecorder
from workforce.domain.ids import EmployeeId
from workforce.domain.lifecycle import (
    EMPLOYMENT_TRANSITIONS,
    EmploymentStatus,
    is_valid_transition,
)
from workforce.domain.values import Email, Money, PhoneNumber

if TYPE_CHECKING:
    from workforce.domain.clock import Clock

MINIMUM_ANNUAL_SALARY = Decimal(30000)
MINIMUM_HIRE_AGE = 18

E = TypeVar("E", bound=StrEnum)


def _parse_enum(enum_cls: type[E], raw: object, rule: str) -> E:
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).strip())
    except ValueError as exc:
        msg = f"Invalid {enum_cls.__name__}: {raw!r}"
        raise InvariantViolation(msg, rule=rule) from exc


# ---------------------------------------------------------------------------
# Position catalog
# ---------------------------------------------------------------------------


class Department(StrEnum):
    ENGINEERING = "Engineering"
    QA = "QA"
    DEVOPS = "DevOps"
    DESIGN = "Design"
    PRODUCT = "Product"
    MANAGEMENT = "Management"


class SeniorityLevel(StrEnum):
    JUNIOR = "Junior"
    MID = "Mid"
    SENIOR = "Senior"
    LEAD = "Lead"
    PRINCIPAL = "Principal"
    MANAGEMENT = "Management"


class Position(StrEnum):
    """Job title drawn from the closed catalog."""

    JUNIOR_DEVELOPER = "Junior Developer"
    DEVELOPER = "Developer"
    SENIOR_DEVELOPER = "Senior Developer"
    LEAD_DEVELOPER = "Lead Developer"
    PRINCIPAL_DEVELOPER = "Principal Developer"
    STAFF_ENGINEER = "Staff Engineer"
    JUNIOR_QA_ENGINEER = "Junior QA Engineer"
    QA_ENGINEER = "QA Engineer"
    SENIOR_QA_ENGINEER = "Senior QA Engineer"
    QA_LEAD = "QA Lead"
    JUNIOR_DEVOPS_ENGINEER = "Junior DevOps Engineer"
    DEVOPS_ENGINEER = "DevOps Engineer"
    SENIOR_DEVOPS_ENGINEER = "Senior DevOps Engineer"
    DEVOPS_LEAD = "DevOps Lead"
    JUNIOR_DESIGNER = "Junior Designer"
    DESIGNER = "Designer"
    SENIOR_DESIGNER = "Senior Designer"
    DESIGN_LEAD = "Design Lead"
    PRODUCT_MANAGER = "Product Manager"
    SENIOR_PRODUCT_MANAGER = "Senior Product Manager"
    ENGINEERING_MANAGER = "Engineering Manager"
    SENIOR_ENGINEERING_MANAGER = "Senior Engineering Manager"
    DIRECTOR_OF_ENGINEERING = "Director of Engineering"
    VP_OF_ENGINEERING = "VP of Engineering"
    CTO = "CTO"

    @classmethod
    def parse(cls, raw: object) -> Position:
        return _parse_enum(cls, raw, "position.catalog")

    @property
    def department(self) -> Department:
        return _POSITION_CATALOG[self][0]

    @property
    def level(self) -> SeniorityLevel:
        return _POSITION_CATALOG[self][1]

    @property
    def is_managerial(self) -> bool:
        return self.level is SeniorityLevel.MANAGEMENT


_D, _L = Department, SeniorityLevel
_POSITION_CATALOG: dict[Position, tuple[Department, SeniorityLevel]] = {
    Position.JUNIOR_DEVELOPER: (_D.ENGINEERING, _L.JUNIOR),
    Position.DEVELOPER: (_D.ENGINEERING, _L.MID),
    Position.SENIOR_DEVELOPER: (_D.ENGINEERING, _L.SENIOR),
    Position.LEAD_DEVELOPER: (_D.ENGINEERING, _L.LEAD),
    Position.PRINCIPAL_DEVELOPER: (_D.ENGINEERING, _L.PRINCIPAL),
    Position.STAFF_ENGINEER: (_D.ENGINEERING, _L.PRINCIPAL),
    Position.JUNIOR_QA_ENGINEER: (_D.QA, _L.JUNIOR),
    Position.QA_ENGINEER: (_D.QA, _L.MID),
    Position.SENIOR_QA_ENGINEER: (_D.QA, _L.SENIOR),
    Position.QA_LEAD: (_D.QA, _L.LEAD),
    Position.JUNIOR_DEVOPS_ENGINEER: (_D.DEVOPS, _L.JUNIOR),
    Position.DEVOPS_ENGINEER: (_D.DEVOPS, _L.MID),
    Position.SENIOR_DEVOPS_ENGINEER: (_D.DEVOPS, _L.SENIOR),
    Position.DEVOPS_LEAD: (_D.DEVOPS, _L.LEAD),
    Position.JUNIOR_DESIGNER: (_D.DESIGN, _L.JUNIOR),
    Position.DESIGNER: (_D.DESIGN, _L.MID),
    Position.SENIOR_DESIGNER: (_D.DESIGN, _L.SENIOR),
    Position.DESIGN_LEAD: (_D.DESIGN, _L.LEAD),
    Position.PRODUCT_MANAGER: (_D.PRODUCT, _L.MANAGEMENT),
    Position.SENIOR_PRODUCT_MANAGER: (_D.PRODUCT, _L.MANAGEMENT),
    Position.ENGINEERING_MANAGER: (_D.MANAGEMENT, _L.MANAGEMENT),
    Position.SENIOR_ENGINEERING_MANAGER: (_D.MANAGEMENT, _L.MANAGEMENT),
    Position.DIRECTOR_OF_ENGINEERING: (_D.MANAGEMENT, _L.MANAGEMENT),
    Position.VP_OF_ENGINEERING: (_D.MANAGEMENT, _L.MANAGEMENT),
    Position.CTO: (_D.MANAGEMENT, _L.MANAGEMENT),
}


# ---------------------------------------------------------------------------
# Compensation
# ---------------------------------------------------------------------------


class PayFrequency(StrEnum):
    ANNUAL = "Annual"
    MONTHLY = "Monthly"
    BIWEEKLY = "Biweekly"


@dataclass(frozen=True)
class Salary:
    """Annual salary with a declared pay frequency.

    INVARIANT: ``annual >= MINIMUM_ANNUAL_SALARY``.
    """

    annual: Money
    frequency: PayFrequency = PayFrequency.ANNUAL

    def __post_init__(self) -> None:
        annual = self.annual if isinstance(self.annual, Money) else Money(self.annual)
        if annual.amount < MINIMUM_ANNUAL_SALARY:
            msg = f"Salary {annual} is below the minimum of {MINIMUM_ANNUAL_SALARY:,}"
            raise InvariantViolation(msg, rule="salary.minimum")
        object.__setattr__(self, "annual", annual)
        object.__setattr__(
            self, "frequency", _parse_enum(PayFrequency, self.frequency, "salary.frequency")
        )

    @classmethod
    def of(
        cls,
        amount: object,
        currency: str = "USD",
        frequency: PayFrequency | str = PayFrequency.ANNUAL,
    ) -> Salary:
        return cls(Money(amount, currency), frequency)  # type: ignore[arg-type]

    @property
    def amount(self) -> Decimal:
        return self.annual.amount

    @property
    def currency(self) -> str:
        return self.annual.currency

    @property
    def monthly_amount(self) -> Money:
        return self.annual.divide(12)

    @property
    def biweekly_amount(self) -> Money:
        return self.annual.divide(26)

    def can_increase_to(self, other: Salary) -> bool:
        """True when *other* is not a decrease."""
        return not other.annual.is_less_than(self.annual)

    def __str__(self) -> str:
        return str(self.annual)


# ---------------------------------------------------------------------------
# Location and remote work
# ---------------------------------------------------------------------------


class WorkLocation(StrEnum):
    SAN_FRANCISCO_HQ = "San Francisco HQ"
    NEW_YORK_OFFICE = "New York Office"
    AUSTIN_OFFICE = "Austin Office"
    LONDON_OFFICE = "London Office"
    REMOTE = "Remote"
    HYBRID = "Hybrid"

    @classmethod
    def parse(cls, raw: object) -> WorkLocation:
        return _parse_enum(cls, raw, "location.catalog")

    @property
    def is_remote(self) -> bool:
        return self is WorkLocation.REMOTE

    @property
    def is_hybrid(self) -> bool:
        return self is WorkLocation.HYBRID

    @property
    def is_office(self) -> bool:
        return not (self.is_remote or self.is_hybrid)


class Weekday(StrEnum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"

    @classmethod
    def parse(cls, raw: object) -> Weekday:
        return _parse_enum(cls, raw, "remote_work.weekday")


_WEEKDAY_ORDER = {day: idx for idx, day in enumerate(Weekday)}


@dataclass(frozen=True)
class FullRemote:
    kind: ClassVar[str] = "FullRemote"

    @property
    def remote_days(self) -> frozenset[Weekday]:
        return frozenset(Weekday)


@dataclass(frozen=True)
class Hybrid:
    """Remote on a subset of weekdays.

    INVARIANT: at least one remote day.
    """

    remote_days: frozenset[Weekday]
    kind: ClassVar[str] = "Hybrid"

    def __post_init__(self) -> None:
        days = frozenset(Weekday.parse(d) for d in self.remote_days)
        if not days:
            msg = "Hybrid remote work requires at least one remote day"
            raise InvariantViolation(msg, rule="remote_work.hybrid_days")
        object.__setattr__(self, "remote_days", days)


@dataclass(frozen=True)
class OfficeOnly:
    kind: ClassVar[str] = "OfficeOnly"

    @property
    def remote_days(self) -> frozenset[Weekday]:
        return frozenset()


RemoteWorkPolicy = FullRemote | Hybrid | OfficeOnly


def parse_remote_work_policy(kind: str, days: Iterable[str] = ()) -> RemoteWorkPolicy:
    """Build a policy variant from its type name and (for Hybrid) its days."""
    if kind == FullRemote.kind:
        return FullRemote()
    if kind == Hybrid.kind:
        return Hybrid(frozenset(Weekday.parse(d) for d in days))
    if kind == OfficeOnly.kind:
        return OfficeOnly()
    msg = f"Invalid remote work policy type: {kind!r}"
    raise InvariantViolation(msg, rule="remote_work.type")


def sorted_days(days: Iterable[Weekday]) -> list[str]:
    """Weekdays in calendar order, as plain strings."""
    return [str(d) for d in sorted(days, key=_WEEKDAY_ORDER.__getitem__)]


# ---------------------------------------------------------------------------
# Personal info
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PersonalInfo:
    first_name: str
    last_name: str
    email: Email
    phone: PhoneNumber | None = None
    date_of_birth: date | None = None
    middle_name: str | None = None

    def __post_init__(self) -> None:
        first = str(self.first_name).strip()
        last = str(self.last_name).strip()
        if not first:
            msg = "First name is required"
            raise InvariantViolation(msg, rule="personal_info.first_name")
        if not last:
            msg = "Last name is required"
            raise InvariantViolation(msg, rule="personal_info.last_name")
        object.__setattr__(self, "first_name", first)
        object.__setattr__(self, "last_name", last)
        object.__setattr__(self, "middle_name", (self.middle_name or "").strip() or None)
        if not isinstance(self.email, Email):
            object.__setattr__(self, "email", Email(self.email))
        if self.phone is not None and not isinstance(self.phone, PhoneNumber):
            object.__setattr__(self, "phone", PhoneNumber(self.phone))

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p)

    def age_on(self, day: date) -> int | None:
        """Completed years of age on *day*, or None without a birth date."""
        dob = self.date_of_birth
        if dob is None:
            return None
        before_birthday = (day.month, day.day) < (dob.month, dob.day)
        return day.year - dob.year - int(before_birthday)


# ---------------------------------------------------------------------------
# Termination and history records
# ---------------------------------------------------------------------------


class TerminationType(StrEnum):
    VOLUNTARY = "Voluntary"
    INVOLUNTARY = "Involuntary"
    RETIREMENT = "Retirement"
    END_OF_CONTRACT = "EndOfContract"

    @classmethod
    def parse(cls, raw: object) -> TerminationType:
        return _parse_enum(cls, raw, "termination.type")


@dataclass(frozen=True)
class TerminationDetails:
    termination_date: date
    last_working_day: date
    termination_type: TerminationType
    reason: str


@dataclass(frozen=True)
class PositionChange:
    """One entry in the append-only position history."""

    previous_position: Position
    new_position: Position
    previous_salary: Salary
    new_salary: Salary
    effective_date: date
    reason: str


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class EmployeeHired(DomainEvent):
    event_type: ClassVar[str] = "employee.hired"

    full_name: str
    email: str
    position: str
    department: str
    salary: Decimal
    currency: str
    location: str
    hire_date: date


class EmployeePersonalInfoUpdated(DomainEvent):
    event_type: ClassVar[str] = "employee.personal_info_updated"

    full_name: str
    email: str


class EmployeePositionChanged(DomainEvent):
    event_type: ClassVar[str] = "employee.position_changed"

    previous_position: str
    new_position: str
    previous_salary: Decimal
    new_salary: Decimal
    effective_date: date
    reason: str


class EmployeeLocationChanged(DomainEvent):
    event_type: ClassVar[str] = "employee.location_changed"

    previous_location: str
    new_location: str
    effective_date: date
    reason: str


class EmployeeRemoteWorkConfigured(DomainEvent):
    event_type: ClassVar[str] = "employee.remote_work_configured"

    policy_type: str | None
    remote_days: list[str]


class EmployeeStatusChanged(DomainEvent):
    event_type: ClassVar[str] = "employee.status_changed"

    previous_status: str
    new_status: str


class EmployeeTerminated(DomainEvent):
    event_type: ClassVar[str] = "employee.terminated"

    termination_date: date
    last_working_day: date
    termination_type: str
    reason: str


class EmployeeReinstated(DomainEvent):
    event_type: ClassVar[str] = "employee.reinstated"

    reinstatement_date: date
    reason: str


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


class Employee:
    """Employee aggregate root.

    Construct through :meth:`hire`. The plain constructor rebuilds an
    employee from persisted state and records no events.

    Every mutator validates all of its preconditions before touching any
    attribute, so a failed call leaves the aggregate unchanged.
    """

    def __init__(
        self,
        *,
        employee_id: EmployeeId,
        personal_info: PersonalInfo,
        position: Position,
        salary: Salary,
        location: WorkLocation,
        hire_date: date,
        status: EmploymentStatus = EmploymentStatus.ACTIVE,
        remote_work_policy: RemoteWorkPolicy | None = None,
        termination: TerminationDetails | None = None,
        position_history: Iterable[PositionChange] = (),
        version: int = 0,
    ) -> None:
        self._id = employee_id
        self._personal_info = personal_info
        self._position = position
        self._salary = salary
        self._location = location
        self._hire_date = hire_date
        self._status = status
        self._remote_work_policy = remote_work_policy
        self._termination = termination
        self._position_history = list(position_history)
        self.version = version
        self._events = EventRecorder()

    # --- Factory ---

    @classmethod
    def hire(
        cls,
        employee_id: EmployeeId,
        personal_info: PersonalInfo,
        position: Position,
        salary: Salary,
        location: WorkLocation,
        hire_date: date,
        *,
        clock: Clock,
    ) -> Employee:
        """Create an Active employee. Emits ``employee.hired``."""
        if hire_date > clock.today():
            msg = f"Hire date {hire_date} cannot be in the future"
            raise InvariantViolation(msg, rule="employee.hire_date_not_future")
        _check_minimum_age(personal_info, hire_date)

        employee = cls(
            employee_id=employee_id,
            personal_info=personal_info,
            position=position,
            salary=salary,
            location=location,
            hire_date=hire_date,
        )
        employee._events.record(
            EmployeeHired(
                aggregate_id=str(employee_id),
                occurred_at=clock.now(),
                full_name=personal_info.full_name,
                email=str(personal_info.email),
                position=str(position),
                department=str(position.department),
                salary=salary.amount,
                currency=salary.currency,
                location=str(location),
                hire_date=hire_date,
            )
        )
        return employee

    # --- Mutators ---

    def update_personal_info(self, info: PersonalInfo, *, clock: Clock) -> None:
        self._ensure_not_terminated()
        _check_minimum_age(info, self._hire_date)
        self._personal_info = info
        self._events.record(
            EmployeePersonalInfoUpdated(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                full_name=info.full_name,
                email=str(info.email),
            )
        )

    def change_position(
        self,
        new_position: Position,
        new_salary: Salary,
        effective_date: date,
        reason: str,
        *,
        clock: Clock,
    ) -> None:
        """Move to a new position. Salary may stay level or rise, never fall."""
        self._ensure_not_terminated()
        if effective_date < clock.today():
            msg = f"Effective date {effective_date} cannot be in the past"
            raise InvariantViolation(msg, rule="position.effective_date_not_past")
        if new_salary.currency != self._salary.currency:
            msg = (
                f"Salary currency cannot change from {self._salary.currency} "
                f"to {new_salary.currency}"
            )
            raise InvariantViolation(msg, rule="money.same_currency")
        if not self._salary.can_increase_to(new_salary):
            msg = f"Salary cannot decrease from {self._salary} to {new_salary}"
            raise BusinessRuleViolation(
                msg,
                rule="salary.non_decreasing",
                detail={
                    "current_salary": str(self._salary.amount),
                    "new_salary": str(new_salary.amount),
                },
            )

        change = PositionChange(
            previous_position=self._position,
            new_position=new_position,
            previous_salary=self._salary,
            new_salary=new_salary,
            effective_date=effective_date,
            reason=reason,
        )
        self._position = new_position
        self._salary = new_salary
        self._position_history.append(change)
        self._events.record(
            EmployeePositionChanged(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                previous_position=str(change.previous_position),
                new_position=str(new_position),
                previous_salary=change.previous_salary.amount,
                new_salary=new_salary.amount,
                effective_date=effective_date,
                reason=reason,
            )
        )

    def change_location(
        self,
        new_location: WorkLocation,
        effective_date: date,
        reason: str = "",
        *,
        clock: Clock,
    ) -> None:
        self._ensure_not_terminated()
        previous = self._location
        self._location = new_location
        self._events.record(
            EmployeeLocationChanged(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                previous_location=str(previous),
                new_location=str(new_location),
                effective_date=effective_date,
                reason=reason,
            )
        )

    def configure_remote_work(self, policy: RemoteWorkPolicy | None, *, clock: Clock) -> None:
        """Set or clear (``None``) the remote-work policy."""
        self._ensure_not_terminated()
        self._remote_work_policy = policy
        self._events.record(
            EmployeeRemoteWorkConfigured(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                policy_type=policy.kind if policy is not None else None,
                remote_days=sorted_days(policy.remote_days) if policy is not None else [],
            )
        )

    def place_on_leave(self, *, clock: Clock) -> None:
        self._change_status(EmploymentStatus.ON_LEAVE, clock)

    def return_from_leave(self, *, clock: Clock) -> None:
        self._change_status(EmploymentStatus.ACTIVE, clock)

    def terminate(
        self,
        termination_date: date,
        last_working_day: date,
        termination_type: TerminationType,
        reason: str,
        *,
        clock: Clock,
    ) -> None:
        self._ensure_not_terminated()
        if termination_date < clock.today():
            msg = f"Termination date {termination_date} cannot be in the past"
            raise InvariantViolation(msg, rule="termination.date_not_past")
        if last_working_day > termination_date:
            msg = "Last working day must be on or before the termination date"
            raise InvariantViolation(msg, rule="termination.last_working_day")

        self._status = EmploymentStatus.TERMINATED
        self._termination = TerminationDetails(
            termination_date=termination_date,
            last_working_day=last_working_day,
            termination_type=termination_type,
            reason=reason,
        )
        self._events.record(
            EmployeeTerminated(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                termination_date=termination_date,
                last_working_day=last_working_day,
                termination_type=str(termination_type),
                reason=reason,
            )
        )

    def reinstate(self, reinstatement_date: date, reason: str, *, clock: Clock) -> None:
        """Reverse a termination. Only legal from Terminated."""
        if self._status is not EmploymentStatus.TERMINATED:
            raise InvalidTransition(
                "employee",
                str(self._status),
                str(EmploymentStatus.ACTIVE),
                rule="employee.reinstate_requires_terminated",
            )
        if self._termination and reinstatement_date < self._termination.last_working_day:
            msg = "Reinstatement date cannot precede the last working day"
            raise InvariantViolation(msg, rule="reinstatement.date")

        self._status = EmploymentStatus.ACTIVE
        self._termination = None
        self._events.record(
            EmployeeReinstated(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                reinstatement_date=reinstatement_date,
                reason=reason,
            )
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
    def employee_id(self) -> EmployeeId:
        return self._id

    @property
    def personal_info(self) -> PersonalInfo:
        return self._personal_info

    @property
    def position(self) -> Position:
        return self._position

    @property
    def salary(self) -> Salary:
        return self._salary

    @property
    def location(self) -> WorkLocation:
        return self._location

    @property
    def remote_work_policy(self) -> RemoteWorkPolicy | None:
        return self._remote_work_policy

    @property
    def hire_date(self) -> date:
        return self._hire_date

    @property
    def status(self) -> EmploymentStatus:
        return self._status

    @property
    def termination(self) -> TerminationDetails | None:
        return self._termination

    @property
    def position_history(self) -> tuple[PositionChange, ...]:
        return tuple(self._position_history)

    @property
    def is_active(self) -> bool:
        return self._status is EmploymentStatus.ACTIVE

    @property
    def is_terminated(self) -> bool:
        return self._status is EmploymentStatus.TERMINATED

    def summary(self) -> dict[str, Any]:
        """Flat, JSON-safe view for service results."""
        policy = self._remote_work_policy
        return {
            "employee_id": self.id,
            "full_name": self._personal_info.full_name,
            "email": str(self._personal_info.email),
            "position": str(self._position),
            "department": str(self._position.department),
            "level": str(self._position.level),
            "salary": str(self._salary.amount),
            "currency": self._salary.currency,
            "location": str(self._location),
            "remote_work_policy": policy.kind if policy is not None else None,
            "status": str(self._status),
            "hire_date": self._hire_date.isoformat(),
        }

    # --- Internal ---

    def _ensure_not_terminated(self) -> None:
        if self._status is EmploymentStatus.TERMINATED:
            raise CannotModifyTerminatedEmployee(self.id)

    def _change_status(self, target: EmploymentStatus, clock: Clock) -> None:
        self._ensure_not_terminated()
        if not is_valid_transition(str(self._status), str(target), EMPLOYMENT_TRANSITIONS):
            raise InvalidTransition("employee", str(self._status), str(target))
        previous = self._status
        self._status = target
        self._events.record(
            EmployeeStatusChanged(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                previous_status=str(previous),
                new_status=str(target),
            )
        )


def _check_minimum_age(info: PersonalInfo, hire_date: date) -> None:
    age = info.age_on(hire_date)
    if age is not None and age < MINIMUM_HIRE_AGE:
        msg = f"Employee must be at least {MINIMUM_HIRE_AGE} years old at hire"
        raise InvariantViolation(msg, rule="employee.minimum_age", detail={"age": age})
