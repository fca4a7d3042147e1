"""Tests for the Employee aggregate."""

from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from workforce.domain.clock import FixedClock
from workforce.domain.employee import (
    Employee,
    EmployeeHired,
    EmployeePositionChanged,
    FullRemote,
    Hybrid,
    OfficeOnly,
    PersonalInfo,
    Position,
    Salary,
    TerminationType,
    Weekday,
    WorkLocation,
    parse_remote_work_policy,
    sorted_days,
)
from workforce.domain.errors import (
    BusinessRuleViolation,
    CannotModifyTerminatedEmployee,
    InvalidTransition,
    InvariantViolation,
)
from workforce.domain.ids import EmployeeId
from workforce.domain.lifecycle import EmploymentStatus


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 1, 10, 9, tzinfo=UTC))


def _info(**overrides: object) -> PersonalInfo:
    fields: dict[str, object] = {
        "first_name": "Grace",
        "last_name": "Hopper",
        "email": "grace@example.com",
    }
    fields.update(overrides)
    return PersonalInfo(**fields)  # type: ignore[arg-type]


def _hire(clock: FixedClock, **overrides: object) -> Employee:
    fields: dict[str, object] = {
        "employee_id": EmployeeId("EMP-2025-0001"),
        "personal_info": _info(),
        "position": Position.DEVELOPER,
        "salary": Salary.of(60000),
        "location": WorkLocation.NEW_YORK_OFFICE,
        "hire_date": date(2025, 1, 10),
    }
    fields.update(overrides)
    return Employee.hire(**fields, clock=clock)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


class TestSalary:
    def test_minimum_enforced(self) -> None:
        with pytest.raises(InvariantViolation) as exc:
            Salary.of(29999)
        assert exc.value.rule == "salary.minimum"

    def test_minimum_is_inclusive(self) -> None:
        assert Salary.of(30000).amount == Decimal(30000)

    def test_periodic_amounts(self) -> None:
        salary = Salary.of(52000)
        assert salary.biweekly_amount.amount == Decimal(2000)
        assert salary.monthly_amount.amount == Decimal("4333.33")

    def test_frequency_parsed(self) -> None:
        assert str(Salary.of(60000, frequency="Monthly").frequency) == "Monthly"

    def test_can_increase_to(self) -> None:
        assert Salary.of(60000).can_increase_to(Salary.of(60000))
        assert not Salary.of(60000).can_increase_to(Salary.of(50000))


class TestPosition:
    def test_catalog_metadata(self) -> None:
        assert Position.SENIOR_DEVELOPER.department == "Engineering"
        assert Position.SENIOR_DEVELOPER.level == "Senior"
        assert Position.CTO.is_managerial

    def test_unknown_rejected(self) -> None:
        with pytest.raises(InvariantViolation) as exc:
            Position.parse("Wizard")
        assert exc.value.rule == "position.catalog"


class TestRemoteWork:
    def test_hybrid_requires_days(self) -> None:
        with pytest.raises(InvariantViolation):
            Hybrid(frozenset())

    def test_parse_variants(self) -> None:
        assert isinstance(parse_remote_work_policy("FullRemote"), FullRemote)
        assert isinstance(parse_remote_work_policy("OfficeOnly"), OfficeOnly)
        hybrid = parse_remote_work_policy("Hybrid", ["Friday", "Monday"])
        assert sorted_days(hybrid.remote_days) == ["Monday", "Friday"]

    def test_unknown_kind(self) -> None:
        with pytest.raises(InvariantViolation):
            parse_remote_work_policy("Nomad")

    def test_full_remote_covers_weekdays(self) -> None:
        assert FullRemote().remote_days == frozenset(Weekday)


class TestPersonalInfo:
    def test_full_name_with_middle(self) -> None:
        assert _info(middle_name=" Brewster ").full_name == "Grace Brewster Hopper"

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(InvariantViolation):
            _info(first_name="  ")

    def test_age_on_before_birthday(self) -> None:
        info = _info(date_of_birth=date(2000, 6, 15))
        assert info.age_on(date(2025, 6, 14)) == 24
        assert info.age_on(date(2025, 6, 15)) == 25


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


class TestHire:
    def test_hire_emits_event(self, clock: FixedClock) -> None:
        emp = _hire(clock)
        assert emp.status is EmploymentStatus.ACTIVE
        events = emp.release_events()
        assert len(events) == 1
        assert isinstance(events[0], EmployeeHired)
        assert events[0].department == "Engineering"
        assert emp.release_events() == []

    def test_future_hire_date_rejected(self, clock: FixedClock) -> None:
        with pytest.raises(InvariantViolation) as exc:
            _hire(clock, hire_date=date(2025, 1, 11))
        assert exc.value.rule == "employee.hire_date_not_future"

    def test_underage_rejected(self, clock: FixedClock) -> None:
        with pytest.raises(InvariantViolation) as exc:
            _hire(clock, personal_info=_info(date_of_birth=date(2008, 1, 1)))
        assert exc.value.rule == "employee.minimum_age"


class TestChangePosition:
    def test_promotion_then_demotion(self, clock: FixedClock) -> None:
        emp = _hire(clock)
        emp.release_events()
        emp.change_position(
            Position.SENIOR_DEVELOPER, Salary.of(75000), date(2025, 6, 1), "Promotion", clock=clock
        )
        assert emp.position is Position.SENIOR_DEVELOPER
        assert emp.salary.amount == Decimal(75000)
        assert len(emp.position_history) == 1
        event = emp.release_events()[0]
        assert isinstance(event, EmployeePositionChanged)
        assert event.previous_salary == Decimal(60000)

        with pytest.raises(BusinessRuleViolation) as exc:
            emp.change_position(
                Position.DEVELOPER, Salary.of(50000), date(2025, 7, 1), "Demotion", clock=clock
            )
        assert exc.value.rule == "salary.non_decreasing"
        assert emp.position is Position.SENIOR_DEVELOPER
        assert emp.salary.amount == Decimal(75000)
        assert emp.recorded_events() == ()

    def test_past_effective_date_rejected(self, clock: FixedClock) -> None:
        emp = _hire(clock)
        with pytest.raises(InvariantViolation):
            emp.change_position(
                Position.SENIOR_DEVELOPER, Salary.of(75000), date(2025, 1, 9), "", clock=clock
            )

    def test_currency_change_rejected(self, clock: FixedClock) -> None:
        emp = _hire(clock)
        with pytest.raises(InvariantViolation) as exc:
            emp.change_position(
                Position.DEVELOPER, Salary.of(70000, "EUR"), date(2025, 2, 1), "", clock=clock
            )
        assert exc.value.rule == "money.same_currency"


class TestTermination:
    def test_terminate_blocks_mutators(self, clock: FixedClock) -> None:
        emp = _hire(clock)
        emp.terminate(
            date(2025, 1, 31), date(2025, 1, 30), TerminationType.VOLUNTARY, "Moving", clock=clock
        )
        assert emp.is_terminated
        assert emp.termination is not None
        with pytest.raises(CannotModifyTerminatedEmployee) as exc:
            emp.change_location(WorkLocation.REMOTE, date(2025, 2, 1), clock=clock)
        assert exc.value.code == "EMPLOYEE_TERMINATED"
        with pytest.raises(CannotModifyTerminatedEmployee):
            emp.terminate(
                date(2025, 2, 1), date(2025, 2, 1), TerminationType.VOLUNTARY, "", clock=clock
            )

    def test_last_working_day_after_termination_rejected(self, clock: FixedClock) -> None:
        emp = _hire(clock)
        with pytest.raises(InvariantViolation):
            emp.terminate(
                date(2025, 1, 31), date(2025, 2, 1), TerminationType.INVOLUNTARY, "", clock=clock
            )
        assert emp.is_active

    def test_reinstate(self, clock: FixedClock) -> None:
        emp = _hire(clock)
        emp.terminate(
            date(2025, 1, 31), date(2025, 1, 31), TerminationType.VOLUNTARY, "", clock=clock
        )
        with pytest.raises(InvariantViolation):
            emp.reinstate(date(2025, 1, 30), "Too early", clock=clock)
        emp.reinstate(date(2025, 2, 3), "Returned", clock=clock)
        assert emp.is_active
        assert emp.termination is None

    def test_reinstate_requires_terminated(self, clock: FixedClock) -> None:
        with pytest.raises(InvalidTransition):
            _hire(clock).reinstate(date(2025, 2, 1), "", clock=clock)


class TestStatusChanges:
    def test_leave_round_trip(self, clock: FixedClock) -> None:
        emp = _hire(clock)
        emp.place_on_leave(clock=clock)
        assert emp.status is EmploymentStatus.ON_LEAVE
        emp.return_from_leave(clock=clock)
        assert emp.is_active

    def test_invalid_transition(self, clock: FixedClock) -> None:
        emp = _hire(clock)
        with pytest.raises(InvalidTransition):
            emp.return_from_leave(clock=clock)

    def test_configure_remote_work(self, clock: FixedClock) -> None:
        emp = _hire(clock)
        emp.release_events()
        emp.configure_remote_work(Hybrid(frozenset({Weekday.FRIDAY})), clock=clock)
        event = emp.release_events()[0]
        assert event.remote_days == ["Friday"]  # type: ignore[attr-defined]
        assert emp.summary()["remote_work_policy"] == "Hybrid"
