"""Tests for AccrualService: monthly accrual and year-end close."""

from __future__ import annotations

from datetime import date

import pytest

from tests.conftest import hire
from workforce.infrastructure.store import Store
from workforce.services.accrual import AccrualService
from workforce.services.employee import EmployeeService
from workforce.services.leave import LeaveService


@pytest.fixture
def employee(store: Store) -> str:
    return hire(store)["employee_id"]


def _accrue(store: Store, *months: int) -> None:
    svc = AccrualService(store)
    for month in months:
        assert svc.accrue_month(2025, month).ok


class TestAccrueMonth:
    def test_credits_configured_rates(self, store: Store, employee: str) -> None:
        result = AccrualService(store).accrue_month(2025, 3)
        assert result.ok
        assert result.data["period"] == "2025-03"
        credited = {item["leave_type"]: item["days"] for item in result.data["accrued"]}
        assert credited == {"Vacation": "2.00", "Sick": "1.00", "Personal": "0.50"}
        assert result.data["skipped"] == 0

        balances = LeaveService(store).balance(employee).data["balances"]
        assert balances["Vacation"]["accrued"] == "2.00"

    def test_rerun_is_idempotent(self, store: Store, employee: str) -> None:
        svc = AccrualService(store)
        svc.accrue_month(2025, 3)
        again = svc.accrue_month(2025, 3)
        assert again.data["count"] == 0
        assert again.data["skipped"] == 3
        balances = LeaveService(store).balance(employee).data["balances"]
        assert balances["Vacation"]["accrued"] == "2.00"

    def test_terminated_employees_skipped(self, store: Store, employee: str) -> None:
        leaver = hire(store, email="grace@example.com")["employee_id"]
        EmployeeService(store).terminate(
            leaver,
            termination_date=date(2025, 3, 31),
            last_working_day=date(2025, 3, 31),
            termination_type="Voluntary",
            reason="",
        )
        result = AccrualService(store).accrue_month(2025, 3)
        assert {item["employee_id"] for item in result.data["accrued"]} == {employee}

    def test_invalid_month(self, store: Store) -> None:
        result = AccrualService(store).accrue_month(2025, 13)
        assert result.error is not None
        assert result.error.detail["rule"] == "accrual.period"

    def test_closed_ledger_warns(self, store: Store, employee: str) -> None:
        _accrue(store, 1)
        AccrualService(store).close_year(2025)
        result = AccrualService(store).accrue_month(2025, 2)
        assert result.ok
        assert result.data["count"] == 0
        assert len(result.warnings) == 3
        assert all("ledger is closed" in w for w in result.warnings)


class TestCloseYear:
    def test_carry_over_and_forfeit(self, store: Store, employee: str) -> None:
        _accrue(store, 1, 2, 3)
        result = AccrualService(store).close_year(2025)
        assert result.ok
        outcome = {item["leave_type"]: item for item in result.data["closed"]}
        assert outcome["Vacation"]["carried_over"] == "5.00"
        assert outcome["Vacation"]["forfeited"] == "1.00"
        assert outcome["Sick"]["carried_over"] == "0.00"
        assert outcome["Sick"]["forfeited"] == "3.00"

        svc = LeaveService(store)
        closed = svc.balance(employee, 2025).data["balances"]["Vacation"]
        assert closed["is_closed"] is True
        assert closed["available"] == "0.00"
        assert closed["carried_out"] == "5.00"
        assert closed["forfeited"] == "1.00"
        opened = svc.balance(employee, 2026).data["balances"]["Vacation"]
        assert opened["carried_over"] == "5.00"
        assert opened["available"] == "5.00"

        assert AccrualService(store).close_year(2025).data["count"] == 0

    def test_pending_days_block_close(self, store: Store, employee: str) -> None:
        _accrue(store, 1, 2)
        LeaveService(store).request(employee, "Vacation", date(2025, 3, 10), date(2025, 3, 11))
        result = AccrualService(store).close_year(2025)
        assert result.ok
        assert {item["leave_type"] for item in result.data["closed"]} == {"Sick", "Personal"}
        assert result.warnings == [f"{employee} Vacation 2025: 2.00 day(s) still pending"]
        balances = LeaveService(store).balance(employee, 2025).data["balances"]
        assert balances["Vacation"]["is_closed"] is False

    def test_carry_into_existing_ledger(self, store: Store, employee: str) -> None:
        _accrue(store, 1, 2, 3)
        LeaveService(store).adjust_balance(employee, "Vacation", 1, year=2026)
        AccrualService(store).close_year(2025)
        opened = LeaveService(store).balance(employee, 2026).data["balances"]["Vacation"]
        assert opened["adjusted"] == "1.00"
        assert opened["carried_over"] == "5.00"
        assert opened["available"] == "6.00"
