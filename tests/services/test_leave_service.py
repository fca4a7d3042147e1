"""Tests for LeaveService and its ledger bookkeeping."""

from __future__ import annotations

import threading
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest

from tests.conftest import hire
from workforce.domain.clock import FixedClock
from workforce.domain.ids import EmployeeId
from workforce.domain.leave import LeavePeriod, LeaveRequest, LeaveType
from workforce.infrastructure.store import Store
from workforce.services.employee import EmployeeService
from workforce.services.leave import LeaveService
from workforce.services.result import ServiceResult


@pytest.fixture
def staff(store: Store) -> tuple[str, str]:
    """An employee with 10 vacation days and a manager to approve requests."""
    employee = hire(store)["employee_id"]
    manager = hire(store, email="grace@example.com", first_name="Grace")["employee_id"]
    assert LeaveService(store).adjust_balance(employee, "Vacation", 10).ok
    return employee, manager


def _vacation(store: Store, employee_id: str) -> dict[str, str]:
    return LeaveService(store).balance(employee_id).data["balances"]["Vacation"]


class TestRequest:
    def test_reserves_pending_days(self, store: Store, staff: tuple[str, str]) -> None:
        employee, _ = staff
        result = LeaveService(store).request(
            employee, "Vacation", date(2025, 3, 10), date(2025, 3, 14), "Holiday"
        )
        assert result.ok
        assert result.data["leave_id"] == "LEAVE-2025-0001"
        assert result.data["days"] == "5"
        assert result.data["status"] == "Pending"
        assert result.data["balance"]["pending"] == "5.00"
        assert result.data["balance"]["available"] == "5.00"

    def test_insufficient_balance_changes_nothing(
        self, store: Store, staff: tuple[str, str]
    ) -> None:
        employee, _ = staff
        svc = LeaveService(store)
        svc.request(employee, "Vacation", date(2025, 3, 10), date(2025, 3, 14))
        short = svc.request(employee, "Vacation", date(2025, 4, 1), date(2025, 4, 7))
        assert short.error is not None
        assert short.error.code == "INSUFFICIENT_BALANCE"
        balance = _vacation(store, employee)
        assert balance["pending"] == "5.00"
        assert balance["available"] == "5.00"
        assert svc.list_for_employee(employee).data["count"] == 1

    def test_overlap_rejected(self, store: Store, staff: tuple[str, str]) -> None:
        employee, _ = staff
        svc = LeaveService(store)
        first = svc.request(employee, "Vacation", date(2025, 3, 10), date(2025, 3, 11))
        clash = svc.request(employee, "Personal", date(2025, 3, 11), date(2025, 3, 12))
        assert clash.error is not None
        assert clash.error.detail["rule"] == "leave.no_overlap"
        assert clash.error.detail["overlapping"] == [first.data["leave_id"]]

    def test_sick_leave_skips_ledger(self, store: Store, staff: tuple[str, str]) -> None:
        employee, _ = staff
        result = LeaveService(store).request(
            employee, "Sick", date(2025, 2, 27), date(2025, 2, 28)
        )
        assert result.ok
        assert "balance" not in result.data
        assert "Sick" not in LeaveService(store).balance(employee).data["balances"]

    def test_vacation_in_past_rejected(self, store: Store, staff: tuple[str, str]) -> None:
        employee, _ = staff
        result = LeaveService(store).request(
            employee, "Vacation", date(2025, 3, 1), date(2025, 3, 4)
        )
        assert result.error is not None
        assert result.error.detail["rule"] == "leave.start_not_past"

    def test_unknown_type(self, store: Store, staff: tuple[str, str]) -> None:
        employee, _ = staff
        result = LeaveService(store).request(
            employee, "Sabbatical", date(2025, 3, 10), date(2025, 3, 11)
        )
        assert result.error is not None
        assert result.error.code == "INVARIANT_VIOLATION"


class TestLifecycle:
    def test_approve_then_cancel_restores_balance(
        self, store: Store, staff: tuple[str, str]
    ) -> None:
        employee, manager = staff
        svc = LeaveService(store)
        leave_id = svc.request(employee, "Vacation", date(2025, 3, 10), date(2025, 3, 14)).data[
            "leave_id"
        ]

        approved = svc.approve(leave_id, manager)
        assert approved.data["status"] == "Approved"
        assert approved.data["balance"]["used"] == "5.00"
        assert approved.data["balance"]["pending"] == "0.00"
        assert approved.data["balance"]["available"] == "5.00"

        cancelled = svc.cancel(leave_id, "Plans changed")
        assert cancelled.ok
        assert cancelled.data["status"] == "Cancelled"
        assert cancelled.data["balance"]["used"] == "0.00"
        assert cancelled.data["balance"]["available"] == "10.00"
        assert svc.get(leave_id).data["cancellation_reason"] == "Plans changed"

    def test_reject_releases_pending(self, store: Store, staff: tuple[str, str]) -> None:
        employee, manager = staff
        svc = LeaveService(store)
        leave_id = svc.request(employee, "Vacation", date(2025, 3, 10), date(2025, 3, 12)).data[
            "leave_id"
        ]
        rejected = svc.reject(leave_id, manager, "Release week")
        assert rejected.data["status"] == "Rejected"
        assert rejected.data["balance"]["pending"] == "0.00"
        assert rejected.data["balance"]["available"] == "10.00"
        detail = svc.get(leave_id).data
        assert detail["rejecter_id"] == manager
        assert detail["rejection_reason"] == "Release week"

        again = svc.approve(leave_id, manager)
        assert again.error is not None
        assert again.error.code == "INVALID_TRANSITION"

    def test_cancel_inside_window_fails(
        self, store: Store, staff: tuple[str, str], clock: FixedClock
    ) -> None:
        employee, _ = staff
        svc = LeaveService(store)
        leave_id = svc.request(employee, "Vacation", date(2025, 3, 5), date(2025, 3, 6)).data[
            "leave_id"
        ]
        clock.set_time(datetime(2025, 3, 4, 12, tzinfo=UTC))
        result = svc.cancel(leave_id)
        assert result.error is not None
        assert result.error.detail["rule"] == "leave.cancellation_window"
        assert result.error.detail["hours_until_start"] == 12.0
        assert svc.get(leave_id).data["status"] == "Pending"
        assert _vacation(store, employee)["pending"] == "2.00"

    def test_complete_due(self, store: Store, staff: tuple[str, str], clock: FixedClock) -> None:
        employee, manager = staff
        svc = LeaveService(store)
        ended = svc.request(employee, "Vacation", date(2025, 3, 4), date(2025, 3, 5)).data[
            "leave_id"
        ]
        later = svc.request(employee, "Vacation", date(2025, 3, 20), date(2025, 3, 21)).data[
            "leave_id"
        ]
        svc.approve(ended, manager)
        svc.approve(later, manager)

        clock.set_time(datetime(2025, 3, 10, 9, tzinfo=UTC))
        result = svc.complete_due()
        assert result.data == {"completed": [ended], "count": 1}
        assert svc.get(ended).data["status"] == "Completed"
        assert svc.get(later).data["status"] == "Approved"

        cancel = svc.cancel(ended)
        assert cancel.error is not None
        assert cancel.error.detail["rule"] == "leave.cancel_completed"

    def test_terminated_employee_cannot_request(self, store: Store) -> None:
        employee = hire(store)["employee_id"]
        EmployeeService(store).terminate(
            employee,
            termination_date=date(2025, 3, 31),
            last_working_day=date(2025, 3, 31),
            termination_type="Voluntary",
            reason="",
        )
        result = LeaveService(store).request(
            employee, "Unpaid", date(2025, 3, 10), date(2025, 3, 11)
        )
        assert result.error is not None
        assert result.error.code == "EMPLOYEE_TERMINATED"


class TestBalance:
    def test_adjust_and_reverse(self, store: Store) -> None:
        employee = hire(store)["employee_id"]
        svc = LeaveService(store)
        credited = svc.adjust_balance(employee, "Personal", "2.5")
        assert credited.data["adjusted"] == "2.50"
        assert credited.data["leave_type"] == "Personal"

        overdraw = svc.adjust_balance(employee, "Personal", -3)
        assert overdraw.error is not None
        assert overdraw.error.detail["rule"] == "ledger.adjusted_non_negative"

        reversed_ = svc.adjust_balance(employee, "Personal", "-2.5")
        assert reversed_.data["available"] == "0.00"

    def test_balance_by_year(self, store: Store) -> None:
        employee = hire(store)["employee_id"]
        svc = LeaveService(store)
        svc.adjust_balance(employee, "Vacation", 3, year=2026)
        current = svc.balance(employee)
        assert current.data["year"] == 2025
        assert current.data["balances"] == {}
        future = svc.balance(employee, 2026)
        assert future.data["balances"]["Vacation"]["available"] == "3.00"
        assert future.data["balances"]["Vacation"]["is_closed"] is False

    def test_unknown_employee(self, store: Store) -> None:
        result = LeaveService(store).balance("EMP-2025-0404")
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"


class TestConcurrentRequests:
    def test_parallel_requests_never_overdraw(
        self, store: Store, staff: tuple[str, str]
    ) -> None:
        """Six 3-day requests race for 10 days; at most three can be reserved."""
        employee, _ = staff
        workers = 6
        barrier = threading.Barrier(workers)
        results: list[ServiceResult] = []
        lock = threading.Lock()

        def submit(week: int) -> None:
            start = date(2025, 3, 10) + timedelta(weeks=week)
            barrier.wait()
            result = LeaveService(store).request(
                employee, "Vacation", start, start + timedelta(days=2)
            )
            with lock:
                results.append(result)

        threads = [threading.Thread(target=submit, args=(week,)) for week in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert len(results) == workers
        granted = [r for r in results if r.ok]
        refused = [r for r in results if not r.ok]
        assert len(granted) == 3
        assert all(r.error is not None and r.error.code == "INSUFFICIENT_BALANCE" for r in refused)

        balance = _vacation(store, employee)
        assert Decimal(balance["pending"]) == Decimal(9)
        assert Decimal(balance["pending"]) <= Decimal(10)
        assert Decimal(balance["available"]) >= 0
        assert LeaveService(store).list_for_employee(employee).data["count"] == 3


class TestLedgerLookup:
    def test_decision_without_reserved_ledger_is_not_found(
        self, store: Store, staff: tuple[str, str]
    ) -> None:
        _, manager = staff
        other = hire(store, email="ada@example.com", first_name="Ada")["employee_id"]
        with store.transaction() as txn:
            leave = LeaveRequest.request(
                txn.leave_requests.next_identity(),
                EmployeeId(other),
                LeaveType.VACATION,
                LeavePeriod(date(2025, 3, 10), date(2025, 3, 12)),
                clock=store.clock,
            )
            txn.save(leave)

        result = LeaveService(store).approve(leave.id, manager)

        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
        assert result.error.detail["kind"] == "leave balance"
        assert LeaveService(store).get(leave.id).data["status"] == "Pending"
