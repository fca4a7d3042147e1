"""LeaveService — leave requests and their ledger bookkeeping.

Every request that draws on a balance moves days through the
``(employee, year, leave type)`` ledger, where ``year`` is the year
the leave starts:

- request  → ``add_to_pending``  (check-then-reserve)
- approve  → ``deduct``          (pending → used)
- reject   → ``remove_from_pending``
- cancel   → ``remove_from_pending`` if Pending, ``restore`` if Approved

INVARIANT: The ledger row is read and written inside the same
``BEGIN IMMEDIATE`` transaction as the request, so two concurrent
requests can never both pass the availability check.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from workforce.domain.errors import BusinessRuleViolation
from workforce.domain.ids import EmployeeId
from workforce.domain.leave import LeavePeriod, LeaveRequest, LeaveType
from workforce.domain.ledger import days
from workforce.domain.lifecycle import LeaveStatus
from workforce.services.base import BaseService

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal

    from workforce.domain.ledger import LeaveBalance
    from workforce.infrastructure.store import StoreTransaction
    from workforce.services.result import ServiceResult


class LeaveService(BaseService):
    """Leave use-cases. Each method is one transaction."""

    def request(
        self,
        employee_id: str,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str = "",
    ) -> ServiceResult:
        """Submit a leave request and reserve its days.

        Rejected with no side effects when the employee is terminated,
        the period overlaps another open request, or the balance is short.
        """

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            employee = self._require_employed(txn, employee_id)
            kind = LeaveType.parse(leave_type)
            period = LeavePeriod(start_date, end_date)

            clashes = txn.leave_requests.overlapping(employee.employee_id, period)
            if clashes:
                msg = f"Leave overlaps existing request(s): {', '.join(clashes)}"
                raise BusinessRuleViolation(
                    msg, rule="leave.no_overlap", detail={"overlapping": clashes}
                )

            leave = LeaveRequest.request(
                txn.leave_requests.next_identity(),
                employee.employee_id,
                kind,
                period,
                reason,
                clock=self._clock,
            )
            data = leave.summary()
            if kind.requires_balance:
                ledger = self._ledger(txn, employee.id, leave.balance_year, kind)
                ledger.add_to_pending(leave.days)
                txn.save(ledger)
                data["balance"] = ledger.snapshot()
            txn.save(leave)
            return data

        return self._run("request_leave", work)

    def approve(self, leave_id: str, approver_id: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            approver = txn.employees.load(approver_id)
            leave = txn.leave_requests.load(leave_id)
            leave.approve(approver.employee_id, clock=self._clock)
            data = leave.summary()
            if leave.leave_type.requires_balance:
                ledger = self._ledger_for(txn, leave)
                ledger.deduct(leave.days)
                txn.save(ledger)
                data["balance"] = ledger.snapshot()
            txn.save(leave)
            return data

        return self._run("approve_leave", work)

    def reject(self, leave_id: str, rejecter_id: str, reason: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            rejecter = txn.employees.load(rejecter_id)
            leave = txn.leave_requests.load(leave_id)
            leave.reject(rejecter.employee_id, reason, clock=self._clock)
            data = leave.summary()
            if leave.leave_type.requires_balance:
                ledger = self._ledger_for(txn, leave)
                ledger.remove_from_pending(leave.days)
                txn.save(ledger)
                data["balance"] = ledger.snapshot()
            txn.save(leave)
            return data

        return self._run("reject_leave", work)

    def cancel(self, leave_id: str, reason: str = "") -> ServiceResult:
        """Cancel a Pending or Approved request and give its days back."""
        window = self._store.settings.leave.cancellation_window

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            leave = txn.leave_requests.load(leave_id)
            previous = leave.cancel(reason, clock=self._clock, window=window)
            data = leave.summary()
            if leave.leave_type.requires_balance:
                ledger = self._ledger_for(txn, leave)
                if previous is LeaveStatus.APPROVED:
                    ledger.restore(leave.days)
                else:
                    ledger.remove_from_pending(leave.days)
                txn.save(ledger)
                data["balance"] = ledger.snapshot()
            txn.save(leave)
            return data

        return self._run("cancel_leave", work)

    def complete_due(self) -> ServiceResult:
        """Mark every Approved request that ended before today as Completed."""

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            completed: list[str] = []
            for leave_id in txn.leave_requests.due_for_completion(self._clock.today()):
                leave = txn.leave_requests.load(leave_id)
                leave.complete(clock=self._clock)
                txn.save(leave)
                completed.append(leave.id)
            return {"completed": completed, "count": len(completed)}

        return self._run("complete_leave", work)

    def get(self, leave_id: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            leave = txn.leave_requests.load(leave_id)
            return {
                **leave.summary(),
                "reason": leave.reason,
                "approver_id": str(leave.approver_id) if leave.approver_id else None,
                "rejecter_id": str(leave.rejecter_id) if leave.rejecter_id else None,
                "rejection_reason": leave.rejection_reason,
                "cancellation_reason": leave.cancellation_reason,
            }

        return self._run("get_leave", work)

    def list_for_employee(self, employee_id: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            txn.employees.load(employee_id)
            items = [leave.summary() for leave in txn.leave_requests.list_for_employee(employee_id)]
            return {"employee_id": employee_id, "items": items, "count": len(items)}

        return self._run("list_leave", work)

    def balance(self, employee_id: str, year: int | None = None) -> ServiceResult:
        """Ledger snapshots for every leave type the employee has a ledger for."""

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            txn.employees.load(employee_id)
            resolved = year or self._clock.today().year
            ledgers = txn.balances.list_for_employee(employee_id, resolved)
            return {
                "employee_id": employee_id,
                "year": resolved,
                "balances": {
                    str(ledger.leave_type): {**ledger.snapshot(), "is_closed": ledger.is_closed}
                    for ledger in ledgers
                },
            }

        return self._run("leave_balance", work)

    def adjust_balance(
        self,
        employee_id: str,
        leave_type: str,
        amount: Decimal | int | str,
        *,
        year: int | None = None,
    ) -> ServiceResult:
        """Manual HR correction; negative *amount* reverses earlier adjustments."""

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            employee = txn.employees.load(employee_id)
            ledger = self._ledger(
                txn, employee.id, year or self._clock.today().year, LeaveType.parse(leave_type)
            )
            ledger.adjust(days(amount))
            txn.save(ledger)
            return {
                "employee_id": employee.id,
                "leave_type": str(ledger.leave_type),
                **ledger.snapshot(),
            }

        return self._run("adjust_balance", work)

    def _ledger_for(self, txn: StoreTransaction, leave: LeaveRequest) -> LeaveBalance:
        # Reserved when the request was made, so it must already exist.
        return txn.balances.load(leave.employee_id, leave.balance_year, leave.leave_type)

