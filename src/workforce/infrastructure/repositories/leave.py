"""Leave request and leave balance persistence."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, insert, select

from workforce.domain.ids import EmployeeId, LeaveId
from workforce.domain.leave import LeavePeriod, LeaveRequest, LeaveType
from workforce.domain.ledger import AccrualRecord, LeaveBalance
from workforce.domain.lifecycle import LeaveStatus
from workforce.infrastructure.database.schema import leave_accruals, leave_balances, leave_requests
from workforce.infrastructure.database.sequences import next_business_key
from workforce.infrastructure.repositories.base import (
    NotFoundError,
    iso,
    save_versioned,
    to_date,
    to_datetime,
)

if TYPE_CHECKING:
    from datetime import date

    from sqlalchemy import Connection, Row

    from workforce.domain.clock import Clock

# Statuses whose days are reserved or consumed.
_OPEN_STATUSES = (str(LeaveStatus.PENDING), str(LeaveStatus.APPROVED))


class LeaveRequestRepository:
    def __init__(self, conn: Connection, clock: Clock) -> None:
        self._conn = conn
        self._clock = clock

    def next_identity(self, year: int | None = None) -> LeaveId:
        year = year or self._clock.today().year
        return LeaveId(next_business_key(self._conn, leave_requests.c.leave_id, "leave", year))

    def find(self, leave_id: LeaveId | str) -> LeaveRequest | None:
        row = self._conn.execute(
            select(leave_requests).where(leave_requests.c.leave_id == str(leave_id))
        ).first()
        return self._to_aggregate(row) if row is not None else None

    def load(self, leave_id: LeaveId | str) -> LeaveRequest:
        leave = self.find(leave_id)
        if leave is None:
            raise NotFoundError("leave request", leave_id)
        return leave

    def overlapping(self, employee_id: EmployeeId | str, period: LeavePeriod) -> list[str]:
        """Pending or Approved requests of *employee_id* that share a day with *period*."""
        rows = self._conn.execute(
            select(leave_requests.c.leave_id).where(
                leave_requests.c.employee_id == str(employee_id),
                leave_requests.c.status.in_(_OPEN_STATUSES),
                leave_requests.c.start_date <= period.end.isoformat(),
                leave_requests.c.end_date >= period.start.isoformat(),
            )
        )
        return [row.leave_id for row in rows]

    def list_for_employee(self, employee_id: EmployeeId | str) -> list[LeaveRequest]:
        rows = self._conn.execute(
            select(leave_requests)
            .where(leave_requests.c.employee_id == str(employee_id))
            .order_by(leave_requests.c.start_date)
        ).fetchall()
        return [self._to_aggregate(row) for row in rows]

    def open_for_employee(self, employee_id: EmployeeId | str) -> list[str]:
        rows = self._conn.execute(
            select(leave_requests.c.leave_id).where(
                leave_requests.c.employee_id == str(employee_id),
                leave_requests.c.status.in_(_OPEN_STATUSES),
            )
        )
        return [row.leave_id for row in rows]

    def due_for_completion(self, today: date) -> list[str]:
        """Approved requests whose last day is before *today*."""
        rows = self._conn.execute(
            select(leave_requests.c.leave_id)
            .where(
                leave_requests.c.status == str(LeaveStatus.APPROVED),
                leave_requests.c.end_date < today.isoformat(),
            )
            .order_by(leave_requests.c.leave_id)
        )
        return [row.leave_id for row in rows]

    def save(self, leave: LeaveRequest) -> None:
        values: dict[str, Any] = {
            "leave_id": leave.id,
            "employee_id": str(leave.employee_id),
            "leave_type": str(leave.leave_type),
            "start_date": leave.period.start.isoformat(),
            "end_date": leave.period.end.isoformat(),
            "days": str(leave.days),
            "reason": leave.reason,
            "status": str(leave.status),
            "requested_at": iso(leave.requested_at),
            "approver_id": str(leave.approver_id) if leave.approver_id else None,
            "approved_at": iso(leave.approved_at),
            "rejecter_id": str(leave.rejecter_id) if leave.rejecter_id else None,
            "rejected_at": iso(leave.rejected_at),
            "rejection_reason": leave.rejection_reason,
            "cancelled_at": iso(leave.cancelled_at),
            "cancellation_reason": leave.cancellation_reason,
            "completed_at": iso(leave.completed_at),
        }
        leave.version = save_versioned(
            self._conn,
            leave_requests,
            leave_requests.c.leave_id == leave.id,
            values,
            version=leave.version,
            kind="leave request",
            key=leave.id,
        )

    @staticmethod
    def _to_aggregate(row: Row[Any]) -> LeaveRequest:
        return LeaveRequest(
            leave_id=LeaveId(row.leave_id),
            employee_id=EmployeeId(row.employee_id),
            leave_type=LeaveType(row.leave_type),
            period=LeavePeriod(
                to_date(row.start_date),  # type: ignore[arg-type]
                to_date(row.end_date),  # type: ignore[arg-type]
            ),
            reason=row.reason or "",
            status=LeaveStatus(row.status),
            requested_at=to_datetime(row.requested_at),
            approver_id=EmployeeId(row.approver_id) if row.approver_id else None,
            approved_at=to_datetime(row.approved_at),
            rejecter_id=EmployeeId(row.rejecter_id) if row.rejecter_id else None,
            rejected_at=to_datetime(row.rejected_at),
            rejection_reason=row.rejection_reason,
            cancelled_at=to_datetime(row.cancelled_at),
            cancellation_reason=row.cancellation_reason,
            completed_at=to_datetime(row.completed_at),
            version=row.version,
        )


class LeaveBalanceRepository:
    """Ledger rows keyed by ``(employee_id, year, leave_type)``.

    INVARIANT: Callers read a ledger with :meth:`get_for_update` inside
    the same transaction that saves it, so the availability check and
    the reservation are one atomic step.
    """

    def __init__(self, conn: Connection, clock: Clock) -> None:
        self._conn = conn
        self._clock = clock

    def get_for_update(
        self, employee_id: EmployeeId | str, year: int, leave_type: LeaveType
    ) -> LeaveBalance | None:
        row = self._conn.execute(
            select(leave_balances)
            .where(*self._key(str(employee_id), year, leave_type))
            .with_for_update()
        ).first()
        return self._to_ledger(row) if row is not None else None

    def load(self, employee_id: EmployeeId | str, year: int, leave_type: LeaveType) -> LeaveBalance:
        ledger = self.get_for_update(employee_id, year, leave_type)
        if ledger is None:
            raise NotFoundError("leave balance", f"{employee_id}/{year}/{leave_type}")
        return ledger

    def list_for_employee(self, employee_id: EmployeeId | str, year: int) -> list[LeaveBalance]:
        rows = self._conn.execute(
            select(leave_balances)
            .where(leave_balances.c.employee_id == str(employee_id), leave_balances.c.year == year)
            .order_by(leave_balances.c.leave_type)
        ).fetchall()
        return [self._to_ledger(row) for row in rows]

    def list_open(self, year: int) -> list[LeaveBalance]:
        rows = self._conn.execute(
            select(leave_balances)
            .where(leave_balances.c.year == year, leave_balances.c.is_closed == 0)
            .order_by(leave_balances.c.employee_id, leave_balances.c.leave_type)
        ).fetchall()
        return [self._to_ledger(row) for row in rows]

    def save(self, ledger: LeaveBalance) -> None:
        employee_id, year, leave_type = ledger.key
        values: dict[str, Any] = {
            "employee_id": employee_id,
            "year": year,
            "leave_type": leave_type,
            "opening": str(ledger.opening),
            "accrued": str(ledger.accrued),
            "used": str(ledger.used),
            "pending": str(ledger.pending),
            "adjusted": str(ledger.adjusted),
            "carried_over": str(ledger.carried_over),
            "forfeited": str(ledger.forfeited),
            "carried_out": str(ledger.carried_out),
            "accrual_rate": str(ledger.accrual_rate),
            "max_carry_over": str(ledger.max_carry_over),
            "max_balance": str(ledger.max_balance) if ledger.max_balance is not None else None,
            "is_closed": int(ledger.is_closed),
            "modified": self._clock.now().isoformat(),
        }
        ledger.version = save_versioned(
            self._conn,
            leave_balances,
            and_(*self._key(employee_id, year, ledger.leave_type)),
            values,
            version=ledger.version,
            kind="leave balance",
            key="/".join(str(part) for part in ledger.key),
        )

    # --- Accrual receipts ---

    def has_accrual(
        self, employee_id: EmployeeId | str, leave_type: LeaveType, period: str
    ) -> bool:
        row = self._conn.execute(
            select(leave_accruals.c.id).where(
                leave_accruals.c.employee_id == str(employee_id),
                leave_accruals.c.leave_type == str(leave_type),
                leave_accruals.c.period == period,
            )
        ).first()
        return row is not None

    def record_accrual(self, record: AccrualRecord) -> None:
        self._conn.execute(
            insert(leave_accruals).values(
                employee_id=record.employee_id,
                leave_type=str(record.leave_type),
                period=record.period,
                days=str(record.days),
                balance_before=str(record.balance_before),
                balance_after=str(record.balance_after),
                accrual_type=record.accrual_type,
                accrued_at=record.accrued_at.isoformat(),
            )
        )

    # ------------------------------------------------------------------

    @staticmethod
    def _key(employee_id: str, year: int, leave_type: LeaveType | str) -> tuple[Any, ...]:
        return (
            leave_balances.c.employee_id == employee_id,
            leave_balances.c.year == year,
            leave_balances.c.leave_type == str(leave_type),
        )

    @staticmethod
    def _to_ledger(row: Row[Any]) -> LeaveBalance:
        return LeaveBalance(
            employee_id=row.employee_id,
            year=row.year,
            leave_type=LeaveType(row.leave_type),
            opening=row.opening,
            accrued=row.accrued,
            used=row.used,
            pending=row.pending,
            adjusted=row.adjusted,
            carried_over=row.carried_over,
            forfeited=row.forfeited,
            carried_out=row.carried_out,
            accrual_rate=row.accrual_rate,
            max_carry_over=row.max_carry_over,
            max_balance=row.max_balance,
            is_closed=bool(row.is_closed),
            version=row.version,
        )
