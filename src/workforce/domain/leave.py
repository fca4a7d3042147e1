"""LeaveRequest aggregate and its value objects.

Lifecycle::

    Pending ──approve──▶ Approved ──complete (scheduled sweep)──▶ Completed
       │                   │
       ├──reject──▶ Rejected
       └──cancel──▶ Cancelled ◀──cancel──┘

Cancellation is refused inside the protected window that ends at the
start of the leave period (24 hours by default). It is allowed before
the window opens and again once the leave has started.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

from workforce.domain.errors import BusinessRuleViolation, InvalidTransition, InvariantViolation
from workforce.domain.events import DomainEvent, EventRecorder
from workforce.domain.ids import EmployeeId, LeaveId
from workforce.domain.lifecycle import LEAVE_TRANSITIONS, LeaveStatus, is_valid_transition
from workforce.domain.values import DateRange

if TYPE_CHECKING:
    from workforce.domain.clock import Clock

CANCELLATION_WINDOW = timedelta(hours=24)


class LeaveType(StrEnum):
    VACATION = "Vacation"
    SICK = "Sick"
    UNPAID = "Unpaid"
    BEREAVEMENT = "Bereavement"
    PARENTAL = "Parental"
    PERSONAL = "Personal"

    @classmethod
    def parse(cls, raw: object) -> LeaveType:
        try:
            return cls(str(raw).strip())
        except ValueError as exc:
            msg = f"Invalid leave type: {raw!r}"
            raise InvariantViolation(msg, rule="leave.type") from exc

    @property
    def requires_balance(self) -> bool:
        """Whether requests of this type draw on the leave ledger."""
        return self not in (LeaveType.SICK, LeaveType.BEREAVEMENT)

    @property
    def may_start_in_past(self) -> bool:
        return self is LeaveType.SICK


class LeavePeriod(DateRange):
    """Inclusive range of leave days."""

    @property
    def total_days(self) -> int:
        return self.duration_in_days + 1

    @property
    def starts_at(self) -> datetime:
        """Midnight UTC at the beginning of the first leave day."""
        return datetime.combine(self.start, time.min, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class LeaveRequested(DomainEvent):
    event_type: ClassVar[str] = "leave.requested"

    employee_id: str
    leave_type: str
    start_date: date
    end_date: date
    days: Decimal
    reason: str


class LeaveApproved(DomainEvent):
    event_type: ClassVar[str] = "leave.approved"

    employee_id: str
    leave_type: str
    approver_id: str
    days: Decimal


class LeaveRejected(DomainEvent):
    event_type: ClassVar[str] = "leave.rejected"

    employee_id: str
    leave_type: str
    rejecter_id: str
    reason: str
    days: Decimal


class LeaveCancelled(DomainEvent):
    event_type: ClassVar[str] = "leave.cancelled"

    employee_id: str
    leave_type: str
    previous_status: str
    days: Decimal
    reason: str


class LeaveCompleted(DomainEvent):
    event_type: ClassVar[str] = "leave.completed"

    employee_id: str
    leave_type: str
    days: Decimal


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


class LeaveRequest:
    """Leave request aggregate root."""

    def __init__(
        self,
        *,
        leave_id: LeaveId,
        employee_id: EmployeeId,
        leave_type: LeaveType,
        period: LeavePeriod,
        reason: str = "",
        status: LeaveStatus = LeaveStatus.PENDING,
        requested_at: datetime | None = None,
        approver_id: EmployeeId | None = None,
        approved_at: datetime | None = None,
        rejecter_id: EmployeeId | None = None,
        rejected_at: datetime | None = None,
        rejection_reason: str | None = None,
        cancelled_at: datetime | None = None,
        cancellation_reason: str | None = None,
        completed_at: datetime | None = None,
        version: int = 0,
    ) -> None:
        self._id = leave_id
        self._employee_id = employee_id
        self._type = leave_type
        self._period = period
        self._reason = reason
        self._status = status
        self._requested_at = requested_at
        self._approver_id = approver_id
        self._approved_at = approved_at
        self._rejecter_id = rejecter_id
        self._rejected_at = rejected_at
        self._rejection_reason = rejection_reason
        self._cancelled_at = cancelled_at
        self._cancellation_reason = cancellation_reason
        self._completed_at = completed_at
        self.version = version
        self._events = EventRecorder()

    @classmethod
    def request(
        cls,
        leave_id: LeaveId,
        employee_id: EmployeeId,
        leave_type: LeaveType,
        period: LeavePeriod,
        reason: str = "",
        *,
        clock: Clock,
    ) -> LeaveRequest:
        """Open a Pending request. Only sick leave may start in the past."""
        if not leave_type.may_start_in_past and period.start < clock.today():
            msg = f"{leave_type} leave cannot start in the past ({period.start})"
            raise InvariantViolation(msg, rule="leave.start_not_past")

        leave = cls(
            leave_id=leave_id,
            employee_id=employee_id,
            leave_type=leave_type,
            period=period,
            reason=reason.strip(),
            requested_at=clock.now(),
        )
        leave._events.record(
            LeaveRequested(
                aggregate_id=leave.id,
                occurred_at=clock.now(),
                employee_id=str(employee_id),
                leave_type=str(leave_type),
                start_date=period.start,
                end_date=period.end,
                days=leave.days,
                reason=leave._reason,
            )
        )
        return leave

    # --- Mutators ---

    def approve(self, approver_id: EmployeeId, *, clock: Clock) -> None:
        self._transition(LeaveStatus.APPROVED, "approve")
        self._approver_id = approver_id
        self._approved_at = clock.now()
        self._events.record(
            LeaveApproved(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                employee_id=str(self._employee_id),
                leave_type=str(self._type),
                approver_id=str(approver_id),
                days=self.days,
            )
        )

    def reject(self, rejecter_id: EmployeeId, reason: str, *, clock: Clock) -> None:
        self._transition(LeaveStatus.REJECTED, "reject")
        self._rejecter_id = rejecter_id
        self._rejected_at = clock.now()
        self._rejection_reason = reason.strip()
        self._events.record(
            LeaveRejected(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                employee_id=str(self._employee_id),
                leave_type=str(self._type),
                rejecter_id=str(rejecter_id),
                reason=self._rejection_reason,
                days=self.days,
            )
        )

    def cancel(
        self,
        reason: str = "",
        *,
        clock: Clock,
        window: timedelta = CANCELLATION_WINDOW,
    ) -> LeaveStatus:
        """Cancel a Pending or Approved request.

        Returns the status the request held before cancellation so the
        caller knows which ledger operation undoes its reservation.
        """
        if self._status is LeaveStatus.COMPLETED:
            msg = f"Leave {self.id} is completed and cannot be cancelled"
            raise BusinessRuleViolation(msg, rule="leave.cancel_completed")
        self._check_transition(LeaveStatus.CANCELLED, "cancel")
        margin = self._period.starts_at - clock.now()
        if timedelta(0) < margin < window:
            msg = f"Leave {self.id} cannot be cancelled within {window} of its start"
            raise BusinessRuleViolation(
                msg,
                rule="leave.cancellation_window",
                detail={"hours_until_start": round(margin.total_seconds() / 3600, 2)},
            )
        previous = self._status
        self._transition(LeaveStatus.CANCELLED, "cancel")
        self._cancelled_at = clock.now()
        self._cancellation_reason = reason.strip() or None
        self._events.record(
            LeaveCancelled(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                employee_id=str(self._employee_id),
                leave_type=str(self._type),
                previous_status=str(previous),
                days=self.days,
                reason=reason.strip(),
            )
        )
        return previous

    def complete(self, *, clock: Clock) -> None:
        """Mark an Approved request whose period has ended as Completed."""
        if self._period.end >= clock.today():
            msg = f"Leave {self.id} has not ended yet"
            raise BusinessRuleViolation(msg, rule="leave.complete_after_end")
        self._transition(LeaveStatus.COMPLETED, "complete")
        self._completed_at = clock.now()
        self._events.record(
            LeaveCompleted(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                employee_id=str(self._employee_id),
                leave_type=str(self._type),
                days=self.days,
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
    def leave_id(self) -> LeaveId:
        return self._id

    @property
    def employee_id(self) -> EmployeeId:
        return self._employee_id

    @property
    def leave_type(self) -> LeaveType:
        return self._type

    @property
    def period(self) -> LeavePeriod:
        return self._period

    @property
    def days(self) -> Decimal:
        return Decimal(self._period.total_days)

    @property
    def balance_year(self) -> int:
        """Ledger year this request draws on: the year the leave starts."""
        return self._period.start.year

    @property
    def reason(self) -> str:
        return self._reason

    @property
    def status(self) -> LeaveStatus:
        return self._status

    @property
    def requested_at(self) -> datetime | None:
        return self._requested_at

    @property
    def approver_id(self) -> EmployeeId | None:
        return self._approver_id

    @property
    def approved_at(self) -> datetime | None:
        return self._approved_at

    @property
    def rejecter_id(self) -> EmployeeId | None:
        return self._rejecter_id

    @property
    def rejected_at(self) -> datetime | None:
        return self._rejected_at

    @property
    def rejection_reason(self) -> str | None:
        return self._rejection_reason

    @property
    def cancelled_at(self) -> datetime | None:
        return self._cancelled_at

    @property
    def cancellation_reason(self) -> str | None:
        return self._cancellation_reason

    @property
    def completed_at(self) -> datetime | None:
        return self._completed_at

    def summary(self) -> dict[str, Any]:
        return {
            "leave_id": self.id,
            "employee_id": str(self._employee_id),
            "leave_type": str(self._type),
            "start_date": self._period.start.isoformat(),
            "end_date": self._period.end.isoformat(),
            "days": str(self.days),
            "status": str(self._status),
        }

    # --- Internal ---

    def _transition(self, target: LeaveStatus, action: str) -> None:
        self._check_transition(target, action)
        self._status = target

    def _check_transition(self, target: LeaveStatus, action: str) -> None:
        if not is_valid_transition(str(self._status), str(target), LEAVE_TRANSITIONS):
            raise InvalidTransition(
                "leave", str(self._status), str(target), rule=f"leave.{action}"
            )
