"""Leave balance ledger — one running record per (employee, year, leave type).

INVARIANT: ``available = opening + accrued + adjusted + carried_over
- used - pending - forfeited - carried_out`` and ``available >= 0`` after
every operation. Every counter is a non-negative day count.
``carried_out`` is only set by ``close_year``, so a closed ledger reports
``available == 0``.

Operations compute the complete next state first and commit it only if
every invariant holds, so a rejected operation changes nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from workforce.domain.errors import (
    BusinessRuleViolation,
    InsufficientLeaveBalance,
    InvariantViolation,
)
from workforce.domain.leave import LeaveType
from workforce.domain.values import to_decimal

_DAY_QUANTUM = Decimal("0.01")
_COUNTERS = (
    "opening",
    "accrued",
    "used",
    "pending",
    "adjusted",
    "carried_over",
    "forfeited",
    "carried_out",
)

DEFAULT_ACCRUAL_RATES: dict[LeaveType, Decimal] = {
    LeaveType.VACATION: Decimal("2.0"),
    LeaveType.SICK: Decimal("1.0"),
    LeaveType.PERSONAL: Decimal("0.5"),
}

DEFAULT_MAX_CARRY_OVER: dict[LeaveType, Decimal] = {
    LeaveType.VACATION: Decimal(5),
}


def days(value: object) -> Decimal:
    """Normalise a day count to two decimal places."""
    return to_decimal(value, rule="ledger.days").quantize(_DAY_QUANTUM, rounding=ROUND_HALF_UP)


def _positive(value: object) -> Decimal:
    amount = days(value)
    if amount <= 0:
        msg = f"Day count must be positive: {amount}"
        raise InvariantViolation(msg, rule="ledger.positive_days")
    return amount


@dataclass(frozen=True)
class LeavePolicy:
    """Accrual configuration applied when a ledger is first opened."""

    accrual_rate: Decimal = Decimal(0)
    max_carry_over: Decimal = Decimal(0)
    max_balance: Decimal | None = None


def default_policy(leave_type: LeaveType) -> LeavePolicy:
    return LeavePolicy(
        accrual_rate=DEFAULT_ACCRUAL_RATES.get(leave_type, Decimal(0)),
        max_carry_over=DEFAULT_MAX_CARRY_OVER.get(leave_type, Decimal(0)),
    )


@dataclass(frozen=True)
class AccrualRecord:
    """Receipt for one monthly accrual. ``(employee_id, leave_type, period)`` is unique."""

    employee_id: str
    leave_type: LeaveType
    period: str
    days: Decimal
    balance_before: Decimal
    balance_after: Decimal
    accrued_at: datetime
    accrual_type: str = "Scheduled"


def accrual_period(year: int, month: int) -> str:
    """``YYYY-MM`` key used to make monthly accrual idempotent."""
    if not 1 <= month <= 12:
        msg = f"Invalid accrual month: {month}"
        raise InvariantViolation(msg, rule="accrual.period")
    return f"{year:04d}-{month:02d}"


class LeaveBalance:
    """Running totals for one employee, year, and leave type.

    Counters are read-only from outside; the only way to change them is
    through the ledger operations below.
    """

    def __init__(
        self,
        *,
        employee_id: str,
        year: int,
        leave_type: LeaveType,
        opening: object = 0,
        accrued: object = 0,
        used: object = 0,
        pending: object = 0,
        adjusted: object = 0,
        carried_over: object = 0,
        forfeited: object = 0,
        carried_out: object = 0,
        accrual_rate: object = 0,
        max_carry_over: object = 0,
        max_balance: object | None = None,
        is_closed: bool = False,
        version: int = 0,
    ) -> None:
        self._employee_id = employee_id
        self._year = year
        self._leave_type = leave_type
        self._values: dict[str, Decimal] = {}
        self._commit(
            opening=days(opening),
            accrued=days(accrued),
            used=days(used),
            pending=days(pending),
            adjusted=days(adjusted),
            carried_over=days(carried_over),
            forfeited=days(forfeited),
            carried_out=days(carried_out),
        )
        self._accrual_rate = days(accrual_rate)
        self._max_carry_over = days(max_carry_over)
        self._max_balance = days(max_balance) if max_balance is not None else None
        self._closed = is_closed
        self.version = version

    @classmethod
    def open(
        cls,
        employee_id: str,
        year: int,
        leave_type: LeaveType,
        policy: LeavePolicy | None = None,
        *,
        opening: object = 0,
        carried_over: object = 0,
    ) -> LeaveBalance:
        """Fresh ledger configured from *policy* (type defaults when omitted)."""
        policy = policy or default_policy(leave_type)
        return cls(
            employee_id=employee_id,
            year=year,
            leave_type=leave_type,
            opening=opening,
            carried_over=carried_over,
            accrual_rate=policy.accrual_rate,
            max_carry_over=policy.max_carry_over,
            max_balance=policy.max_balance,
        )

    # --- Derived ---

    @property
    def available(self) -> Decimal:
        return self._available(self._values)

    def has_sufficient_balance(self, requested: object) -> bool:
        return self.available >= days(requested)

    # --- Ledger operations ---

    def accrue(self, amount: object, period: str, *, accrued_at: datetime) -> AccrualRecord:
        """Credit a monthly accrual, capped at ``max_balance`` when set."""
        amount = _positive(amount)
        before = self.available
        if self._max_balance is not None:
            amount = max(Decimal(0), min(amount, self._max_balance - before))
        if amount > 0:
            self._apply(accrued=amount)
        return AccrualRecord(
            employee_id=self._employee_id,
            leave_type=self._leave_type,
            period=period,
            days=amount,
            balance_before=before,
            balance_after=self.available,
            accrued_at=accrued_at,
        )

    def add_to_pending(self, amount: object) -> None:
        """Reserve days for a new request. Refuses to overdraw."""
        amount = _positive(amount)
        if self.available < amount:
            raise InsufficientLeaveBalance(amount, self.available)
        self._apply(pending=amount)

    def remove_from_pending(self, amount: object) -> None:
        """Release a reservation (request rejected or cancelled while Pending)."""
        self._apply(pending=-_positive(amount))

    def deduct(self, amount: object) -> None:
        """Consume reserved days on approval: ``used += d; pending -= d``."""
        amount = _positive(amount)
        self._apply(used=amount, pending=-amount)

    def restore(self, amount: object) -> None:
        """Give back consumed days when an approved request is cancelled."""
        self._apply(used=-_positive(amount))

    def adjust(self, amount: object) -> None:
        """Manual correction. Negative values reverse earlier adjustments."""
        amount = days(amount)
        if amount == 0:
            msg = "Adjustment cannot be zero"
            raise InvariantViolation(msg, rule="ledger.positive_days")
        self._apply(adjusted=amount)

    def forfeit(self, amount: object) -> None:
        self._apply(forfeited=_positive(amount))

    def carry_in(self, amount: object) -> None:
        """Credit days carried over from the previous year's ledger."""
        self._apply(carried_over=_positive(amount))

    def close_year(self, policy: LeavePolicy | None = None) -> LeaveBalance:
        """Close this year and open the next one.

        Up to ``max_carry_over`` days move out as ``carried_out`` and into
        the new ledger as ``carried_over``; the rest is forfeited. Requires no
        pending reservations. The closed ledger ends with nothing available.
        """
        if self._values["pending"] > 0:
            msg = f"Cannot close {self._year} {self._leave_type} ledger with pending days"
            raise BusinessRuleViolation(msg, rule="ledger.pending_at_close")
        self._ensure_open()
        available = self.available
        carry = min(available, self._max_carry_over)
        self._apply(forfeited=available - carry, carried_out=carry)
        self._closed = True

        if policy is None:
            policy = LeavePolicy(
                accrual_rate=self._accrual_rate,
                max_carry_over=self._max_carry_over,
                max_balance=self._max_balance,
            )
        return LeaveBalance.open(
            self._employee_id,
            self._year + 1,
            self._leave_type,
            policy,
            carried_over=carry,
        )

    # --- Accessors ---

    @property
    def employee_id(self) -> str:
        return self._employee_id

    @property
    def year(self) -> int:
        return self._year

    @property
    def leave_type(self) -> LeaveType:
        return self._leave_type

    @property
    def opening(self) -> Decimal:
        return self._values["opening"]

    @property
    def accrued(self) -> Decimal:
        return self._values["accrued"]

    @property
    def used(self) -> Decimal:
        return self._values["used"]

    @property
    def pending(self) -> Decimal:
        return self._values["pending"]

    @property
    def adjusted(self) -> Decimal:
        return self._values["adjusted"]

    @property
    def carried_over(self) -> Decimal:
        return self._values["carried_over"]

    @property
    def forfeited(self) -> Decimal:
        return self._values["forfeited"]

    @property
    def carried_out(self) -> Decimal:
        return self._values["carried_out"]

    @property
    def accrual_rate(self) -> Decimal:
        return self._accrual_rate

    @property
    def max_carry_over(self) -> Decimal:
        return self._max_carry_over

    @property
    def max_balance(self) -> Decimal | None:
        return self._max_balance

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def key(self) -> tuple[str, int, str]:
        return (self._employee_id, self._year, str(self._leave_type))

    def snapshot(self) -> dict[str, str]:
        """Counter values plus ``available``, as strings."""
        data = {name: str(value) for name, value in self._values.items()}
        data["available"] = str(self.available)
        return data

    # --- Internal ---

    @staticmethod
    def _available(values: dict[str, Decimal]) -> Decimal:
        return (
            values["opening"]
            + values["accrued"]
            + values["adjusted"]
            + values["carried_over"]
            - values["used"]
            - values["pending"]
            - values["forfeited"]
            - values["carried_out"]
        )

    def _ensure_open(self) -> None:
        if self._closed:
            msg = f"The {self._year} {self._leave_type} ledger for {self._employee_id} is closed"
            raise BusinessRuleViolation(msg, rule="ledger.closed")

    def _apply(self, **deltas: Decimal) -> None:
        self._ensure_open()
        proposed = dict(self._values)
        for name, delta in deltas.items():
            proposed[name] = proposed[name] + delta
        self._commit(**proposed)

    def _commit(self, **values: Decimal) -> None:
        for name in _COUNTERS:
            if values[name] < 0:
                msg = f"Ledger counter '{name}' cannot go negative ({values[name]})"
                raise InvariantViolation(msg, rule=f"ledger.{name}_non_negative")
        if self._available(values) < 0:
            msg = f"Available balance cannot go negative ({self._available(values)})"
            raise InvariantViolation(msg, rule="ledger.available_non_negative")
        self._values = values
