"""Shared value objects: Money, Email, PhoneNumber, DateRange.

All value objects are frozen dataclasses that validate (and normalise)
themselves on construction, raising :class:`InvariantViolation`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from workforce.domain.errors import InvariantViolation

_CENT = Decimal("0.01")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")
_PHONE_STRIP_RE = re.compile(r"[^0-9+]")

MIN_PHONE_DIGITS = 10


def to_decimal(value: object, *, rule: str = "decimal.parse") -> Decimal:
    """Coerce int/float/str/Decimal to Decimal, rejecting anything else."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        msg = f"Not a number: {value!r}"
        raise InvariantViolation(msg, rule=rule)
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            msg = f"Not a number: {value!r}"
            raise InvariantViolation(msg, rule=rule) from exc
    else:
        msg = f"Not a number: {value!r}"
        raise InvariantViolation(msg, rule=rule)
    if not result.is_finite():
        msg = f"Not a finite number: {value!r}"
        raise InvariantViolation(msg, rule=rule)
    return result


# ---------------------------------------------------------------------------
# Money
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Money:
    """Non-negative amount in a single currency, held to the cent."""

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        amount = to_decimal(self.amount, rule="money.amount")
        if amount < 0:
            msg = f"Money amount cannot be negative: {amount}"
            raise InvariantViolation(msg, rule="money.non_negative")
        currency = str(self.currency).strip().upper()
        if not _CURRENCY_RE.match(currency):
            msg = f"Invalid currency code: {self.currency!r}"
            raise InvariantViolation(msg, rule="money.currency")
        object.__setattr__(self, "amount", amount.quantize(_CENT, rounding=ROUND_HALF_UP))
        object.__setattr__(self, "currency", currency)

    @classmethod
    def zero(cls, currency: str = "USD") -> Money:
        return cls(Decimal(0), currency)

    def _check_currency(self, other: Money) -> None:
        if other.currency != self.currency:
            msg = f"Currency mismatch: {self.currency} vs {other.currency}"
            raise InvariantViolation(msg, rule="money.same_currency")

    def add(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def subtract(self, other: Money) -> Money:
        self._check_currency(other)
        if other.amount > self.amount:
            msg = f"Cannot subtract {other} from {self}: result would be negative"
            raise InvariantViolation(msg, rule="money.non_negative")
        return Money(self.amount - other.amount, self.currency)

    def multiply(self, factor: object) -> Money:
        return Money(self.amount * to_decimal(factor, rule="money.factor"), self.currency)

    def divide(self, divisor: object) -> Money:
        value = to_decimal(divisor, rule="money.divisor")
        if value == 0:
            msg = "Cannot divide money by zero"
            raise InvariantViolation(msg, rule="money.divide_by_zero")
        return Money(self.amount / value, self.currency)

    def is_greater_than(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount > other.amount

    def is_less_than(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount < other.amount

    def __str__(self) -> str:
        return f"{self.amount:,.2f} {self.currency}"


# ---------------------------------------------------------------------------
# Contact details
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Email:
    """Lower-cased, trimmed email address."""

    value: str

    def __post_init__(self) -> None:
        normalized = str(self.value).strip().lower()
        if not _EMAIL_RE.match(normalized):
            msg = f"Invalid email address: {self.value!r}"
            raise InvariantViolation(msg, rule="email.format")
        object.__setattr__(self, "value", normalized)

    @property
    def domain(self) -> str:
        return self.value.split("@", 1)[1]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PhoneNumber:
    """Phone number reduced to digits and ``+``."""

    value: str

    def __post_init__(self) -> None:
        normalized = _PHONE_STRIP_RE.sub("", str(self.value))
        digits = sum(ch.isdigit() for ch in normalized)
        if digits < MIN_PHONE_DIGITS:
            msg = f"Phone number must contain at least {MIN_PHONE_DIGITS} digits: {self.value!r}"
            raise InvariantViolation(msg, rule="phone.length")
        object.__setattr__(self, "value", normalized)

    def formatted(self) -> str:
        """``(XXX) XXX-XXXX`` for ten-digit numbers, the raw value otherwise."""
        if len(self.value) == MIN_PHONE_DIGITS and self.value.isdigit():
            v = self.value
            return f"({v[:3]}) {v[3:6]}-{v[6:]}"
        return self.value

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DateRange:
    """Closed interval of calendar dates.

    INVARIANT: ``start <= end``.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            msg = f"Start date {self.start} must not be after end date {self.end}"
            raise InvariantViolation(msg, rule="date_range.order")

    @property
    def duration_in_days(self) -> int:
        return (self.end - self.start).days

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def overlaps(self, other: DateRange) -> bool:
        return self.start <= other.end and other.start <= self.end

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"
