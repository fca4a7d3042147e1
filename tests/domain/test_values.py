"""Tests for shared value objects: Money, Email, PhoneNumber, DateRange."""

from datetime import date
from decimal import Decimal

import pytest

from workforce.domain.errors import InvariantViolation
from workforce.domain.values import DateRange, Email, Money, PhoneNumber, to_decimal


class TestToDecimal:
    @pytest.mark.parametrize(
        "raw,expected",
        [(10, Decimal(10)), ("2.5", Decimal("2.5")), (Decimal("3.25"), Decimal("3.25"))],
    )
    def test_accepts_numbers(self, raw: object, expected: Decimal) -> None:
        assert to_decimal(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", None, True, "NaN", "Infinity"])
    def test_rejects_non_numbers(self, raw: object) -> None:
        with pytest.raises(InvariantViolation):
            to_decimal(raw)


class TestMoney:
    def test_rounds_to_cents(self) -> None:
        assert Money("10.005").amount == Decimal("10.01")

    def test_normalises_currency(self) -> None:
        assert Money(5, " eur ").currency == "EUR"

    def test_negative_rejected(self) -> None:
        with pytest.raises(InvariantViolation) as exc:
            Money(-1)
        assert exc.value.rule == "money.non_negative"

    def test_bad_currency_rejected(self) -> None:
        with pytest.raises(InvariantViolation):
            Money(1, "DOLLARS")

    def test_arithmetic(self) -> None:
        a, b = Money(100), Money("25.50")
        assert a.add(b) == Money("125.50")
        assert a.subtract(b) == Money("74.50")
        assert a.multiply("1.1") == Money(110)
        assert a.divide(3) == Money("33.33")

    def test_subtract_below_zero_rejected(self) -> None:
        with pytest.raises(InvariantViolation):
            Money(1).subtract(Money(2))

    def test_divide_by_zero_rejected(self) -> None:
        with pytest.raises(InvariantViolation) as exc:
            Money(1).divide(0)
        assert exc.value.rule == "money.divide_by_zero"

    def test_currency_mismatch_rejected(self) -> None:
        with pytest.raises(InvariantViolation) as exc:
            Money(1, "USD").add(Money(1, "EUR"))
        assert exc.value.rule == "money.same_currency"

    def test_comparisons(self) -> None:
        assert Money(2).is_greater_than(Money(1))
        assert Money(1).is_less_than(Money(2))
        assert not Money(2).is_less_than(Money(2))

    def test_str(self) -> None:
        assert str(Money(60000)) == "60,000.00 USD"


class TestEmail:
    def test_normalised(self) -> None:
        email = Email("  Ada@Example.COM ")
        assert email.value == "ada@example.com"
        assert email.domain == "example.com"

    @pytest.mark.parametrize("raw", ["", "ada", "ada@", "@example.com", "a b@example.com"])
    def test_invalid(self, raw: str) -> None:
        with pytest.raises(InvariantViolation):
            Email(raw)


class TestPhoneNumber:
    def test_strips_formatting(self) -> None:
        assert PhoneNumber("(555) 123-4567").value == "5551234567"

    def test_formatted_ten_digits(self) -> None:
        assert PhoneNumber("555.123.4567").formatted() == "(555) 123-4567"

    def test_international_kept_raw(self) -> None:
        phone = PhoneNumber("+44 20 7946 0958")
        assert phone.formatted() == "+442079460958"

    def test_too_short(self) -> None:
        with pytest.raises(InvariantViolation):
            PhoneNumber("555-1234")


class TestDateRange:
    def test_start_after_end_rejected(self) -> None:
        with pytest.raises(InvariantViolation):
            DateRange(date(2025, 3, 5), date(2025, 3, 4))

    def test_single_day(self) -> None:
        r = DateRange(date(2025, 3, 5), date(2025, 3, 5))
        assert r.duration_in_days == 0
        assert r.contains(date(2025, 3, 5))

    def test_overlaps(self) -> None:
        a = DateRange(date(2025, 3, 1), date(2025, 3, 10))
        assert a.overlaps(DateRange(date(2025, 3, 10), date(2025, 3, 12)))
        assert not a.overlaps(DateRange(date(2025, 3, 11), date(2025, 3, 12)))
