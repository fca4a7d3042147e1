"""Property tests: ledger conservation and salary monotonicity.

Hypothesis drives random sequences of ledger operations, including ones
the ledger must refuse, and checks after every step that the balance
identity holds and no counter goes negative. A refused operation must
leave the ledger exactly as it was.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from workforce.domain.clock import FixedClock
from workforce.domain.employee import Employee, PersonalInfo, Position, Salary, WorkLocation
from workforce.domain.errors import BusinessRuleViolation, DomainError
from workforce.domain.ids import EmployeeId
from workforce.domain.leave import LeaveType
from workforce.domain.ledger import LeaveBalance, LeavePolicy

NOW = datetime(2025, 3, 1, tzinfo=UTC)
COUNTERS = (
    "opening",
    "accrued",
    "used",
    "pending",
    "adjusted",
    "carried_over",
    "forfeited",
    "carried_out",
)

amounts = st.decimals(min_value=Decimal("-5"), max_value=Decimal("15"), places=2)
operations = st.lists(
    st.tuples(
        st.sampled_from(
            [
                "accrue",
                "add_to_pending",
                "remove_from_pending",
                "deduct",
                "restore",
                "adjust",
                "forfeit",
                "carry_in",
            ]
        ),
        amounts,
    ),
    max_size=40,
)


def _state(ledger: LeaveBalance) -> dict[str, Decimal]:
    return {name: getattr(ledger, name) for name in COUNTERS}


def _apply(ledger: LeaveBalance, op: str, amount: Decimal) -> None:
    if op == "accrue":
        ledger.accrue(amount, "2025-03", accrued_at=NOW)
    else:
        getattr(ledger, op)(amount)


def _check_identity(ledger: LeaveBalance) -> None:
    s = _state(ledger)
    expected = (
        s["opening"]
        + s["accrued"]
        + s["adjusted"]
        + s["carried_over"]
        - s["used"]
        - s["pending"]
        - s["forfeited"]
        - s["carried_out"]
    )
    assert ledger.available == expected
    assert ledger.available >= 0
    assert all(value >= 0 for value in s.values())


@given(ops=operations, opening=st.decimals(min_value=0, max_value=20, places=2))
@settings(max_examples=200)
def test_identity_holds_after_every_operation(
    ops: list[tuple[str, Decimal]], opening: Decimal
) -> None:
    ledger = LeaveBalance.open("EMP-2025-0001", 2025, LeaveType.VACATION, opening=opening)
    for op, amount in ops:
        before = _state(ledger)
        try:
            _apply(ledger, op, amount)
        except DomainError:
            assert _state(ledger) == before
        _check_identity(ledger)


@given(
    ops=operations,
    max_balance=st.decimals(min_value=1, max_value=30, places=2),
)
@settings(max_examples=100)
def test_accrual_never_exceeds_cap(ops: list[tuple[str, Decimal]], max_balance: Decimal) -> None:
    policy = LeavePolicy(accrual_rate=Decimal(2), max_balance=max_balance)
    ledger = LeaveBalance.open("EMP-2025-0001", 2025, LeaveType.VACATION, policy)
    for op, amount in ops:
        available = ledger.available
        try:
            _apply(ledger, op, amount)
        except DomainError:
            continue
        if op == "accrue":
            assert ledger.available <= max(available, max_balance)


@given(
    credits=st.decimals(min_value=0, max_value=40, places=2),
    max_carry=st.decimals(min_value=0, max_value=10, places=2),
)
def test_close_year_conserves_days(credits: Decimal, max_carry: Decimal) -> None:
    policy = LeavePolicy(max_carry_over=max_carry)
    ledger = LeaveBalance.open("EMP-2025-0001", 2025, LeaveType.VACATION, policy)
    if credits > 0:
        ledger.adjust(credits)
    available = ledger.available

    successor = ledger.close_year()

    assert ledger.is_closed
    assert ledger.available == 0
    assert successor.year == 2026
    assert successor.carried_over == min(available, max_carry)
    assert ledger.carried_out == successor.carried_over
    assert successor.carried_over + ledger.forfeited == available
    _check_identity(ledger)


@given(
    requested=st.lists(st.integers(min_value=1, max_value=5), max_size=8),
    granted=st.integers(min_value=0, max_value=25),
)
def test_request_lifecycle_restores_balance(requested: list[int], granted: int) -> None:
    """Reserve, approve, then cancel every request: the ledger ends where it started."""
    ledger = LeaveBalance.open("EMP-2025-0001", 2025, LeaveType.VACATION)
    if granted:
        ledger.adjust(granted)
    start = ledger.available

    reserved: list[int] = []
    for n in requested:
        if ledger.has_sufficient_balance(n):
            ledger.add_to_pending(n)
            reserved.append(n)
    assert ledger.pending == sum(reserved)

    for i, n in enumerate(reserved):
        if i % 2:
            ledger.remove_from_pending(n)
        else:
            ledger.deduct(n)
            ledger.restore(n)

    assert ledger.pending == 0
    assert ledger.used == 0
    assert ledger.available == start


@given(
    salaries=st.lists(st.integers(min_value=30000, max_value=400000), min_size=1, max_size=12)
)
@settings(max_examples=100)
def test_salary_never_decreases(salaries: list[int]) -> None:
    clock = FixedClock(datetime(2025, 1, 10, 9, tzinfo=UTC))
    employee = Employee.hire(
        employee_id=EmployeeId("EMP-2025-0001"),
        personal_info=PersonalInfo(
            first_name="Ada", last_name="Lovelace", email="ada@example.com"
        ),
        position=Position.DEVELOPER,
        salary=Salary.of(60000),
        location=WorkLocation.REMOTE,
        hire_date=date(2025, 1, 10),
        clock=clock,
    )
    for amount in salaries:
        current = employee.salary.amount
        try:
            employee.change_position(
                Position.SENIOR_DEVELOPER, Salary.of(amount), date(2025, 6, 1), "", clock=clock
            )
        except BusinessRuleViolation as exc:
            assert exc.rule == "salary.non_decreasing"
            assert amount < current
            assert employee.salary.amount == current
        else:
            assert amount >= current
            assert employee.salary.amount == amount
