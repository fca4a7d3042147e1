"""Command group: scheduled leave jobs and balance inspection."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import click

from workforce.commands._base import WorkforceGroup

if TYPE_CHECKING:
    from workforce.commands._context import AppContext

_PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")

_LEAVE_EXAMPLES = """\
  workforce leave accrue --period 2025-03
  workforce leave balance EMP-2025-0001
  workforce leave balance EMP-2025-0001 --year 2024
  workforce leave adjust EMP-2025-0001 Vacation --days -1.5
  workforce leave complete
  workforce leave close-year 2024"""


def _parse_period(
    _ctx: click.Context, _param: click.Parameter, value: str | None
) -> tuple[int, int] | None:
    if value is None:
        return None
    match = _PERIOD_RE.match(value)
    if match is None:
        msg = f"expected YYYY-MM, got {value!r}"
        raise click.BadParameter(msg)
    return int(match.group(1)), int(match.group(2))


@click.group(cls=WorkforceGroup, examples=_LEAVE_EXAMPLES)
def leave() -> None:
    """Leave accrual, balances, and year-end jobs."""


@leave.command(
    examples="""\
  workforce leave accrue
  workforce leave accrue --period 2025-03"""
)
@click.option(
    "--period",
    callback=_parse_period,
    default=None,
    help="Accrual month as YYYY-MM (default: current month).",
)
@click.pass_obj
def accrue(app: AppContext, period: tuple[int, int] | None) -> None:
    """Credit one month of leave to every active employee."""
    from workforce.services.accrual import AccrualService

    store = app.store
    if period is None:
        today = store.clock.today()
        period = (today.year, today.month)
    app.emit(AccrualService(store).accrue_month(*period))


@leave.command(examples="  workforce leave balance EMP-2025-0001 --year 2025")
@click.argument("employee_id")
@click.option("--year", type=int, default=None, help="Ledger year (default: current year).")
@click.pass_obj
def balance(app: AppContext, employee_id: str, year: int | None) -> None:
    """Show an employee's ledgers for one year."""
    from workforce.services.leave import LeaveService

    app.emit(LeaveService(app.store).balance(employee_id, year))


@leave.command(examples="  workforce leave adjust EMP-2025-0001 Vacation --days 2")
@click.argument("employee_id")
@click.argument("leave_type")
@click.option("--days", "amount", required=True, help="Signed day count, e.g. 2 or -1.5.")
@click.option("--year", type=int, default=None, help="Ledger year (default: current year).")
@click.pass_obj
def adjust(
    app: AppContext, employee_id: str, leave_type: str, amount: str, year: int | None
) -> None:
    """Apply a signed manual correction to a ledger."""
    from workforce.services.leave import LeaveService

    svc = LeaveService(app.store)
    app.emit(svc.adjust_balance(employee_id, leave_type, amount, year=year))


@leave.command(examples="  workforce leave complete")
@click.pass_obj
def complete(app: AppContext) -> None:
    """Mark approved leave that has ended as completed."""
    from workforce.services.leave import LeaveService

    app.emit(LeaveService(app.store).complete_due())


@leave.command("close-year", examples="  workforce leave close-year 2024")
@click.argument("year", type=int)
@click.pass_obj
def close_year(app: AppContext, year: int) -> None:
    """Close YEAR's ledgers, carrying balances into the next year."""
    from workforce.services.accrual import AccrualService

    app.emit(AccrualService(app.store).close_year(year))
