"""AccrualService — scheduled monthly accrual and year-end close.

Both jobs are idempotent: accrual skips any (employee, leave type,
period) that already has an accrual record, and year-end close skips
ledgers that are already closed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from workforce.domain.ledger import accrual_period
from workforce.domain.lifecycle import EmploymentStatus
from workforce.services.base import BaseService

if TYPE_CHECKING:
    from workforce.infrastructure.store import StoreTransaction
    from workforce.services.result import ServiceResult

logger = logging.getLogger(__name__)


class AccrualService(BaseService):
    def accrue_month(self, year: int, month: int) -> ServiceResult:
        """Credit one month of leave to every Active employee.

        Types with a zero accrual rate are skipped. Re-running the same
        period credits nothing.
        """

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            period = accrual_period(year, month)
            leave_config = self._store.settings.leave
            accrued: list[dict[str, str]] = []
            skipped = 0
            for employee_id in txn.employees.list_ids(status=EmploymentStatus.ACTIVE):
                for leave_type, rate in leave_config.accrual_rates.items():
                    if rate <= 0:
                        continue
                    if txn.balances.has_accrual(employee_id, leave_type, period):
                        skipped += 1
                        continue
                    ledger = self._ledger(txn, employee_id, year, leave_type)
                    if ledger.is_closed:
                        warnings.append(f"{employee_id} {leave_type} {year} ledger is closed")
                        continue
                    record = ledger.accrue(rate, period, accrued_at=self._clock.now())
                    txn.save(ledger)
                    txn.balances.record_accrual(record)
                    accrued.append(
                        {
                            "employee_id": employee_id,
                            "leave_type": str(leave_type),
                            "days": str(record.days),
                            "balance_after": str(record.balance_after),
                        }
                    )
            logger.info("Accrual %s: %d credited, %d already done", period, len(accrued), skipped)
            return {"period": period, "accrued": accrued, "count": len(accrued), "skipped": skipped}

        return self._run("accrue_leave", work)

    def close_year(self, year: int) -> ServiceResult:
        """Close every open ledger of *year* and carry balances into ``year + 1``.

        Ledgers with pending reservations are left open and reported as
        warnings; close them again once those requests are decided.
        """

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            leave_config = self._store.settings.leave
            closed: list[dict[str, str]] = []
            for ledger in txn.balances.list_open(year):
                if ledger.pending > 0:
                    warnings.append(
                        f"{ledger.employee_id} {ledger.leave_type} {year}: "
                        f"{ledger.pending} day(s) still pending"
                    )
                    continue
                successor = ledger.close_year(leave_config.policy_for(ledger.leave_type))
                txn.save(ledger)
                existing = txn.balances.get_for_update(
                    ledger.employee_id, year + 1, ledger.leave_type
                )
                if existing is None:
                    txn.save(successor)
                elif successor.carried_over > 0:
                    existing.carry_in(successor.carried_over)
                    txn.save(existing)
                closed.append(
                    {
                        "employee_id": ledger.employee_id,
                        "leave_type": str(ledger.leave_type),
                        "carried_over": str(successor.carried_over),
                        "forfeited": str(ledger.forfeited),
                    }
                )
            return {"year": year, "closed": closed, "count": len(closed)}

        return self._run("close_year", work)

