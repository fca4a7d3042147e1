"""BaseService — foundation for all workforce services.

Every service receives a :class:`Store` at construction time and runs
each use-case through :meth:`BaseService._run`:

1. open a transaction (``BEGIN IMMEDIATE``), load, mutate, save
2. commit, with released events written to the outbox
3. dispatch the committed events to plugins

A :class:`ConcurrencyConflict` restarts the whole use-case from step 1,
up to ``store.conflict_retries`` extra attempts. Domain errors roll the
transaction back and come back as a failed :class:`ServiceResult`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from workforce.domain.errors import CannotModifyTerminatedEmployee, DomainError
from workforce.domain.ledger import LeaveBalance
from workforce.domain.lifecycle import EmploymentStatus
from workforce.infrastructure.repositories import ConcurrencyConflict, NotFoundError
from workforce.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from workforce.domain.clock import Clock
    from workforce.domain.employee import Employee
    from workforce.domain.leave import LeaveType
    from workforce.infrastructure.store import Store, StoreTransaction

logger = logging.getLogger(__name__)


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class EmployeeService(BaseService):
            def relocate(self, employee_id: str, ...) -> ServiceResult:
                def work(txn, warnings):
                    employee = txn.employees.load(employee_id)
                    employee.change_location(..., clock=self._clock)
                    txn.save(employee)
                    return employee.summary()

                return self._run("relocate", work)
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    @property
    def _clock(self) -> Clock:
        return self._store.clock

    def _run(
        self,
        op: str,
        work: Callable[[StoreTransaction, list[str]], dict[str, Any]],
    ) -> ServiceResult:
        """Execute *work* as one atomic use-case and wrap the outcome."""
        attempts = self._store.settings.store.conflict_retries + 1
        for attempt in range(1, attempts + 1):
            warnings: list[str] = []
            try:
                with self._store.transaction() as txn:
                    data = work(txn, warnings)
            except ConcurrencyConflict as exc:
                if attempt < attempts:
                    logger.debug("%s: %s (attempt %d/%d)", op, exc, attempt, attempts)
                    continue
                return _failure(op, "CONFLICT", str(exc), {"kind": exc.kind, "key": exc.key})
            except NotFoundError as exc:
                return _failure(op, "NOT_FOUND", str(exc), {"kind": exc.kind, "key": exc.key})
            except DomainError as exc:
                logger.debug("%s rejected: %s", op, exc)
                return _failure(op, exc.code, exc.message, exc.to_detail())

            dispatched = self._dispatch_events(txn.outbox_ids, warnings)
            meta: dict[str, Any] = {"attempts": attempt}
            if dispatched:
                meta["events"] = dispatched
            return ServiceResult(ok=True, op=op, data=data, warnings=warnings, meta=meta)

        raise AssertionError("unreachable")  # pragma: no cover

    def _dispatch_events(self, outbox_ids: list[int], warnings: list[str]) -> list[dict[str, Any]]:
        """Hand committed outbox rows to the event bus.

        INVARIANT: Plugin failures are warnings, never errors. Undelivered
        rows stay in the outbox for ``drain()``.
        """
        bus = self._store.event_bus
        if bus is None or not outbox_ids:
            return []
        try:
            results = bus.dispatch_pending(outbox_ids)
        except Exception:
            logger.warning("Event dispatch failed", exc_info=True)
            warnings.append("Event dispatch failed; events remain queued in the outbox")
            return []
        for result in results:
            if result["status"] in ("failed", "dead_letter"):
                warnings.append(f"Listener for {result['hook_name']} failed ({result['status']})")
        return results

    # --- Shared checks ---

    @staticmethod
    def _require_employed(txn: StoreTransaction, employee_id: str) -> Employee:
        """Load an employee who is not Terminated."""
        employee = txn.employees.load(employee_id)
        if employee.status is EmploymentStatus.TERMINATED:
            raise CannotModifyTerminatedEmployee(employee.id)
        return employee

    def _ledger(
        self, txn: StoreTransaction, employee_id: str, year: int, leave_type: LeaveType
    ) -> LeaveBalance:
        """Lock and return the ledger, opening one from the configured policy if absent."""
        ledger = txn.balances.get_for_update(employee_id, year, leave_type)
        if ledger is None:
            policy = self._store.settings.leave.policy_for(leave_type)
            ledger = LeaveBalance.open(employee_id, year, leave_type, policy)
        return ledger


def _failure(op: str, code: str, message: str, detail: dict[str, Any]) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=detail),
    )
