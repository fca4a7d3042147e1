"""Tests for BaseService: retries, error mapping, and event dispatch."""

from __future__ import annotations

from typing import Any

from tests.conftest import hire
from workforce.domain.errors import InvariantViolation
from workforce.infrastructure.repositories import ConcurrencyConflict
from workforce.infrastructure.store import Store, StoreTransaction
from workforce.services.base import BaseService
from workforce.services.result import ServiceResult


class _Probe(BaseService):
    """Runs a scripted work function and counts how often it was called."""

    def __init__(self, store: Store, *, conflicts: int = 0) -> None:
        super().__init__(store)
        self.calls = 0
        self._conflicts = conflicts

    def run(self, employee_id: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            self.calls += 1
            employee = txn.employees.load(employee_id)
            employee.place_on_leave(clock=self._clock)
            txn.save(employee)
            if self.calls <= self._conflicts:
                raise ConcurrencyConflict("employee", employee_id)
            return employee.summary()

        return self._run("probe", work)


class TestRetry:
    def test_conflict_is_retried(self, store: Store) -> None:
        emp_id = hire(store)["employee_id"]
        probe = _Probe(store, conflicts=1)
        result = probe.run(emp_id)
        assert result.ok
        assert probe.calls == 2
        assert result.meta is not None
        assert result.meta["attempts"] == 2
        assert result.data["status"] == "OnLeave"

    def test_conflict_after_retries_exhausted(self, store: Store) -> None:
        emp_id = hire(store)["employee_id"]
        probe = _Probe(store, conflicts=10)
        result = probe.run(emp_id)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "CONFLICT"
        assert result.error.detail == {"kind": "employee", "key": emp_id}
        assert probe.calls == store.settings.store.conflict_retries + 1

        with store.transaction() as txn:
            assert txn.employees.load(emp_id).is_active


class TestErrorMapping:
    def test_not_found(self, store: Store) -> None:
        result = _Probe(store).run("EMP-2025-0404")
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
        assert result.error.detail["kind"] == "employee"

    def test_domain_error_rolls_back(self, store: Store) -> None:
        emp_id = hire(store)["employee_id"]

        class Failing(BaseService):
            def run(self) -> ServiceResult:
                def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
                    employee = txn.employees.load(emp_id)
                    employee.place_on_leave(clock=self._clock)
                    txn.save(employee)
                    msg = "nope"
                    raise InvariantViolation(msg, rule="probe.rule")

                return self._run("failing", work)

        result = Failing(store).run()
        assert result.error is not None
        assert result.error.code == "INVARIANT_VIOLATION"
        assert result.error.detail == {"rule": "probe.rule"}
        with store.transaction() as txn:
            assert txn.employees.load(emp_id).is_active


class TestDispatch:
    def test_events_reported_in_meta(self, store: Store) -> None:
        emp_id = hire(store)["employee_id"]
        result = _Probe(store).run(emp_id)
        assert result.meta is not None
        assert [e["hook_name"] for e in result.meta["events"]] == ["employee_status_changed"]
        assert result.meta["events"][0]["status"] == "completed"

    def test_no_event_bus_means_no_dispatch(self, store: Store) -> None:
        emp_id = hire(store)["employee_id"]
        assert store.event_bus is not None
        store.event_bus.shutdown()
        store._event_bus = None
        result = _Probe(store).run(emp_id)
        assert result.ok
        assert result.meta == {"attempts": 1}
