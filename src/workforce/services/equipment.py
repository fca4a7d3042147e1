"""EquipmentService — stock registration, issue, return, transfer, retirement.

Equipment can be addressed by its UUID or by its ``ASSET-YYYY-NNNN`` tag.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from workforce.domain.equipment import Equipment, EquipmentType, SerialNumber
from workforce.domain.errors import BusinessRuleViolation
from workforce.domain.ids import ID_PREFIXES, EmployeeId, EquipmentId
from workforce.domain.values import Money
from workforce.services.base import BaseService

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal

    from workforce.infrastructure.store import StoreTransaction
    from workforce.services.result import ServiceResult


def _load(txn: StoreTransaction, ref: str) -> Equipment:
    if ref.startswith(ID_PREFIXES["asset"]):
        return txn.equipment.load_by_asset_tag(ref)
    return txn.equipment.load(ref)


class EquipmentService(BaseService):
    def add(
        self,
        *,
        serial_number: str,
        equipment_type: str,
        brand: str,
        model: str,
        purchase_price: Decimal | int | str,
        currency: str = "USD",
        purchase_date: date | None = None,
    ) -> ServiceResult:
        """Register new stock as Available under the next asset tag."""

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            serial = SerialNumber(serial_number)
            if txn.equipment.serial_in_use(serial):
                msg = f"Serial number {serial} is already registered"
                raise BusinessRuleViolation(msg, rule="equipment.serial_unique")
            item = Equipment.add(
                EquipmentId.generate(),
                txn.equipment.next_asset_tag(),
                serial,
                EquipmentType.parse(equipment_type),
                brand,
                model,
                Money(purchase_price, currency),
                purchase_date,
                clock=self._clock,
            )
            txn.save(item)
            return item.summary()

        return self._run("add_equipment", work)

    def get(self, ref: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            item = _load(txn, ref)
            data = item.summary()
            data["history"] = [
                {
                    "assignment_id": a.assignment_id,
                    "employee_id": str(a.employee_id),
                    "assigned_at": a.assigned_at.isoformat(),
                    "returned_at": a.returned_at.isoformat() if a.returned_at else None,
                    "condition": a.return_condition,
                }
                for a in item.assignment_history
            ]
            return data

        return self._run("get_equipment", work)

    def issue(self, ref: str, employee_id: str, *, notes: str = "") -> ServiceResult:
        """Issue to an employee who exists and is not Terminated."""

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            employee = self._require_employed(txn, employee_id)
            item = _load(txn, ref)
            assignment = item.issue(employee.employee_id, clock=self._clock, notes=notes)
            txn.save(item)
            return {**item.summary(), "assignment_id": assignment.assignment_id}

        return self._run("issue_equipment", work)

    def return_(self, ref: str, condition: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            item = _load(txn, ref)
            closed = item.return_(condition, clock=self._clock)
            txn.save(item)
            return {
                **item.summary(),
                "assignment_id": closed.assignment_id,
                "days_held": closed.duration_in_days(),
            }

        return self._run("return_equipment", work)

    def transfer(self, ref: str, to_employee_id: str, *, notes: str = "") -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            target = self._require_employed(txn, to_employee_id)
            item = _load(txn, ref)
            opened = item.transfer(target.employee_id, clock=self._clock, notes=notes)
            txn.save(item)
            return {**item.summary(), "assignment_id": opened.assignment_id}

        return self._run("transfer_equipment", work)

    def schedule_maintenance(self, ref: str, reason: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            item = _load(txn, ref)
            item.schedule_maintenance(reason, clock=self._clock)
            txn.save(item)
            return item.summary()

        return self._run("schedule_maintenance", work)

    def complete_maintenance(self, ref: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            item = _load(txn, ref)
            item.complete_maintenance(clock=self._clock)
            txn.save(item)
            return item.summary()

        return self._run("complete_maintenance", work)

    def decommission(self, ref: str, reason: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            item = _load(txn, ref)
            item.decommission(reason, clock=self._clock)
            txn.save(item)
            return item.summary()

        return self._run("decommission_equipment", work)

    def assigned_to(self, employee_id: str) -> ServiceResult:
        """Equipment currently held by *employee_id* (read-only)."""

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            items = txn.equipment.assigned_to(EmployeeId(employee_id))
            return {"employee_id": employee_id, "items": [i.summary() for i in items]}

        return self._run("equipment_assigned_to", work)
