"""Tests for EquipmentService."""

from __future__ import annotations

from datetime import date

from tests.conftest import add_equipment, hire
from workforce.domain.clock import FixedClock
from workforce.infrastructure.store import Store
from workforce.services.employee import EmployeeService
from workforce.services.equipment import EquipmentService


class TestAdd:
    def test_asset_tags_sequential(self, store: Store) -> None:
        first = add_equipment(store)
        second = add_equipment(store, serial_number="SN-000002", equipment_type="Monitor")
        assert first["asset_tag"] == "ASSET-2025-0001"
        assert second["asset_tag"] == "ASSET-2025-0002"
        assert first["status"] == "Available"

    def test_duplicate_serial_rejected(self, store: Store) -> None:
        add_equipment(store)
        result = EquipmentService(store).add(
            serial_number="SN-000001",
            equipment_type="Laptop",
            brand="Dell",
            model="XPS",
            purchase_price=1500,
        )
        assert result.error is not None
        assert result.error.detail["rule"] == "equipment.serial_unique"

    def test_future_purchase_date_rejected(self, store: Store) -> None:
        result = EquipmentService(store).add(
            serial_number="SN-000009",
            equipment_type="Laptop",
            brand="Dell",
            model="XPS",
            purchase_price=1500,
            purchase_date=date(2025, 12, 1),
        )
        assert result.error is not None
        assert result.error.code == "INVARIANT_VIOLATION"


class TestAssignment:
    def test_issue_return_cycle(self, store: Store, clock: FixedClock) -> None:
        emp_id = hire(store)["employee_id"]
        item = add_equipment(store)
        svc = EquipmentService(store)

        issued = svc.issue(item["asset_tag"], emp_id)
        assert issued.ok
        assert issued.data["assigned_to"] == emp_id

        again = svc.issue(item["equipment_id"], emp_id)
        assert again.error is not None
        assert again.error.detail["rule"] == "equipment.issue_requires_available"

        clock.advance(days=14)
        returned = svc.return_(item["asset_tag"], "Good")
        assert returned.data["status"] == "Available"
        assert returned.data["days_held"] == 14

        history = svc.get(item["asset_tag"])
        assert len(history.data["history"]) == 1
        assert history.data["history"][0]["condition"] == "Good"

    def test_damaged_return_then_maintenance(self, store: Store) -> None:
        emp_id = hire(store)["employee_id"]
        tag = add_equipment(store)["asset_tag"]
        svc = EquipmentService(store)
        svc.issue(tag, emp_id)
        assert svc.return_(tag, "Broken hinge").data["status"] == "InMaintenance"
        assert svc.complete_maintenance(tag).data["status"] == "Available"
        assert svc.decommission(tag, "End of life").data["status"] == "Decommissioned"

    def test_issue_to_terminated_employee_rejected(self, store: Store) -> None:
        emp_id = hire(store)["employee_id"]
        EmployeeService(store).terminate(
            emp_id,
            termination_date=date(2025, 3, 31),
            last_working_day=date(2025, 3, 31),
            termination_type="Voluntary",
            reason="",
        )
        tag = add_equipment(store)["asset_tag"]
        result = EquipmentService(store).issue(tag, emp_id)
        assert result.error is not None
        assert result.error.code == "EMPLOYEE_TERMINATED"

    def test_transfer(self, store: Store) -> None:
        alice = hire(store)["employee_id"]
        bob = hire(store, email="bob@example.com", first_name="Bob")["employee_id"]
        tag = add_equipment(store)["asset_tag"]
        svc = EquipmentService(store)
        svc.issue(tag, alice)

        moved = svc.transfer(tag, bob)
        assert moved.ok
        assert moved.data["assigned_to"] == bob
        assert svc.assigned_to(alice).data["items"] == []
        assert [i["asset_tag"] for i in svc.assigned_to(bob).data["items"]] == [tag]

    def test_unknown_asset(self, store: Store) -> None:
        result = EquipmentService(store).get("ASSET-2025-0404")
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
