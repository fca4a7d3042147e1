"""Equipment persistence, including the append-only assignment history."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update

from workforce.domain.equipment import Assignment, Equipment, EquipmentType, SerialNumber
from workforce.domain.ids import AssetTag, EmployeeId, EquipmentId
from workforce.domain.lifecycle import EquipmentStatus
from workforce.domain.values import Money
from workforce.infrastructure.database.schema import equipment, equipment_assignments
from workforce.infrastructure.database.sequences import next_business_key
from workforce.infrastructure.repositories.base import (
    NotFoundError,
    iso,
    save_versioned,
    to_date,
    to_datetime,
)

if TYPE_CHECKING:
    from sqlalchemy import Connection, Row

    from workforce.domain.clock import Clock


class EquipmentRepository:
    def __init__(self, conn: Connection, clock: Clock) -> None:
        self._conn = conn
        self._clock = clock

    def next_asset_tag(self, year: int | None = None) -> AssetTag:
        year = year or self._clock.today().year
        return AssetTag(next_business_key(self._conn, equipment.c.asset_tag, "asset", year))

    def find(self, equipment_id: EquipmentId | str) -> Equipment | None:
        row = self._conn.execute(
            select(equipment).where(equipment.c.equipment_id == str(equipment_id))
        ).first()
        return self._to_aggregate(row) if row is not None else None

    def load(self, equipment_id: EquipmentId | str) -> Equipment:
        item = self.find(equipment_id)
        if item is None:
            raise NotFoundError("equipment", equipment_id)
        return item

    def load_by_asset_tag(self, asset_tag: AssetTag | str) -> Equipment:
        row = self._conn.execute(
            select(equipment).where(equipment.c.asset_tag == str(asset_tag))
        ).first()
        if row is None:
            raise NotFoundError("equipment", asset_tag)
        return self._to_aggregate(row)

    def serial_in_use(self, serial_number: SerialNumber) -> bool:
        stmt = select(equipment.c.equipment_id).where(
            equipment.c.serial_number == str(serial_number)
        )
        return self._conn.execute(stmt).first() is not None

    def assigned_to(self, employee_id: EmployeeId | str) -> list[Equipment]:
        """Equipment currently held by *employee_id*."""
        rows = self._conn.execute(
            select(equipment)
            .join(
                equipment_assignments,
                equipment_assignments.c.equipment_id == equipment.c.equipment_id,
            )
            .where(
                equipment_assignments.c.employee_id == str(employee_id),
                equipment_assignments.c.returned_at.is_(None),
            )
            .order_by(equipment.c.asset_tag)
        ).fetchall()
        return [self._to_aggregate(row) for row in rows]

    def save(self, item: Equipment) -> None:
        now = self._clock.now().isoformat()
        values: dict[str, Any] = {
            "equipment_id": item.id,
            "asset_tag": item.asset_tag,
            "serial_number": str(item.serial_number),
            "type": str(item.equipment_type),
            "brand": item.brand,
            "model": item.model,
            "purchase_price": str(item.purchase_price.amount),
            "currency": item.purchase_price.currency,
            "purchase_date": iso(item.purchase_date),
            "status": str(item.status),
            "notes": item.notes,
            "modified": now,
        }
        if item.version == 0:
            values["created"] = now
        item.version = save_versioned(
            self._conn,
            equipment,
            equipment.c.equipment_id == item.id,
            values,
            version=item.version,
            kind="equipment",
            key=item.asset_tag,
        )
        assignments = list(item.assignment_history)
        if item.current_assignment is not None:
            assignments.append(item.current_assignment)
        for assignment in assignments:
            self._save_assignment(item.id, assignment)

    # ------------------------------------------------------------------

    def _save_assignment(self, equipment_id: str, assignment: Assignment) -> None:
        stored = self._conn.execute(
            select(equipment_assignments.c.returned_at).where(
                equipment_assignments.c.assignment_id == assignment.assignment_id
            )
        ).first()
        if stored is None:
            self._conn.execute(
                insert(equipment_assignments).values(
                    assignment_id=assignment.assignment_id,
                    equipment_id=equipment_id,
                    employee_id=str(assignment.employee_id),
                    assigned_at=assignment.assigned_at.isoformat(),
                    returned_at=iso(assignment.returned_at),
                    return_condition=assignment.return_condition,
                    notes=assignment.notes,
                )
            )
        elif stored.returned_at is None and assignment.returned_at is not None:
            self._conn.execute(
                update(equipment_assignments)
                .where(equipment_assignments.c.assignment_id == assignment.assignment_id)
                .values(
                    returned_at=assignment.returned_at.isoformat(),
                    return_condition=assignment.return_condition,
                )
            )

    def _to_aggregate(self, row: Row[Any]) -> Equipment:
        assignments = [
            Assignment(
                assignment_id=a.assignment_id,
                employee_id=EmployeeId(a.employee_id),
                assigned_at=to_datetime(a.assigned_at),  # type: ignore[arg-type]
                notes=a.notes or "",
                returned_at=to_datetime(a.returned_at),
                return_condition=a.return_condition,
            )
            for a in self._conn.execute(
                select(equipment_assignments)
                .where(equipment_assignments.c.equipment_id == row.equipment_id)
                .order_by(equipment_assignments.c.assigned_at)
            )
        ]
        current = next((a for a in assignments if a.is_active), None)
        return Equipment(
            equipment_id=EquipmentId(row.equipment_id),
            asset_tag=AssetTag(row.asset_tag),
            serial_number=SerialNumber(row.serial_number),
            equipment_type=EquipmentType(row.type),
            brand=row.brand,
            model=row.model,
            purchase_price=Money(Decimal(row.purchase_price), row.currency),
            purchase_date=to_date(row.purchase_date),
            status=EquipmentStatus(row.status),
            current_assignment=current,
            assignment_history=[a for a in assignments if not a.is_active],
            notes=row.notes or "",
            version=row.version,
        )
