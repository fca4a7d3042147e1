"""Equipment aggregate and the Assignment entity.

State machine::

    Available ──issue──▶ Assigned ──transfer──▶ Assigned
        ▲                   │
        │◀── return(Good) ──┤
        │                   └── return(other) ──▶ InMaintenance
        └──── complete_maintenance ◀────────────────────┘

    any non-Assigned state ──decommission──▶ Decommissioned (terminal)

INVARIANT: At most one active (unreturned) assignment at a time.
Completed assignments are appended to an immutable history.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

from workforce.domain.errors import BusinessRuleViolation, InvalidTransition, InvariantViolation
from workforce.domain.events import DomainEvent, EventRecorder
from workforce.domain.ids import AssetTag, EmployeeId, EquipmentId
from workforce.domain.lifecycle import (
    EQUIPMENT_TRANSITIONS,
    EquipmentStatus,
    is_valid_transition,
)
from workforce.domain.values import Money

if TYPE_CHECKING:
    from workforce.domain.clock import Clock

GOOD_CONDITION = "Good"
MIN_SERIAL_LENGTH = 6


class EquipmentType(StrEnum):
    LAPTOP = "Laptop"
    DESKTOP = "Desktop"
    MONITOR = "Monitor"
    KEYBOARD = "Keyboard"
    MOUSE = "Mouse"
    HEADSET = "Headset"
    PHONE = "Phone"
    TABLET = "Tablet"
    ADAPTER = "Adapter"
    CABLE = "Cable"
    DOCK = "Dock"
    WEBCAM = "Webcam"

    @classmethod
    def parse(cls, raw: object) -> EquipmentType:
        try:
            return cls(str(raw).strip())
        except ValueError as exc:
            msg = f"Invalid equipment type: {raw!r}"
            raise InvariantViolation(msg, rule="equipment.type") from exc

    @property
    def is_primary_device(self) -> bool:
        return self in _PRIMARY_DEVICES

    @property
    def is_accessory(self) -> bool:
        return self in _ACCESSORIES


_PRIMARY_DEVICES = frozenset(
    {EquipmentType.LAPTOP, EquipmentType.DESKTOP, EquipmentType.PHONE, EquipmentType.TABLET}
)
_ACCESSORIES = frozenset(
    {
        EquipmentType.KEYBOARD,
        EquipmentType.MOUSE,
        EquipmentType.HEADSET,
        EquipmentType.ADAPTER,
        EquipmentType.CABLE,
        EquipmentType.WEBCAM,
    }
)


@dataclass(frozen=True)
class SerialNumber:
    value: str

    def __post_init__(self) -> None:
        value = str(self.value).strip()
        if len(value) < MIN_SERIAL_LENGTH:
            msg = f"Serial number must be at least {MIN_SERIAL_LENGTH} characters: {self.value!r}"
            raise InvariantViolation(msg, rule="equipment.serial_number")
        object.__setattr__(self, "value", value)

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Assignment entity
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Assignment:
    """One hand-over of a piece of equipment to an employee.

    Owned exclusively by its Equipment; identity is ``assignment_id``.
    Completing an assignment returns a new, closed instance.
    """

    assignment_id: str
    employee_id: EmployeeId
    assigned_at: datetime
    notes: str = ""
    returned_at: datetime | None = None
    return_condition: str | None = None

    @classmethod
    def open(cls, employee_id: EmployeeId, assigned_at: datetime, notes: str = "") -> Assignment:
        return cls(
            assignment_id=str(uuid.uuid4()),
            employee_id=employee_id,
            assigned_at=assigned_at,
            notes=notes,
        )

    @property
    def is_active(self) -> bool:
        return self.returned_at is None

    def complete(self, returned_at: datetime, condition: str) -> Assignment:
        if not self.is_active:
            msg = f"Assignment {self.assignment_id} is already completed"
            raise BusinessRuleViolation(msg, rule="assignment.already_completed")
        if returned_at < self.assigned_at:
            msg = "Return time cannot precede the assignment time"
            raise InvariantViolation(msg, rule="assignment.return_after_assign")
        return replace(self, returned_at=returned_at, return_condition=condition)

    def duration_in_days(self, until: datetime | None = None) -> int:
        """Whole days held, up to the return (or *until* while still active)."""
        end = self.returned_at or until
        if end is None:
            msg = "An active assignment needs an end time to measure its duration"
            raise InvariantViolation(msg, rule="assignment.duration")
        return (end - self.assigned_at).days

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Assignment):
            return NotImplemented
        return self.assignment_id == other.assignment_id

    def __hash__(self) -> int:
        return hash(self.assignment_id)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class EquipmentAdded(DomainEvent):
    event_type: ClassVar[str] = "equipment.added"

    asset_tag: str
    serial_number: str
    equipment_type: str
    brand: str
    model: str
    purchase_price: Decimal
    currency: str


class EquipmentIssued(DomainEvent):
    event_type: ClassVar[str] = "equipment.issued"

    asset_tag: str
    employee_id: str
    assignment_id: str
    assigned_at: datetime


class EquipmentReturned(DomainEvent):
    event_type: ClassVar[str] = "equipment.returned"

    asset_tag: str
    employee_id: str
    assignment_id: str
    condition: str
    new_status: str


class EquipmentTransferred(DomainEvent):
    event_type: ClassVar[str] = "equipment.transferred"

    asset_tag: str
    from_employee_id: str
    to_employee_id: str
    closed_assignment_id: str
    opened_assignment_id: str


class EquipmentMaintenanceScheduled(DomainEvent):
    event_type: ClassVar[str] = "equipment.maintenance_scheduled"

    asset_tag: str
    reason: str


class EquipmentMaintenanceCompleted(DomainEvent):
    event_type: ClassVar[str] = "equipment.maintenance_completed"

    asset_tag: str


class EquipmentDecommissioned(DomainEvent):
    event_type: ClassVar[str] = "equipment.decommissioned"

    asset_tag: str
    reason: str


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


class Equipment:
    """Equipment aggregate root, keyed by UUID with a human asset tag."""

    def __init__(
        self,
        *,
        equipment_id: EquipmentId,
        asset_tag: AssetTag,
        serial_number: SerialNumber,
        equipment_type: EquipmentType,
        brand: str,
        model: str,
        purchase_price: Money,
        purchase_date: date | None = None,
        status: EquipmentStatus = EquipmentStatus.AVAILABLE,
        current_assignment: Assignment | None = None,
        assignment_history: Iterable[Assignment] = (),
        notes: str = "",
        version: int = 0,
    ) -> None:
        self._id = equipment_id
        self._asset_tag = asset_tag
        self._serial_number = serial_number
        self._type = equipment_type
        self._brand = brand
        self._model = model
        self._purchase_price = purchase_price
        self._purchase_date = purchase_date
        self._status = status
        self._current = current_assignment
        self._history = list(assignment_history)
        self._notes = notes
        self.version = version
        self._events = EventRecorder()

    @classmethod
    def add(
        cls,
        equipment_id: EquipmentId,
        asset_tag: AssetTag,
        serial_number: SerialNumber,
        equipment_type: EquipmentType,
        brand: str,
        model: str,
        purchase_price: Money,
        purchase_date: date | None = None,
        *,
        clock: Clock,
    ) -> Equipment:
        """Register new stock as Available. Emits ``equipment.added``."""
        brand, model = brand.strip(), model.strip()
        if not brand or not model:
            msg = "Equipment brand and model are required"
            raise InvariantViolation(msg, rule="equipment.brand_model")
        if purchase_date is not None and purchase_date > clock.today():
            msg = f"Purchase date {purchase_date} cannot be in the future"
            raise InvariantViolation(msg, rule="equipment.purchase_date")

        equipment = cls(
            equipment_id=equipment_id,
            asset_tag=asset_tag,
            serial_number=serial_number,
            equipment_type=equipment_type,
            brand=brand,
            model=model,
            purchase_price=purchase_price,
            purchase_date=purchase_date,
        )
        equipment._events.record(
            EquipmentAdded(
                aggregate_id=equipment.id,
                occurred_at=clock.now(),
                asset_tag=str(asset_tag),
                serial_number=str(serial_number),
                equipment_type=str(equipment_type),
                brand=brand,
                model=model,
                purchase_price=purchase_price.amount,
                currency=purchase_price.currency,
            )
        )
        return equipment

    # --- Mutators ---

    def issue(self, employee_id: EmployeeId, *, clock: Clock, notes: str = "") -> Assignment:
        """Hand the equipment to *employee_id*. Requires Available."""
        self._require(EquipmentStatus.AVAILABLE, "issue")
        assignment = Assignment.open(employee_id, clock.now(), notes)
        self._current = assignment
        self._status = EquipmentStatus.ASSIGNED
        self._events.record(
            EquipmentIssued(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                asset_tag=self.asset_tag,
                employee_id=str(employee_id),
                assignment_id=assignment.assignment_id,
                assigned_at=assignment.assigned_at,
            )
        )
        return assignment

    def return_(self, condition: str, *, clock: Clock) -> Assignment:
        """Take the equipment back.

        ``Good`` condition makes it Available again; anything else sends
        it to InMaintenance. Returns the closed assignment.
        """
        self._require(EquipmentStatus.ASSIGNED, "return")
        condition = condition.strip()
        if not condition:
            msg = "Return condition is required"
            raise InvariantViolation(msg, rule="equipment.return_condition")
        assert self._current is not None
        closed = self._current.complete(clock.now(), condition)

        target = (
            EquipmentStatus.AVAILABLE
            if condition == GOOD_CONDITION
            else EquipmentStatus.IN_MAINTENANCE
        )
        self._history.append(closed)
        self._current = None
        self._status = target
        self._events.record(
            EquipmentReturned(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                asset_tag=self.asset_tag,
                employee_id=str(closed.employee_id),
                assignment_id=closed.assignment_id,
                condition=condition,
                new_status=str(target),
            )
        )
        return closed

    def transfer(self, to_employee_id: EmployeeId, *, clock: Clock, notes: str = "") -> Assignment:
        """Close the current assignment (condition Good) and open one for *to_employee_id*."""
        self._require(EquipmentStatus.ASSIGNED, "transfer")
        assert self._current is not None
        if self._current.employee_id == to_employee_id:
            msg = f"Equipment is already assigned to {to_employee_id}"
            raise InvariantViolation(msg, rule="equipment.transfer_target")

        now = clock.now()
        closed = self._current.complete(now, GOOD_CONDITION)
        opened = Assignment.open(to_employee_id, now, notes)
        self._history.append(closed)
        self._current = opened
        self._events.record(
            EquipmentTransferred(
                aggregate_id=self.id,
                occurred_at=now,
                asset_tag=self.asset_tag,
                from_employee_id=str(closed.employee_id),
                to_employee_id=str(to_employee_id),
                closed_assignment_id=closed.assignment_id,
                opened_assignment_id=opened.assignment_id,
            )
        )
        return opened

    def schedule_maintenance(self, reason: str, *, clock: Clock) -> None:
        self._require(EquipmentStatus.AVAILABLE, "schedule_maintenance")
        self._status = EquipmentStatus.IN_MAINTENANCE
        self._notes = reason
        self._events.record(
            EquipmentMaintenanceScheduled(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                asset_tag=self.asset_tag,
                reason=reason,
            )
        )

    def complete_maintenance(self, *, clock: Clock) -> None:
        self._require(EquipmentStatus.IN_MAINTENANCE, "complete_maintenance")
        self._status = EquipmentStatus.AVAILABLE
        self._notes = ""
        self._events.record(
            EquipmentMaintenanceCompleted(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                asset_tag=self.asset_tag,
            )
        )

    def decommission(self, reason: str, *, clock: Clock) -> None:
        """Retire the equipment for good. Blocked while Assigned."""
        if self._status is EquipmentStatus.ASSIGNED:
            msg = f"Cannot decommission {self.asset_tag} while it is assigned"
            raise BusinessRuleViolation(msg, rule="equipment.decommission_while_assigned")
        target = EquipmentStatus.DECOMMISSIONED
        if not is_valid_transition(str(self._status), str(target), EQUIPMENT_TRANSITIONS):
            raise InvalidTransition("equipment", str(self._status), str(target))
        self._status = target
        self._notes = reason
        self._events.record(
            EquipmentDecommissioned(
                aggregate_id=self.id,
                occurred_at=clock.now(),
                asset_tag=self.asset_tag,
                reason=reason,
            )
        )

    # --- Event source ---

    def release_events(self) -> list[DomainEvent]:
        return self._events.release()

    def recorded_events(self) -> tuple[DomainEvent, ...]:
        return self._events.peek()

    # --- Accessors ---

    @property
    def id(self) -> str:
        return str(self._id)

    @property
    def equipment_id(self) -> EquipmentId:
        return self._id

    @property
    def asset_tag(self) -> str:
        return str(self._asset_tag)

    @property
    def serial_number(self) -> SerialNumber:
        return self._serial_number

    @property
    def equipment_type(self) -> EquipmentType:
        return self._type

    @property
    def brand(self) -> str:
        return self._brand

    @property
    def model(self) -> str:
        return self._model

    @property
    def purchase_price(self) -> Money:
        return self._purchase_price

    @property
    def purchase_date(self) -> date | None:
        return self._purchase_date

    @property
    def status(self) -> EquipmentStatus:
        return self._status

    @property
    def current_assignment(self) -> Assignment | None:
        return self._current

    @property
    def assignment_history(self) -> tuple[Assignment, ...]:
        return tuple(self._history)

    @property
    def notes(self) -> str:
        return self._notes

    @property
    def assigned_to(self) -> EmployeeId | None:
        return self._current.employee_id if self._current else None

    def summary(self) -> dict[str, Any]:
        return {
            "equipment_id": self.id,
            "asset_tag": self.asset_tag,
            "serial_number": str(self._serial_number),
            "type": str(self._type),
            "brand": self._brand,
            "model": self._model,
            "status": str(self._status),
            "assigned_to": str(self.assigned_to) if self.assigned_to else None,
            "assignments": len(self._history) + (1 if self._current else 0),
        }

    # --- Internal ---

    def _require(self, expected: EquipmentStatus, action: str) -> None:
        if self._status is not expected:
            raise BusinessRuleViolation(
                f"Cannot {action.replace('_', ' ')} {self.asset_tag}: status is {self._status}",
                rule=f"equipment.{action}_requires_{expected.lower()}",
                detail={"status": str(self._status), "required": str(expected)},
            )
