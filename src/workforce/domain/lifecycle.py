"""Lifecycle status enums and transition maps for every aggregate.

Statuses are only ever changed by aggregate operations, which consult
the transition maps below before mutating anything.
"""

from __future__ import annotations

from enum import StrEnum

# --- Status enums ---


class EmploymentStatus(StrEnum):
    ACTIVE = "Active"
    ON_LEAVE = "OnLeave"
    TERMINATED = "Terminated"


class EquipmentStatus(StrEnum):
    AVAILABLE = "Available"
    ASSIGNED = "Assigned"
    IN_MAINTENANCE = "InMaintenance"
    DECOMMISSIONED = "Decommissioned"


class LeaveStatus(StrEnum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


# --- Transition maps ---

EMPLOYMENT_TRANSITIONS: dict[str, list[str]] = {
    "Active": ["OnLeave", "Terminated"],
    "OnLeave": ["Active", "Terminated"],
    "Terminated": ["Active"],  # reinstatement only
}

EQUIPMENT_TRANSITIONS: dict[str, list[str]] = {
    "Available": ["Assigned", "InMaintenance", "Decommissioned"],
    "Assigned": ["Assigned", "Available", "InMaintenance"],  # transfer, return
    "InMaintenance": ["Available", "Decommissioned"],
    "Decommissioned": [],
}

LEAVE_TRANSITIONS: dict[str, list[str]] = {
    "Pending": ["Approved", "Rejected", "Cancelled"],
    "Approved": ["Cancelled", "Completed"],
    "Rejected": [],
    "Cancelled": [],
    "Completed": [],
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]],
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed
