"""Aggregate repositories over SQLAlchemy Core connections."""

from workforce.infrastructure.repositories.base import (
    ConcurrencyConflict,
    NotFoundError,
    save_versioned,
)
from workforce.infrastructure.repositories.employee import EmployeeRepository
from workforce.infrastructure.repositories.equipment import EquipmentRepository
from workforce.infrastructure.repositories.leave import (
    LeaveBalanceRepository,
    LeaveRequestRepository,
)
from workforce.infrastructure.repositories.team import TeamRepository

__all__ = [
    "ConcurrencyConflict",
    "EmployeeRepository",
    "EquipmentRepository",
    "LeaveBalanceRepository",
    "LeaveRequestRepository",
    "NotFoundError",
    "TeamRepository",
    "save_versioned",
]
