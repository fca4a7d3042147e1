"""SQLite database engine, schema, key sequences, and event outbox via SQLAlchemy Core."""

from workforce.infrastructure.database.engine import create_db_engine, init_database
from workforce.infrastructure.database.outbox import append_events, status_counts
from workforce.infrastructure.database.schema import (
    employee_position_history,
    employees,
    equipment,
    equipment_assignments,
    event_outbox,
    leave_accruals,
    leave_balances,
    leave_requests,
    metadata,
    team_members,
    teams,
)
from workforce.infrastructure.database.sequences import next_business_key

__all__ = [
    "append_events",
    "create_db_engine",
    "employee_position_history",
    "employees",
    "equipment",
    "equipment_assignments",
    "event_outbox",
    "init_database",
    "leave_accruals",
    "leave_balances",
    "leave_requests",
    "metadata",
    "next_business_key",
    "status_counts",
    "team_members",
    "teams",
]
