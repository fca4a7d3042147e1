"""SQLAlchemy Core table definitions for the workforce database.

Dates and timestamps are ISO 8601 text. Money and day counts are stored
as decimal strings so values round-trip exactly. Every aggregate table
carries a ``version`` column for optimistic conflict detection.
"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

# --- Employees ---

employees = Table(
    "employees",
    metadata,
    Column("employee_id", Text, primary_key=True),  # EMP-YYYY-NNNN
    Column("first_name", Text, nullable=False),
    Column("middle_name", Text),
    Column("last_name", Text, nullable=False),
    Column("email", Text, nullable=False, unique=True),
    Column("phone", Text),
    Column("date_of_birth", Text),
    Column("position", Text, nullable=False),
    Column("department", Text, nullable=False),
    Column("salary", Text, nullable=False),
    Column("currency", Text, nullable=False),
    Column("pay_frequency", Text, nullable=False),
    Column("location", Text, nullable=False),
    Column("remote_policy", Text),  # FullRemote | Hybrid | OfficeOnly
    Column("remote_days", Text),  # JSON array
    Column("status", Text, nullable=False),
    Column("hire_date", Text, nullable=False),
    Column("termination_date", Text),
    Column("last_working_day", Text),
    Column("termination_type", Text),
    Column("termination_reason", Text),
    Column("version", Integer, nullable=False, default=1, server_default="1"),
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

employee_position_history = Table(
    "employee_position_history",
    metadata,
    Column("employee_id", Text, ForeignKey("employees.employee_id"), nullable=False),
    Column("seq", Integer, nullable=False),
    Column("previous_position", Text, nullable=False),
    Column("new_position", Text, nullable=False),
    Column("previous_salary", Text, nullable=False),
    Column("new_salary", Text, nullable=False),
    Column("currency", Text, nullable=False),
    Column("pay_frequency", Text, nullable=False),
    Column("effective_date", Text, nullable=False),
    Column("reason", Text, nullable=False, default="", server_default=""),
    UniqueConstraint("employee_id", "seq"),
)

# --- Equipment ---

equipment = Table(
    "equipment",
    metadata,
    Column("equipment_id", Text, primary_key=True),  # UUID4
    Column("asset_tag", Text, nullable=False, unique=True),  # ASSET-YYYY-NNNN
    Column("serial_number", Text, nullable=False, unique=True),
    Column("type", Text, nullable=False),
    Column("brand", Text, nullable=False),
    Column("model", Text, nullable=False),
    Column("purchase_price", Text, nullable=False),
    Column("currency", Text, nullable=False),
    Column("purchase_date", Text),
    Column("status", Text, nullable=False),
    Column("notes", Text, default="", server_default=""),
    Column("version", Integer, nullable=False, default=1, server_default="1"),
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

equipment_assignments = Table(
    "equipment_assignments",
    metadata,
    Column("assignment_id", Text, primary_key=True),
    Column("equipment_id", Text, ForeignKey("equipment.equipment_id"), nullable=False),
    Column("employee_id", Text, ForeignKey("employees.employee_id"), nullable=False),
    Column("assigned_at", Text, nullable=False),
    Column("returned_at", Text),  # NULL while active
    Column("return_condition", Text),
    Column("notes", Text, default="", server_default=""),
)

# --- Teams ---

teams = Table(
    "teams",
    metadata,
    Column("team_id", Text, primary_key=True),  # TEAM-NNNN
    Column("name", Text, nullable=False),
    Column("description", Text, default="", server_default=""),
    Column("type", Text, nullable=False),
    Column("parent_team_id", Text, ForeignKey("teams.team_id")),
    Column("max_size", Integer),
    Column("is_disbanded", Integer, default=0, server_default="0"),
    Column("version", Integer, nullable=False, default=1, server_default="1"),
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

team_members = Table(
    "team_members",
    metadata,
    Column("team_id", Text, ForeignKey("teams.team_id"), primary_key=True),
    Column("employee_id", Text, ForeignKey("employees.employee_id"), primary_key=True),
    Column("role", Text, nullable=False),
    Column("allocation", Integer, nullable=False),
    Column("assigned_at", Text, nullable=False),
)

# --- Leave ---

leave_requests = Table(
    "leave_requests",
    metadata,
    Column("leave_id", Text, primary_key=True),  # LEAVE-YYYY-NNNN
    Column("employee_id", Text, ForeignKey("employees.employee_id"), nullable=False),
    Column("leave_type", Text, nullable=False),
    Column("start_date", Text, nullable=False),
    Column("end_date", Text, nullable=False),
    Column("days", Text, nullable=False),
    Column("reason", Text, default="", server_default=""),
    Column("status", Text, nullable=False),
    Column("requested_at", Text),
    Column("approver_id", Text),
    Column("approved_at", Text),
    Column("rejecter_id", Text),
    Column("rejected_at", Text),
    Column("rejection_reason", Text),
    Column("cancelled_at", Text),
    Column("cancellation_reason", Text),
    Column("completed_at", Text),
    Column("version", Integer, nullable=False, default=1, server_default="1"),
)

leave_balances = Table(
    "leave_balances",
    metadata,
    Column("employee_id", Text, ForeignKey("employees.employee_id"), primary_key=True),
    Column("year", Integer, primary_key=True),
    Column("leave_type", Text, primary_key=True),
    Column("opening", Text, nullable=False, default="0", server_default="0"),
    Column("accrued", Text, nullable=False, default="0", server_default="0"),
    Column("used", Text, nullable=False, default="0", server_default="0"),
    Column("pending", Text, nullable=False, default="0", server_default="0"),
    Column("adjusted", Text, nullable=False, default="0", server_default="0"),
    Column("carried_over", Text, nullable=False, default="0", server_default="0"),
    Column("forfeited", Text, nullable=False, default="0", server_default="0"),
    Column("carried_out", Text, nullable=False, default="0", server_default="0"),
    Column("accrual_rate", Text, nullable=False, default="0", server_default="0"),
    Column("max_carry_over", Text, nullable=False, default="0", server_default="0"),
    Column("max_balance", Text),
    Column("is_closed", Integer, default=0, server_default="0"),
    Column("version", Integer, nullable=False, default=1, server_default="1"),
    Column("modified", Text, nullable=False),
)

leave_accruals = Table(
    "leave_accruals",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("employee_id", Text, ForeignKey("employees.employee_id"), nullable=False),
    Column("leave_type", Text, nullable=False),
    Column("period", Text, nullable=False),  # YYYY-MM
    Column("days", Text, nullable=False),
    Column("balance_before", Text, nullable=False),
    Column("balance_after", Text, nullable=False),
    Column("accrual_type", Text, nullable=False),
    Column("accrued_at", Text, nullable=False),
    UniqueConstraint("employee_id", "leave_type", "period"),
)

# --- Event outbox ---

event_outbox = Table(
    "event_outbox",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("event_id", Text, nullable=False, unique=True),
    Column("event_type", Text, nullable=False),
    Column("hook_name", Text, nullable=False),
    Column("aggregate_id", Text, nullable=False),
    Column("payload", Text, nullable=False),  # JSON
    Column("status", Text, nullable=False),  # pending | completed | failed | dead_letter
    Column("error", Text),
    Column("retries", Integer, default=0, server_default="0"),
    Column("created", Text, nullable=False),
    Column("completed", Text),
)

# --- Indexes ---

Index("ix_equipment_assignments_equipment", equipment_assignments.c.equipment_id)
Index("ix_equipment_assignments_employee", equipment_assignments.c.employee_id)
Index("ix_team_members_employee", team_members.c.employee_id)
Index("ix_leave_requests_employee", leave_requests.c.employee_id, leave_requests.c.status)
Index("ix_event_outbox_status", event_outbox.c.status)
