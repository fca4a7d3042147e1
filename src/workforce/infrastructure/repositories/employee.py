"""Employee persistence: rows ↔ :class:`Employee` aggregates."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select

from workforce.domain.employee import (
    Employee,
    PayFrequency,
    PersonalInfo,
    Position,
    PositionChange,
    Salary,
    TerminationDetails,
    TerminationType,
    WorkLocation,
    parse_remote_work_policy,
    sorted_days,
)
from workforce.domain.ids import EmployeeId
from workforce.domain.lifecycle import EmploymentStatus
from workforce.domain.values import Email, Money, PhoneNumber
from workforce.infrastructure.database.schema import employee_position_history, employees
from workforce.infrastructure.database.sequences import next_business_key
from workforce.infrastructure.repositories.base import (
    NotFoundError,
    iso,
    save_versioned,
    to_date,
)

if TYPE_CHECKING:
    from sqlalchemy import Connection, Row

    from workforce.domain.clock import Clock


class EmployeeRepository:
    """Load and save employees within the caller's transaction."""

    def __init__(self, conn: Connection, clock: Clock) -> None:
        self._conn = conn
        self._clock = clock

    def next_identity(self, year: int | None = None) -> EmployeeId:
        year = year or self._clock.today().year
        return EmployeeId(next_business_key(self._conn, employees.c.employee_id, "employee", year))

    def find(self, employee_id: EmployeeId | str) -> Employee | None:
        row = self._conn.execute(
            select(employees).where(employees.c.employee_id == str(employee_id))
        ).first()
        if row is None:
            return None
        return self._to_aggregate(row)

    def load(self, employee_id: EmployeeId | str) -> Employee:
        employee = self.find(employee_id)
        if employee is None:
            raise NotFoundError("employee", employee_id)
        return employee

    def email_in_use(self, email: Email, *, exclude: EmployeeId | None = None) -> bool:
        stmt = select(employees.c.employee_id).where(employees.c.email == str(email))
        if exclude is not None:
            stmt = stmt.where(employees.c.employee_id != str(exclude))
        return self._conn.execute(stmt).first() is not None

    def list_ids(self, *, status: EmploymentStatus | None = None) -> list[str]:
        stmt = select(employees.c.employee_id).order_by(employees.c.employee_id)
        if status is not None:
            stmt = stmt.where(employees.c.status == str(status))
        return [row.employee_id for row in self._conn.execute(stmt)]

    def save(self, employee: Employee) -> None:
        now = self._clock.now().isoformat()
        values = self._to_row(employee)
        values["modified"] = now
        if employee.version == 0:
            values["created"] = now
        employee.version = save_versioned(
            self._conn,
            employees,
            employees.c.employee_id == employee.id,
            values,
            version=employee.version,
            kind="employee",
            key=employee.id,
        )
        self._append_history(employee)

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def _append_history(self, employee: Employee) -> None:
        stored = self._conn.execute(
            select(func.count())
            .select_from(employee_position_history)
            .where(employee_position_history.c.employee_id == employee.id)
        ).scalar_one()
        for seq, change in enumerate(employee.position_history[stored:], start=stored + 1):
            self._conn.execute(
                insert(employee_position_history).values(
                    employee_id=employee.id,
                    seq=seq,
                    previous_position=str(change.previous_position),
                    new_position=str(change.new_position),
                    previous_salary=str(change.previous_salary.amount),
                    new_salary=str(change.new_salary.amount),
                    currency=change.new_salary.currency,
                    pay_frequency=str(change.new_salary.frequency),
                    effective_date=change.effective_date.isoformat(),
                    reason=change.reason,
                )
            )

    @staticmethod
    def _to_row(employee: Employee) -> dict[str, Any]:
        info = employee.personal_info
        policy = employee.remote_work_policy
        termination = employee.termination
        return {
            "employee_id": employee.id,
            "first_name": info.first_name,
            "middle_name": info.middle_name,
            "last_name": info.last_name,
            "email": str(info.email),
            "phone": str(info.phone) if info.phone else None,
            "date_of_birth": iso(info.date_of_birth),
            "position": str(employee.position),
            "department": str(employee.position.department),
            "salary": str(employee.salary.amount),
            "currency": employee.salary.currency,
            "pay_frequency": str(employee.salary.frequency),
            "location": str(employee.location),
            "remote_policy": policy.kind if policy is not None else None,
            "remote_days": json.dumps(sorted_days(policy.remote_days)) if policy else None,
            "status": str(employee.status),
            "hire_date": employee.hire_date.isoformat(),
            "termination_date": iso(termination.termination_date) if termination else None,
            "last_working_day": iso(termination.last_working_day) if termination else None,
            "termination_type": str(termination.termination_type) if termination else None,
            "termination_reason": termination.reason if termination else None,
        }

    def _to_aggregate(self, row: Row[Any]) -> Employee:
        info = PersonalInfo(
            first_name=row.first_name,
            last_name=row.last_name,
            email=Email(row.email),
            phone=PhoneNumber(row.phone) if row.phone else None,
            date_of_birth=to_date(row.date_of_birth),
            middle_name=row.middle_name,
        )
        policy = None
        if row.remote_policy:
            days = json.loads(row.remote_days or "[]")
            policy = parse_remote_work_policy(row.remote_policy, days)
        termination = None
        if row.termination_date:
            termination = TerminationDetails(
                termination_date=to_date(row.termination_date),  # type: ignore[arg-type]
                last_working_day=to_date(row.last_working_day),  # type: ignore[arg-type]
                termination_type=TerminationType(row.termination_type),
                reason=row.termination_reason or "",
            )
        return Employee(
            employee_id=EmployeeId(row.employee_id),
            personal_info=info,
            position=Position(row.position),
            salary=_salary(row.salary, row.currency, PayFrequency(row.pay_frequency)),
            location=WorkLocation(row.location),
            hire_date=to_date(row.hire_date),  # type: ignore[arg-type]
            status=EmploymentStatus(row.status),
            remote_work_policy=policy,
            termination=termination,
            position_history=self._load_history(row.employee_id),
            version=row.version,
        )

    def _load_history(self, employee_id: str) -> list[PositionChange]:
        rows = self._conn.execute(
            select(employee_position_history)
            .where(employee_position_history.c.employee_id == employee_id)
            .order_by(employee_position_history.c.seq)
        ).fetchall()
        history: list[PositionChange] = []
        for row in rows:
            frequency = PayFrequency(row.pay_frequency)
            history.append(
                PositionChange(
                    previous_position=Position(row.previous_position),
                    new_position=Position(row.new_position),
                    previous_salary=_salary(row.previous_salary, row.currency, frequency),
                    new_salary=_salary(row.new_salary, row.currency, frequency),
                    effective_date=to_date(row.effective_date),  # type: ignore[arg-type]
                    reason=row.reason,
                )
            )
        return history


def _salary(amount: str, currency: str, frequency: PayFrequency) -> Salary:
    return Salary(Money(Decimal(amount), currency), frequency)
