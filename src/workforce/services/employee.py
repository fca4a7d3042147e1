"""EmployeeService — hiring, position/location changes, termination."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any

from workforce.domain.employee import (
    Employee,
    PersonalInfo,
    Position,
    Salary,
    TerminationType,
    WorkLocation,
    parse_remote_work_policy,
)
from workforce.domain.errors import BusinessRuleViolation, InvariantViolation
from workforce.domain.values import Email, PhoneNumber
from workforce.services.base import BaseService

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal

    from workforce.infrastructure.store import StoreTransaction
    from workforce.services.result import ServiceResult

_PERSONAL_FIELDS = ("first_name", "last_name", "middle_name", "email", "phone", "date_of_birth")


class EmployeeService(BaseService):
    """Employee use-cases. Each method is one transaction."""

    def hire(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        position: str,
        salary: Decimal | int | str,
        location: str,
        hire_date: date,
        phone: str | None = None,
        date_of_birth: date | None = None,
        middle_name: str | None = None,
        currency: str = "USD",
        pay_frequency: str = "Annual",
    ) -> ServiceResult:
        """Hire a new employee under the next ``EMP-YYYY-NNNN`` id for the current year."""

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            info = PersonalInfo(
                first_name=first_name,
                last_name=last_name,
                email=Email(email),
                phone=PhoneNumber(phone) if phone else None,
                date_of_birth=date_of_birth,
                middle_name=middle_name,
            )
            self._check_email_free(txn, info.email)
            employee = Employee.hire(
                txn.employees.next_identity(),
                info,
                Position.parse(position),
                Salary.of(salary, currency, pay_frequency),
                WorkLocation.parse(location),
                hire_date,
                clock=self._clock,
            )
            txn.save(employee)
            return employee.summary()

        return self._run("hire", work)

    def get(self, employee_id: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            employee = txn.employees.load(employee_id)
            data = employee.summary()
            data["position_history"] = [
                {
                    "previous_position": str(c.previous_position),
                    "new_position": str(c.new_position),
                    "previous_salary": str(c.previous_salary.amount),
                    "new_salary": str(c.new_salary.amount),
                    "effective_date": c.effective_date.isoformat(),
                    "reason": c.reason,
                }
                for c in employee.position_history
            ]
            return data

        return self._run("get_employee", work)

    def update_personal_info(self, employee_id: str, **changes: Any) -> ServiceResult:
        """Change any of first/middle/last name, email, phone, date of birth."""
        unknown = set(changes) - set(_PERSONAL_FIELDS)

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            if unknown:
                msg = f"Unknown personal info fields: {sorted(unknown)}"
                raise InvariantViolation(msg, rule="employee.personal_info_fields")
            employee = self._require_employed(txn, employee_id)
            values = dict(changes)
            if "email" in values:
                values["email"] = Email(values["email"])
                if values["email"] != employee.personal_info.email:
                    self._check_email_free(txn, values["email"], exclude=employee)
            if "phone" in values:
                values["phone"] = PhoneNumber(values["phone"]) if values["phone"] else None
            employee.update_personal_info(
                replace(employee.personal_info, **values), clock=self._clock
            )
            txn.save(employee)
            return employee.summary()

        return self._run("update_personal_info", work)

    def change_position(
        self,
        employee_id: str,
        *,
        position: str,
        salary: Decimal | int | str,
        effective_date: date,
        reason: str = "",
    ) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            employee = txn.employees.load(employee_id)
            current = employee.salary
            employee.change_position(
                Position.parse(position),
                Salary.of(salary, current.currency, current.frequency),
                effective_date,
                reason,
                clock=self._clock,
            )
            txn.save(employee)
            return employee.summary()

        return self._run("change_position", work)

    def change_location(
        self,
        employee_id: str,
        *,
        location: str,
        effective_date: date,
        reason: str = "",
    ) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            employee = txn.employees.load(employee_id)
            employee.change_location(
                WorkLocation.parse(location), effective_date, reason, clock=self._clock
            )
            txn.save(employee)
            return employee.summary()

        return self._run("change_location", work)

    def configure_remote_work(
        self,
        employee_id: str,
        policy_type: str | None,
        days: list[str] | None = None,
    ) -> ServiceResult:
        """Set the remote-work policy, or clear it with ``policy_type=None``."""

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            employee = txn.employees.load(employee_id)
            policy = parse_remote_work_policy(policy_type, days or []) if policy_type else None
            employee.configure_remote_work(policy, clock=self._clock)
            txn.save(employee)
            return employee.summary()

        return self._run("configure_remote_work", work)

    def place_on_leave(self, employee_id: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            employee = txn.employees.load(employee_id)
            employee.place_on_leave(clock=self._clock)
            txn.save(employee)
            return employee.summary()

        return self._run("place_on_leave", work)

    def return_from_leave(self, employee_id: str) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            employee = txn.employees.load(employee_id)
            employee.return_from_leave(clock=self._clock)
            txn.save(employee)
            return employee.summary()

        return self._run("return_from_leave", work)

    def terminate(
        self,
        employee_id: str,
        *,
        termination_date: date,
        last_working_day: date,
        termination_type: str,
        reason: str,
    ) -> ServiceResult:
        """Terminate an employee.

        Offboarding (team removal, equipment recovery) runs afterwards in
        the ``employee_terminated`` listener. Open leave requests are
        reported as warnings and left for HR to resolve.
        """

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            employee = txn.employees.load(employee_id)
            employee.terminate(
                termination_date,
                last_working_day,
                TerminationType.parse(termination_type),
                reason,
                clock=self._clock,
            )
            txn.save(employee)
            for leave_id in txn.leave_requests.open_for_employee(employee.id):
                warnings.append(f"Leave request {leave_id} is still open")
            return employee.summary()

        return self._run("terminate", work)

    def reinstate(
        self, employee_id: str, *, reinstatement_date: date, reason: str
    ) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            employee = txn.employees.load(employee_id)
            employee.reinstate(reinstatement_date, reason, clock=self._clock)
            txn.save(employee)
            return employee.summary()

        return self._run("reinstate", work)

    # ------------------------------------------------------------------

    @staticmethod
    def _check_email_free(
        txn: StoreTransaction, email: Email, *, exclude: Employee | None = None
    ) -> None:
        if txn.employees.email_in_use(email, exclude=exclude.employee_id if exclude else None):
            msg = f"Email {email} is already in use"
            raise BusinessRuleViolation(
                msg, rule="employee.email_unique", detail={"email": str(email)}
            )
