"""Typed domain failures.

Two kinds, surfaced the same way:

- :class:`InvariantViolation` — malformed or out-of-range input to a value
  object or a mutator argument (salary below the floor, invalid email,
  duplicate team membership).
- :class:`BusinessRuleViolation` — a rule that depends on the aggregate's
  current state (terminating an already-terminated employee, insufficient
  leave balance, equipment not available).

Both are local and non-retryable: the operation simply does not happen.
Every failure carries a stable ``code`` for the service layer and a
``rule`` naming the violated rule.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for every failure raised by the domain model."""

    code: str = "DOMAIN_ERROR"

    def __init__(
        self,
        message: str,
        *,
        rule: str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.rule = rule or self.code.lower()
        self.detail = detail or {}

    def to_detail(self) -> dict[str, Any]:
        """Rule name plus any structured context, for ServiceError.detail."""
        return {"rule": self.rule, **self.detail}


class InvariantViolation(DomainError, ValueError):
    """Input rejected at construction or mutation time."""

    code = "INVARIANT_VIOLATION"


class BusinessRuleViolation(DomainError):
    """Operation not permitted in the aggregate's current state."""

    code = "BUSINESS_RULE_VIOLATION"


class InvalidTransition(BusinessRuleViolation):
    """A lifecycle transition not present in the aggregate's transition map."""

    code = "INVALID_TRANSITION"

    def __init__(
        self, aggregate: str, current: str, target: str, *, rule: str | None = None
    ) -> None:
        super().__init__(
            f"Cannot move {aggregate} from {current} to {target}",
            rule=rule or f"{aggregate}.transition",
            detail={"current": current, "target": target},
        )
        self.current = current
        self.target = target


class CannotModifyTerminatedEmployee(BusinessRuleViolation):
    code = "EMPLOYEE_TERMINATED"

    def __init__(self, employee_id: str) -> None:
        super().__init__(
            f"Cannot modify terminated employee {employee_id}",
            rule="employee.not_terminated",
            detail={"employee_id": employee_id},
        )


class TeamSizeLimitExceeded(BusinessRuleViolation):
    code = "TEAM_SIZE_LIMIT"

    def __init__(self, team_id: str, max_size: int) -> None:
        super().__init__(
            f"Team {team_id} has reached its maximum size of {max_size}",
            rule="team.max_size",
            detail={"team_id": team_id, "max_size": max_size},
        )


class InsufficientLeaveBalance(BusinessRuleViolation):
    code = "INSUFFICIENT_BALANCE"

    def __init__(self, requested: object, available: object) -> None:
        super().__init__(
            f"Insufficient leave balance: requested {requested}, available {available}",
            rule="leave.sufficient_balance",
            detail={"requested": str(requested), "available": str(available)},
        )
