"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, workforce.toml only contains
overrides. A fresh store needs no configuration at all.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from pydantic import BaseModel, Field

from workforce.domain.leave import LeaveType
from workforce.domain.ledger import DEFAULT_ACCRUAL_RATES, DEFAULT_MAX_CARRY_OVER, LeavePolicy

# --- workforce.toml sections ---


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    db_name: str = "workforce.db"
    conflict_retries: int = Field(default=3, ge=0)
    busy_timeout: float = Field(default=30.0, gt=0)


class EventsConfig(BaseModel):
    """[events] section."""

    model_config = {"frozen": True}

    sync: bool = False
    max_retries: int = Field(default=3, ge=1)
    max_workers: int = Field(default=2, ge=1)


class LeaveConfig(BaseModel):
    """[leave] section.

    Rates and caps are keyed by leave type name (``Vacation``, ``Sick``...).
    Types missing from ``accrual_rates`` do not accrue.
    """

    model_config = {"frozen": True}

    accrual_rates: dict[LeaveType, Decimal] = Field(
        default_factory=lambda: dict(DEFAULT_ACCRUAL_RATES)
    )
    max_carry_over: dict[LeaveType, Decimal] = Field(
        default_factory=lambda: dict(DEFAULT_MAX_CARRY_OVER)
    )
    max_balance: dict[LeaveType, Decimal] = Field(default_factory=dict)
    cancellation_window_hours: int = Field(default=24, ge=0)

    @property
    def cancellation_window(self) -> timedelta:
        return timedelta(hours=self.cancellation_window_hours)

    def policy_for(self, leave_type: LeaveType) -> LeavePolicy:
        return LeavePolicy(
            accrual_rate=self.accrual_rates.get(leave_type, Decimal(0)),
            max_carry_over=self.max_carry_over.get(leave_type, Decimal(0)),
            max_balance=self.max_balance.get(leave_type),
        )


class TeamConfig(BaseModel):
    """[team] section."""

    model_config = {"frozen": True}

    default_max_size: int | None = Field(default=None, ge=1)


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    audit: bool = True
    offboarding: bool = True

