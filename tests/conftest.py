"""Shared pytest fixtures and test helpers for workforce tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from workforce.config.settings import WorkforceSettings
from workforce.domain.clock import FixedClock
from workforce.infrastructure.database.engine import init_database
from workforce.infrastructure.store import Store

# Monday 3 March 2025, 09:00 UTC.
TODAY = date(2025, 3, 3)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 3, 3, 9, tzinfo=UTC))


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> WorkforceSettings:
    monkeypatch.delenv("WORKFORCE_CONFIG", raising=False)
    return WorkforceSettings.from_cli(root=tmp_path, sync=True)


@pytest.fixture
def store(settings: WorkforceSettings, clock: FixedClock) -> Iterator[Store]:
    """Store on a temp root with a fixed clock and synchronous event dispatch."""
    s = Store(settings, clock=clock)
    s.init_event_bus(sync=True)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp root so the CLI creates an isolated store."""
    monkeypatch.delenv("WORKFORCE_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------


def hire(store: Store, **overrides: Any) -> dict[str, Any]:
    """Hire an employee via EmployeeService, asserting success."""
    from workforce.services.employee import EmployeeService

    fields: dict[str, Any] = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "position": "Developer",
        "salary": 60000,
        "location": "London Office",
        "hire_date": TODAY,
    }
    fields.update(overrides)
    result = EmployeeService(store).hire(**fields)
    assert result.ok, result.error
    return result.data


def add_equipment(store: Store, **overrides: Any) -> dict[str, Any]:
    """Register equipment via EquipmentService, asserting success."""
    from workforce.services.equipment import EquipmentService

    fields: dict[str, Any] = {
        "serial_number": "SN-000001",
        "equipment_type": "Laptop",
        "brand": "Lenovo",
        "model": "X1 Carbon",
        "purchase_price": 1800,
    }
    fields.update(overrides)
    result = EquipmentService(store).add(**fields)
    assert result.ok, result.error
    return result.data


def create_team(store: Store, name: str = "Platform", **overrides: Any) -> dict[str, Any]:
    """Create a team via TeamService, asserting success."""
    from workforce.services.team import TeamService

    fields: dict[str, Any] = {"name": name, "team_type": "Squad"}
    fields.update(overrides)
    result = TeamService(store).create(**fields)
    assert result.ok, result.error
    return result.data
