"""Store — unit of work over the workforce database.

The Store is the single dependency injected into every service. It owns
the engine, the clock, and the event bus. :meth:`Store.transaction`
yields a :class:`StoreTransaction` exposing one repository per
aggregate:

- **DB**: Native SQLAlchemy ``engine.begin()`` (``BEGIN IMMEDIATE``)
  with auto-commit/rollback.
- **Events**: Aggregates saved through :meth:`StoreTransaction.save`
  have their released events appended to ``event_outbox`` just before
  commit. A rolled-back transaction therefore leaves no events behind.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING

from workforce.domain.clock import SystemClock
from workforce.domain.employee import Employee
from workforce.domain.equipment import Equipment
from workforce.domain.leave import LeaveRequest
from workforce.domain.ledger import LeaveBalance
from workforce.domain.team import Team
from workforce.infrastructure.database.engine import init_database
from workforce.infrastructure.database.outbox import append_events
from workforce.infrastructure.repositories import (
    EmployeeRepository,
    EquipmentRepository,
    LeaveBalanceRepository,
    LeaveRequestRepository,
    TeamRepository,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from workforce.config.settings import WorkforceSettings
    from workforce.domain.clock import Clock
    from workforce.domain.events import EventSource
    from workforce.plugins.event_bus import EventBus

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# StoreTransaction: yielded to callers within transaction()
# ---------------------------------------------------------------------------


@dataclass
class StoreTransaction:
    """Active transaction with repositories and event tracking.

    Aggregates must be persisted through :meth:`save` so their events
    reach the outbox. ``outbox_ids`` is filled in when the block exits
    normally.
    """

    conn: Connection
    clock: Clock
    _sources: list[EventSource] = field(default_factory=list, repr=False)
    outbox_ids: list[int] = field(default_factory=list)

    @cached_property
    def employees(self) -> EmployeeRepository:
        return EmployeeRepository(self.conn, self.clock)

    @cached_property
    def equipment(self) -> EquipmentRepository:
        return EquipmentRepository(self.conn, self.clock)

    @cached_property
    def teams(self) -> TeamRepository:
        return TeamRepository(self.conn, self.clock)

    @cached_property
    def leave_requests(self) -> LeaveRequestRepository:
        return LeaveRequestRepository(self.conn, self.clock)

    @cached_property
    def balances(self) -> LeaveBalanceRepository:
        return LeaveBalanceRepository(self.conn, self.clock)

    def save(self, aggregate: Employee | Equipment | Team | LeaveRequest | LeaveBalance) -> None:
        """Persist *aggregate* with the matching repository and track its events."""
        if isinstance(aggregate, Employee):
            self.employees.save(aggregate)
        elif isinstance(aggregate, Equipment):
            self.equipment.save(aggregate)
        elif isinstance(aggregate, Team):
            self.teams.save(aggregate)
        elif isinstance(aggregate, LeaveRequest):
            self.leave_requests.save(aggregate)
        elif isinstance(aggregate, LeaveBalance):
            self.balances.save(aggregate)
            return
        else:
            msg = f"No repository for {type(aggregate).__name__}"
            raise TypeError(msg)
        if aggregate not in self._sources:
            self._sources.append(aggregate)

    def flush_events(self) -> list[int]:
        """Write every tracked aggregate's released events to the outbox."""
        events = [e for source in self._sources for e in source.release_events()]
        if not events:
            return []
        ids = append_events(self.conn, events, created=self.clock.now().isoformat())
        self.outbox_ids.extend(ids)
        return ids


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class Store:
    """Database, clock, and event bus shared by all services.

    Constructed once at CLI startup from :class:`WorkforceSettings`.
    Tests pass a temporary *root* and a ``FixedClock``.
    """

    def __init__(
        self,
        settings: WorkforceSettings,
        *,
        clock: Clock | None = None,
        engine: Engine | None = None,
    ) -> None:
        self._settings = settings
        self._clock = clock or SystemClock()
        self._engine: Engine = engine or init_database(
            settings.root,
            settings.store.db_name,
            busy_timeout=settings.store.busy_timeout,
        )
        self._event_bus: EventBus | None = None

    @property
    def root(self) -> Path:
        return self._settings.root

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def settings(self) -> WorkforceSettings:
        return self._settings

    @property
    def event_bus(self) -> EventBus | None:
        """The plugin event bus (None if not initialized)."""
        return self._event_bus

    def init_event_bus(self, *, sync: bool | None = None) -> EventBus:
        """Initialize the plugin event bus.

        Creates a PluginManager, discovers entry-point and local plugins,
        registers the enabled built-in listeners, and wires up the EventBus.
        """
        from workforce.infrastructure.database.engine import DATA_DIR
        from workforce.plugins.builtins.audit import AuditPlugin
        from workforce.plugins.builtins.offboarding import OffboardingPlugin
        from workforce.plugins.event_bus import EventBus
        from workforce.plugins.manager import PluginManager

        pm = PluginManager()
        pm.discover_and_load(local_dir=self.root / DATA_DIR / "plugins")

        if self._settings.plugins.audit:
            pm.register_plugin(AuditPlugin(), name="audit-builtin")
        if self._settings.plugins.offboarding:
            pm.register_plugin(OffboardingPlugin(self), name="offboarding-builtin")

        events = self._settings.events
        if sync is None:
            sync = events.sync or self._settings.sync
        self._event_bus = EventBus(
            self._engine,
            pm,
            self._clock,
            sync=sync,
            max_retries=events.max_retries,
            max_workers=events.max_workers,
        )
        return self._event_bus

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """Atomic unit of work.

        Commits on normal exit after flushing tracked events into the
        outbox; rolls back (events included) on any exception.

        Usage::

            with store.transaction() as txn:
                employee = txn.employees.load(employee_id)
                employee.change_location(...)
                txn.save(employee)
            bus.dispatch_pending(txn.outbox_ids)
        """
        with self._engine.begin() as conn:
            txn = StoreTransaction(conn=conn, clock=self._clock)
            yield txn
            txn.flush_events()

    def close(self) -> None:
        """Stop the event bus and release pooled connections."""
        if self._event_bus is not None:
            self._event_bus.shutdown()
            self._event_bus = None
        self._engine.dispose()
