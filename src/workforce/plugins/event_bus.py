"""Outbox-backed event dispatch via pluggy + ThreadPoolExecutor.

Services write events to ``event_outbox`` in the same transaction as the
state change. After commit, :meth:`EventBus.dispatch_pending` delivers
the new rows, and :meth:`EventBus.drain` re-delivers anything left
``pending`` or ``failed``. Delivery is at least once; listeners must be
idempotent.

INVARIANT: Plugin failures are warnings, never errors. A failed hook
never rolls back the committed state that produced the event.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

from sqlalchemy import select, update

from workforce.infrastructure.database.schema import event_outbox

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.engine import Engine

    from workforce.domain.clock import Clock
    from workforce.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = ("pending", "failed")


class EventBus:
    """Delivers outbox rows to plugin hooks.

    Parameters:
        engine: SQLAlchemy engine with the ``event_outbox`` table.
        plugin_manager: Loaded PluginManager for hook dispatch.
        clock: Source of completion timestamps.
        sync: Dispatch in the calling thread (tests and ``--sync``).
        max_retries: Attempts before an event is marked ``dead_letter``.
        max_workers: ThreadPoolExecutor worker count.
    """

    def __init__(
        self,
        engine: Engine,
        plugin_manager: PluginManager,
        clock: Clock,
        *,
        sync: bool = False,
        max_retries: int = 3,
        max_workers: int = 2,
    ) -> None:
        self._engine = engine
        self._pm = plugin_manager
        self._clock = clock
        self._sync = sync
        self._max_retries = max_retries
        self._executor: ThreadPoolExecutor | None = (
            None if sync else ThreadPoolExecutor(max_workers=max_workers)
        )
        self._futures: list[Future[str]] = []

    @property
    def plugin_manager(self) -> PluginManager:
        return self._pm

    @property
    def is_sync(self) -> bool:
        return self._sync

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def dispatch_pending(self, outbox_ids: Iterable[int]) -> list[dict[str, Any]]:
        """Deliver the given committed outbox rows.

        In sync mode returns ``{id, hook_name, status}`` per row. In async
        mode the rows are queued and reported as ``queued``.
        """
        rows = self._load(list(outbox_ids))
        results: list[dict[str, Any]] = []
        for row in rows:
            payload = json.loads(row.payload)
            if self._sync:
                status = self._execute_hook(row.id, row.hook_name, payload)
            else:
                assert self._executor is not None
                self._futures.append(
                    self._executor.submit(self._execute_hook, row.id, row.hook_name, payload)
                )
                status = "queued"
            results.append({"id": row.id, "hook_name": row.hook_name, "status": status})
        return results

    def drain(self) -> list[dict[str, Any]]:
        """Re-deliver pending/failed rows synchronously.

        Returns ``{id, hook_name, status}`` for each retried event.
        """
        self._wait_futures()

        with self._engine.connect() as conn:
            ids = [
                row.id
                for row in conn.execute(
                    select(event_outbox.c.id)
                    .where(event_outbox.c.status.in_(RETRYABLE_STATUSES))
                    .order_by(event_outbox.c.id)
                )
            ]

        results: list[dict[str, Any]] = []
        for row in self._load(ids):
            status = self._execute_hook(row.id, row.hook_name, json.loads(row.payload))
            results.append({"id": row.id, "hook_name": row.hook_name, "status": status})
        return results

    def shutdown(self) -> None:
        """Shutdown the ThreadPoolExecutor, waiting for queued deliveries."""
        self._wait_futures()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _load(self, ids: list[int]) -> list[Any]:
        if not ids:
            return []
        with self._engine.connect() as conn:
            return list(
                conn.execute(
                    select(event_outbox.c.id, event_outbox.c.hook_name, event_outbox.c.payload)
                    .where(event_outbox.c.id.in_(ids))
                    .order_by(event_outbox.c.id)
                )
            )

    def _execute_hook(self, row_id: int, hook_name: str, payload: dict[str, Any]) -> str:
        """Call the hook and record the outcome. Returns the new status."""
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            return self._mark_completed(row_id)

        try:
            hook_fn(event=payload)
        except Exception as exc:
            logger.warning("Hook %s failed for outbox row %s: %s", hook_name, row_id, exc)
            return self._mark_failed(row_id, str(exc))
        return self._mark_completed(row_id)

    def _mark_completed(self, row_id: int) -> str:
        with self._engine.begin() as conn:
            conn.execute(
                update(event_outbox)
                .where(event_outbox.c.id == row_id)
                .values(status="completed", error=None, completed=self._clock.now().isoformat())
            )
        return "completed"

    def _mark_failed(self, row_id: int, error: str) -> str:
        """Increment retries; mark ``failed`` or ``dead_letter``."""
        with self._engine.begin() as conn:
            retries = conn.execute(
                select(event_outbox.c.retries).where(event_outbox.c.id == row_id)
            ).scalar_one()

            new_retries = retries + 1
            new_status = "dead_letter" if new_retries >= self._max_retries else "failed"
            completed = self._clock.now().isoformat() if new_status == "dead_letter" else None
            conn.execute(
                update(event_outbox)
                .where(event_outbox.c.id == row_id)
                .values(
                    status=new_status,
                    error=error,
                    retries=new_retries,
                    completed=completed,
                )
            )
        return new_status

    def _wait_futures(self) -> None:
        for future in self._futures:
            try:
                future.result(timeout=30)
            except Exception:
                logger.debug("Queued delivery raised", exc_info=True)
        self._futures.clear()
