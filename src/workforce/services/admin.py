"""AdminService — workspace setup and event outbox maintenance."""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING, Any

from workforce.config.discovery import write_default_config
from workforce.infrastructure.database import status_counts
from workforce.services.base import BaseService
from workforce.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from workforce.infrastructure.store import StoreTransaction

logger = logging.getLogger(__name__)


class AdminService(BaseService):
    def init(self) -> ServiceResult:
        """Write a default ``workforce.toml`` and report the database state.

        The database itself is created when the Store is constructed, so
        running ``init`` twice is harmless.
        """
        path, created = write_default_config(self._store.root)

        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            if not created:
                warnings.append(f"{path.name} already exists; left unchanged")
            return {
                "root": str(self._store.root),
                "config": str(path),
                "created": created,
                "outbox": status_counts(txn.conn),
            }

        return self._run("init", work)

    def event_status(self) -> ServiceResult:
        def work(txn: StoreTransaction, warnings: list[str]) -> dict[str, Any]:
            counts = status_counts(txn.conn)
            if counts.get("dead_letter"):
                warnings.append(f"{counts['dead_letter']} event(s) in dead letter")
            return {"outbox": counts}

        return self._run("event_status", work)

    def drain_events(self) -> ServiceResult:
        """Re-deliver every pending or failed outbox row synchronously."""
        bus = self._store.event_bus
        if bus is None:
            return ServiceResult(
                ok=False,
                op="drain_events",
                error=ServiceError(
                    code="NO_EVENT_BUS",
                    message="Event bus is not initialized",
                ),
            )
        results = bus.drain()
        totals = Counter(result["status"] for result in results)
        warnings = [
            f"Listener for {result['hook_name']} failed ({result['status']})"
            for result in results
            if result["status"] in ("failed", "dead_letter")
        ]
        logger.info("Drained %d event(s): %s", len(results), dict(totals))
        return ServiceResult(
            ok=True,
            op="drain_events",
            data={"drained": len(results), "statuses": dict(totals), "items": results},
            warnings=warnings,
        )
