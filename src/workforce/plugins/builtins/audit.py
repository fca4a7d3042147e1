"""Built-in audit listener: one structured log line per domain event.

Implements every hook in :class:`WorkforceHookSpec` by binding the event
fields onto a structlog logger. Output follows whatever
:func:`workforce.config.logging.configure_logging` set up.
"""

from __future__ import annotations

from typing import Any

import pluggy
import structlog

hookimpl = pluggy.HookimplMarker("workforce")

_IDENTITY_FIELDS = ("event_type", "event_id", "aggregate_id", "occurred_at")


class AuditPlugin:
    """Logs every domain event at INFO under ``workforce.audit``."""

    def __init__(self) -> None:
        self._log = structlog.get_logger("workforce.audit")
        self.seen: list[str] = []

    def _record(self, event: dict[str, Any]) -> None:
        # Redelivered events are logged again; consumers key on event_id.
        details = {k: v for k, v in event.items() if k not in _IDENTITY_FIELDS}
        self._log.info(
            event.get("event_type", "unknown"),
            event_id=event.get("event_id"),
            aggregate_id=event.get("aggregate_id"),
            occurred_at=event.get("occurred_at"),
            **details,
        )
        self.seen.append(str(event.get("event_id")))

    # --- Employee ---

    @hookimpl
    def employee_hired(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def employee_personal_info_updated(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def employee_position_changed(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def employee_location_changed(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def employee_remote_work_configured(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def employee_status_changed(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def employee_terminated(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def employee_reinstated(self, event: dict[str, Any]) -> None:
        self._record(event)

    # --- Equipment ---

    @hookimpl
    def equipment_added(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def equipment_issued(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def equipment_returned(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def equipment_transferred(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def equipment_maintenance_scheduled(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def equipment_maintenance_completed(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def equipment_decommissioned(self, event: dict[str, Any]) -> None:
        self._record(event)

    # --- Team ---

    @hookimpl
    def team_created(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def team_updated(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def team_employee_assigned(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def team_employee_removed(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def team_member_updated(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def team_lead_changed(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def team_disbanded(self, event: dict[str, Any]) -> None:
        self._record(event)

    # --- Leave ---

    @hookimpl
    def leave_requested(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def leave_approved(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def leave_rejected(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def leave_cancelled(self, event: dict[str, Any]) -> None:
        self._record(event)

    @hookimpl
    def leave_completed(self, event: dict[str, Any]) -> None:
        self._record(event)
