"""Pluggy hook specifications, one per domain event.

Hook names are the dotted event type with ``.`` replaced by ``_``
(``employee.hired`` → ``employee_hired``). Every hook receives the
event's JSON payload as ``event``. Hooks run after the originating
transaction has committed and may be delivered more than once.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("workforce")


class WorkforceHookSpec:
    """Hook specifications for the workforce plugin system."""

    # --- Employee ---

    @hookspec
    def employee_hired(self, event: dict[str, Any]) -> None:
        """Called after an employee is hired."""

    @hookspec
    def employee_personal_info_updated(self, event: dict[str, Any]) -> None:
        """Called after personal details change."""

    @hookspec
    def employee_position_changed(self, event: dict[str, Any]) -> None:
        """Called after a promotion or other position change."""

    @hookspec
    def employee_location_changed(self, event: dict[str, Any]) -> None:
        """Called after an employee moves work location."""

    @hookspec
    def employee_remote_work_configured(self, event: dict[str, Any]) -> None:
        """Called after the remote-work policy is set or cleared."""

    @hookspec
    def employee_status_changed(self, event: dict[str, Any]) -> None:
        """Called after Active ⇄ OnLeave."""

    @hookspec
    def employee_terminated(self, event: dict[str, Any]) -> None:
        """Called after termination."""

    @hookspec
    def employee_reinstated(self, event: dict[str, Any]) -> None:
        """Called after a terminated employee is reinstated."""

    # --- Equipment ---

    @hookspec
    def equipment_added(self, event: dict[str, Any]) -> None:
        """Called after new equipment is registered."""

    @hookspec
    def equipment_issued(self, event: dict[str, Any]) -> None:
        """Called after equipment is issued to an employee."""

    @hookspec
    def equipment_returned(self, event: dict[str, Any]) -> None:
        """Called after equipment is returned."""

    @hookspec
    def equipment_transferred(self, event: dict[str, Any]) -> None:
        """Called after equipment moves between employees."""

    @hookspec
    def equipment_maintenance_scheduled(self, event: dict[str, Any]) -> None:
        """Called when equipment goes into maintenance."""

    @hookspec
    def equipment_maintenance_completed(self, event: dict[str, Any]) -> None:
        """Called when equipment comes back from maintenance."""

    @hookspec
    def equipment_decommissioned(self, event: dict[str, Any]) -> None:
        """Called after equipment is retired."""

    # --- Team ---

    @hookspec
    def team_created(self, event: dict[str, Any]) -> None:
        """Called after a team is created."""

    @hookspec
    def team_updated(self, event: dict[str, Any]) -> None:
        """Called after a team is renamed or re-described."""

    @hookspec
    def team_employee_assigned(self, event: dict[str, Any]) -> None:
        """Called after a member joins a team."""

    @hookspec
    def team_employee_removed(self, event: dict[str, Any]) -> None:
        """Called after a member leaves a team."""

    @hookspec
    def team_member_updated(self, event: dict[str, Any]) -> None:
        """Called after a member's role or allocation changes."""

    @hookspec
    def team_lead_changed(self, event: dict[str, Any]) -> None:
        """Called after the team lead changes."""

    @hookspec
    def team_disbanded(self, event: dict[str, Any]) -> None:
        """Called after a team is disbanded."""

    # --- Leave ---

    @hookspec
    def leave_requested(self, event: dict[str, Any]) -> None:
        """Called after a leave request is submitted."""

    @hookspec
    def leave_approved(self, event: dict[str, Any]) -> None:
        """Called after a leave request is approved."""

    @hookspec
    def leave_rejected(self, event: dict[str, Any]) -> None:
        """Called after a leave request is rejected."""

    @hookspec
    def leave_cancelled(self, event: dict[str, Any]) -> None:
        """Called after a leave request is cancelled."""

    @hookspec
    def leave_completed(self, event: dict[str, Any]) -> None:
        """Called after approved leave has been taken."""
