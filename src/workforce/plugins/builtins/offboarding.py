"""Built-in offboarding listener for ``employee.terminated``.

Removes the employee from every team they belong to and logs the
equipment still assigned to them so it can be recovered. Safe to run
more than once for the same event: a second delivery finds no
memberships left.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from workforce.infrastructure.store import Store

hookimpl = pluggy.HookimplMarker("workforce")

logger = logging.getLogger(__name__)


class OffboardingError(RuntimeError):
    """Raised so the event is retried when a team could not be updated."""


class OffboardingPlugin:
    def __init__(self, store: Store) -> None:
        self._store = store

    @hookimpl
    def employee_terminated(self, event: dict[str, Any]) -> None:
        from workforce.services.equipment import EquipmentService
        from workforce.services.team import TeamService

        employee_id = event["aggregate_id"]
        removed = TeamService(self._store).remove_from_all_teams(employee_id)
        if not removed.ok:
            assert removed.error is not None
            msg = f"Could not remove {employee_id} from teams: {removed.error.message}"
            raise OffboardingError(msg)

        held = EquipmentService(self._store).assigned_to(employee_id)
        for item in held.data.get("items", []):
            logger.warning(
                "Terminated employee %s still holds %s (%s)",
                employee_id,
                item["asset_tag"],
                item["type"],
            )
        logger.info(
            "Offboarded %s: removed from %d team(s), %d item(s) to recover",
            employee_id,
            len(removed.data.get("team_ids", [])),
            len(held.data.get("items", [])),
        )
