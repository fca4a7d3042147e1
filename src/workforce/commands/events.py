"""Command group: event outbox maintenance."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from workforce.commands._base import WorkforceGroup

if TYPE_CHECKING:
    from workforce.commands._context import AppContext

_EVENTS_EXAMPLES = """\
  workforce events status
  workforce events drain
  workforce -v events drain"""


@click.group(cls=WorkforceGroup, examples=_EVENTS_EXAMPLES)
def events() -> None:
    """Inspect and re-deliver domain events."""


@events.command(examples="  workforce events status")
@click.pass_obj
def status(app: AppContext) -> None:
    """Count outbox rows per delivery status."""
    from workforce.services.admin import AdminService

    app.emit(AdminService(app.store).event_status())


@events.command(examples="  workforce events drain\n  workforce -v events drain")
@click.pass_obj
def drain(app: AppContext) -> None:
    """Re-deliver pending and failed events to listeners."""
    from workforce.services.admin import AdminService

    app.emit(AdminService(app.store).drain_events())
