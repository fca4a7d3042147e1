"""Command: workspace initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from workforce.commands._base import WorkforceCommand

if TYPE_CHECKING:
    from workforce.commands._context import AppContext

_INIT_EXAMPLES = """\
  workforce init
  workforce init /srv/hr
  workforce --json init ."""


@click.command("init", cls=WorkforceCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=None)
@click.pass_obj
def init_cmd(app: AppContext, path: str | None) -> None:
    """Create workforce.toml and the database in PATH (default: current root)."""
    from workforce.services.admin import AdminService

    if path is not None:
        app.settings = app.settings.model_copy(update={"root": Path(path).resolve()})
    app.emit(AdminService(app.store).init())
