"""Root ``workforce`` command: global flags, settings, and subcommand wiring.

The CLI is the scheduling surface of the HR model. Interactive use goes
through the services directly; what runs from cron or an operator shell
is here:

- ``workforce init``           create ``workforce.toml`` and the database
- ``workforce leave ...``      monthly accrual, year-end close, balances
- ``workforce events ...``     inspect and drain the event outbox
"""

from __future__ import annotations

from pathlib import Path

import click

from workforce import __version__
from workforce.commands import register_commands
from workforce.commands._context import AppContext
from workforce.config.settings import WorkforceSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="workforce")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and the audit trail.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding .workforce/ (default: where workforce.toml is found).",
)
@click.option("--sync", is_flag=True, help="Deliver events to listeners before returning.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    root: Path | None,
    sync: bool,
) -> None:
    """Employee, equipment, team, and leave administration.

    Run the scheduled leave jobs and maintain the event outbox of a
    workforce store.
    """
    settings = WorkforceSettings.from_cli(
        config_path=config_path,
        root=root.resolve() if root is not None else None,
        json_output=json_output,
        verbose=verbose,
        log_json=log_json,
        sync=sync,
    )
    app = AppContext(settings)
    ctx.obj = app
    # Closes the store and waits for queued event deliveries.
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
