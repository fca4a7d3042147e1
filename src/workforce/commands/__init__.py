"""Subcommand modules for workforce.

Provides register_commands() which uses deferred imports to keep
``workforce --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from workforce.commands.events import events
    from workforce.commands.leave import leave

    cli.add_command(leave)
    cli.add_command(events)

    # --- Standalone commands ---
    from workforce.commands.init_cmd import init_cmd

    cli.add_command(init_cmd)
