"""Click base classes shared by the workforce commands.

HR jobs are usually run from cron or by an operator copying a line from
a runbook, so each command carries a few sample invocations
(``workforce leave accrue --period 2025-03``). They are kept out of
``--help`` and printed by ``--examples`` instead.
"""

from __future__ import annotations

from typing import Any

import click

_EXAMPLES_HINT = "Run with --examples for sample invocations."


def _add_examples_option(cmd: click.Command, examples: str) -> None:
    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )
    if cmd.epilog is None:
        cmd.epilog = _EXAMPLES_HINT


class WorkforceCommand(click.Command):
    """Command with an optional ``examples`` block behind ``--examples``."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class WorkforceGroup(click.Group):
    """Group form of :class:`WorkforceCommand`.

    Subcommands created with ``@group.command(examples=...)`` get the same
    treatment without passing ``cls=``.
    """

    command_class = WorkforceCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)
