"""Rich Console factory and theme for workforce output.

Consoles render to a StringIO buffer so formatters keep a
``format_result() -> str`` contract. In non-TTY environments (tests,
pipes) Rich drops color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

WORKFORCE_THEME = Theme(
    {
        "wf.ok": "bold green",
        "wf.error": "bold red",
        "wf.warning": "bold yellow",
        "wf.op": "bold cyan",
        "wf.key": "dim",
        "wf.id": "bold blue",
        "wf.days": "magenta",
        "wf.status.completed": "green",
        "wf.status.failed": "yellow",
        "wf.status.dead_letter": "red",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=WORKFORCE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    return f"wf.status.{status}" if status in ("completed", "failed", "dead_letter") else ""
