"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). Renderers
are dispatched by ``result.op`` in :func:`render_result`; unknown ops
fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from workforce.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from workforce.services.result import ServiceResult

_LEDGER_COLUMNS = (
    "opening",
    "accrued",
    "adjusted",
    "carried_over",
    "used",
    "pending",
    "forfeited",
    "carried_out",
    "available",
)


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="wf.ok"), Text(f"  {result.op}", style="wf.op"))


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="wf.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="wf.id")
    elif isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":"), default=str))
    else:
        v = Text(str(value))
    console.print(k, v)


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        console.print(f"    {key}: {value}")


def _table(*columns: str) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    for column in columns:
        table.add_column(column.replace("_", " ").title())
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    label = Text("ERROR", style="wf.error")
    op = Text(f"  {result.op}{code}", style="wf.op")
    console.print(label, op, msg)
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for key, value in err.detail.items():
            console.print(f"    {key}: {value}")


# ── Leave renderers ───────────────────────────────────────────────────


def _render_balance(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "employee_id", d.get("employee_id", ""))
    _field(console, "year", d.get("year", ""))
    balances: dict[str, dict[str, Any]] = d.get("balances", {})
    if not balances:
        console.print("  no ledgers for this year")
        return
    table = _table("leave_type", *_LEDGER_COLUMNS)
    for leave_type, snapshot in sorted(balances.items()):
        label = f"{leave_type} (closed)" if snapshot.get("is_closed") else leave_type
        table.add_row(label, *(str(snapshot.get(col, "")) for col in _LEDGER_COLUMNS))
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_accrual(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "period", d.get("period", ""))
    _field(console, "credited", d.get("count", 0))
    _field(console, "already_accrued", d.get("skipped", 0))
    if verbose and d.get("accrued"):
        table = _table("employee_id", "leave_type", "days", "balance_after")
        for row in d["accrued"]:
            table.add_row(row["employee_id"], row["leave_type"], row["days"], row["balance_after"])
        console.print(table)


def _render_close_year(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "year", d.get("year", ""))
    _field(console, "closed", d.get("count", 0))
    if d.get("closed"):
        table = _table("employee_id", "leave_type", "carried_over", "forfeited")
        for row in d["closed"]:
            table.add_row(
                row["employee_id"], row["leave_type"], row["carried_over"], row["forfeited"]
            )
        console.print(table)


def _render_completed(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "completed", result.data.get("count", 0))
    for leave_id in result.data.get("completed", []):
        console.print(Text(f"    {leave_id}", style="wf.id"))


# ── Event renderers ───────────────────────────────────────────────────


def _render_outbox(console: Console, counts: dict[str, int]) -> None:
    for status in sorted(counts):
        style = style_for_status(status)
        label = Text(f"    {status}: ", style=style or "wf.key")
        console.print(label, Text(str(counts[status])))


def _render_drain(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "drained", d.get("drained", 0))
    _render_outbox(console, d.get("statuses", {}))
    if verbose and d.get("items"):
        table = _table("id", "hook_name", "status")
        for item in d["items"]:
            status = str(item["status"])
            table.add_row(
                str(item["id"]), item["hook_name"], Text(status, style=style_for_status(status))
            )
        console.print(table)


def _render_event_status(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    console.print(Text("  outbox:", style="wf.key"))
    _render_outbox(console, result.data.get("outbox", {}))


def _render_init(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "root", d.get("root", ""))
    _field(console, "config", d.get("config", ""))
    _field(console, "created", d.get("created", False))


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "leave_balance": _render_balance,
    "accrue_leave": _render_accrual,
    "close_year": _render_close_year,
    "complete_leave": _render_completed,
    "drain_events": _render_drain,
    "event_status": _render_event_status,
    "init": _render_init,
}
