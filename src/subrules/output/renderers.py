"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from subrules.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from subrules.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        _OP_RENDERERS[result.op](result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: rule names only."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items") or result.data.get("deployed")
    if items and isinstance(items, list):
        return "\n".join(str(item.get("name", "")) for item in items)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="rules.ok")
    op = Text(f"  {result.op}", style="rules.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="rules.key")
    v = Text(str(value), style="rules.name" if key == "name" else "")
    console.print(k, v, sep="", end="")
    console.print()


def _rule_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    """Build a Rich Table of rules; filters are shown only when verbose."""
    table = Table(show_header=True, show_lines=verbose, pad_edge=False, expand=False)
    table.add_column("Name", style="rules.name", no_wrap=True)
    table.add_column("Length", justify="right")
    if verbose:
        table.add_column("Filter", style="rules.filter", overflow="fold")

    for item in items:
        row = [str(item.get("name", "")), str(item.get("length", ""))]
        if verbose:
            row.append(str(item.get("filter_expression", "")))
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="rules.error")
    op = Text(f"  {result.op}", style="rules.op")
    dash = Text(" — ")
    console.print(label, op, dash, Text(msg), sep="")

    if err and err.detail and (verbose or err.code == "INVALID_STATE"):
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_generate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "handler", d["handler"])
    _field(console, "version", d["version"])
    _field(console, "count", d["count"])
    if d["items"]:
        console.print()
        console.print(_rule_table(d["items"], verbose=verbose))


def _render_reconcile(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "handler", d["handler"])
    _field(console, "version", d["version"])
    if d["skipped"]:
        reason = Text(f": {d.get('reason') or ''}")
        console.print(Text("  skipped", style="rules.warning"), reason, sep="")
        return

    for name in d["added"]:
        console.print(Text(f"  + {name}", style="rules.added"))
    for name in d["removed"]:
        console.print(Text(f"  - {name}", style="rules.removed"))
    if verbose:
        for name in d["unchanged"]:
            console.print(Text(f"  = {name}", style="rules.unchanged"))
    if not d["added"] and not d["removed"]:
        console.print("  [rules.unchanged]already converged[/rules.unchanged]")
    if d.get("written"):
        _field(console, "written", d["written"])
    if verbose and d["deployed"]:
        console.print()
        console.print(_rule_table(d["deployed"], verbose=True))


def _render_inspect(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Name", style="rules.name", no_wrap=True)
    table.add_column("Format")
    table.add_column("Index", justify="right")
    table.add_column("Version")
    for item in result.data["items"]:
        index = item.get("index")
        table.add_row(
            str(item["name"]),
            str(item["format"]),
            "" if index is None else str(index),
            item.get("version") or "-",
        )
    console.print(table)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "generate": _render_generate,
    "reconcile": _render_reconcile,
    "inspect": _render_inspect,
}
