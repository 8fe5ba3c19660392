"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from structmap.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from structmap.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    if result.ok and "source" in result.data:
        # --stdout: raw generated source
        return str(result.data["source"]).rstrip("\n")

    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    if "source" in result.data:
        return str(result.data["source"]).rstrip("\n")
    if "path" in result.data:
        return str(result.data["path"])
    fields = result.data.get("fields")
    if isinstance(fields, list):
        return "\n".join(str(f.get("name", "")) for f in fields)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="sm.ok")
    op = Text(f"  {result.op}", style="sm.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="sm.key")
    v = Text(str(value), style="sm.path" if key == "path" else "")
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="sm.error")
    op = Text(f"  {result.op}", style="sm.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Operation renderers ───────────────────────────────────────────────


def _render_generate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the written file path and the generated functions."""
    _status_line(console, result)
    d = result.data
    for key in ("path", "package"):
        if key in d:
            _field(console, key, d[key])
    functions = d.get("functions", [])
    _field(console, "functions", len(functions))
    if verbose:
        for name in functions:
            console.print(f"    {name}")
        imports = d.get("imports", [])
        if imports:
            _field(console, "imports", len(imports))
            for line in imports:
                console.print(f"    {line}")
        _render_meta(console, result)


def _render_fields(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a resolved type as a field table."""
    d = result.data
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Field", style="sm.field", no_wrap=True)
    table.add_column("Type", style="sm.type")
    table.add_column("Tag", style="sm.tag")
    if verbose:
        table.add_column("Imports", style="dim")

    for item in d.get("fields", []):
        row = [str(item.get("name", "")), str(item.get("type", "")), str(item.get("tag", ""))]
        if verbose:
            row.append(", ".join(item.get("imports", [])))
        table.add_row(*row)

    console.print(Text(str(d.get("type", "")), style="sm.op"))
    console.print(table)
    console.print(f"\n{d.get('count', 0)} fields")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "generate": _render_generate,
    "fields": _render_fields,
}
