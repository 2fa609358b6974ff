"""Rich/JSON output helpers.

The CLI renders ServiceResult for humans (Rich text, step tables) or
machines (--json). --quiet keeps only what a script would grep for.
"""

from __future__ import annotations

import json as _json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table

from retailctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from retailctl.services.result import ServiceResult

# Keys rendered by dedicated sections, or already shown as status lines.
_SECTION_KEYS = {"steps", "databases", "output", "teardown", "script", "notice"}


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def _state_label(value: bool | None) -> str:
    if value is None:
        return "[retail.key]n/a[/]"
    return "[retail.done]yes[/]" if value else "[retail.pending]no[/]"


def _render_steps(console: Console, steps: list[dict[str, Any]]) -> None:
    table = Table(show_header=True, header_style="retail.key", box=None, pad_edge=False)
    table.add_column("step", style="retail.step")
    table.add_column("already in place")
    table.add_column("in place now")
    for step in steps:
        table.add_row(
            escape(str(step.get("name", ""))),
            _state_label(step.get("already_satisfied")),
            _state_label(step.get("satisfied")),
        )
    console.print(table)


def _render_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return _json.dumps(value, separators=(",", ":"))
    return str(value)


def _render_ok(console: Console, result: ServiceResult) -> None:
    console.print(f"[retail.ok]OK[/]: [retail.op]{result.op}[/]")
    data = result.data
    for key, value in data.items():
        if key in _SECTION_KEYS or value is None:
            continue
        console.print(f"  [retail.key]{key}:[/] {escape(_render_value(value))}")
    if data.get("steps"):
        _render_steps(console, data["steps"])
    if data.get("databases"):
        console.print(f"  [retail.key]databases:[/] {escape(', '.join(data['databases']))}")
    if data.get("output"):
        console.print(escape(str(data["output"]).rstrip("\n")))


def _render_error(console: Console, result: ServiceResult) -> None:
    error = result.error
    message = error.message if error else "Unknown error"
    console.print(f"[retail.error]ERROR[/]: [retail.op]{result.op}[/] — {escape(message)}")
    if error is None:
        return
    remediation = error.detail.get("remediation")
    if remediation:
        console.print(f"  [retail.hint]{escape(str(remediation))}[/]")
    for key, value in error.detail.items():
        if key == "remediation" or value in (None, [], {}):
            continue
        console.print(f"  [retail.key]{key}:[/] {escape(_render_value(value))}")


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        settings: Output mode flags; defaults to human-readable output.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        if result.ok:
            return f"OK: {result.op}"
        return result.error.message if result.error else "Unknown error"

    console = create_console()
    if result.ok:
        _render_ok(console, result)
    else:
        _render_error(console, result)
    if settings.verbose and result.meta:
        console.print(f"  [retail.key]meta:[/] {escape(_render_value(result.meta))}")
    return get_output(console).rstrip("\n")
