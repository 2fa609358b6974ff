"""Rich Console factory and theme for retailctl output.

Consoles render into a StringIO buffer so formatting stays a pure
``ServiceResult -> str`` function. In non-TTY environments (tests,
pipes) Rich drops the color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

RETAIL_THEME = Theme(
    {
        "retail.ok": "bold green",
        "retail.error": "bold red",
        "retail.warning": "bold yellow",
        "retail.op": "bold cyan",
        "retail.key": "dim",
        "retail.step": "bold",
        "retail.done": "green",
        "retail.pending": "yellow",
        "retail.hint": "italic",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=RETAIL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
