"""Rich Console factory and theme for structmap output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich disables color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

STRUCTMAP_THEME = Theme(
    {
        "sm.ok": "bold green",
        "sm.error": "bold red",
        "sm.warning": "bold yellow",
        "sm.op": "bold cyan",
        "sm.key": "dim",
        "sm.path": "dim",
        "sm.field": "bold",
        "sm.type": "blue",
        "sm.tag": "magenta",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=STRUCTMAP_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
