"""Rich Console factory and theme for tasklistctl output.

Consoles render into a StringIO buffer so every renderer keeps the
``-> str`` contract. In non-TTY environments (tests, pipes) Rich drops
color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

TASKLIST_THEME = Theme(
    {
        "tl.ok": "bold green",
        "tl.error": "bold red",
        "tl.warning": "bold yellow",
        "tl.op": "bold cyan",
        "tl.key": "dim",
        "tl.id": "bold blue",
        "tl.title": "bold",
        "tl.status.pending": "white",
        "tl.status.in_progress": "bold yellow",
        "tl.status.completed": "green",
        "tl.status.cancelled": "dim",
        "tl.status.blocked": "red",
        "tl.priority.critical": "bold red",
        "tl.priority.high": "yellow",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=TASKLIST_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    return f"tl.status.{status}" if status else ""


def style_for_priority(priority: str) -> str:
    return f"tl.priority.{priority}" if priority in ("critical", "high") else ""
