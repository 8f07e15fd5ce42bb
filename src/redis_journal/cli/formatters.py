"""Rich formatters for CLI output.

Semantic Colors:
- green: success
- yellow: warning
- red: error
- blue: info
"""

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from redis_journal.journal.record import EventRecord

JOURNAL_THEME = Theme(
    {
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "info": "blue",
        "muted": "dim",
        "highlight": "bold cyan",
    }
)

# Shared Console instance for all CLI modules
console = Console(theme=JOURNAL_THEME)

PREVIEW_BYTES = 48


def print_success(message: str) -> None:
    console.print(f"[success]✓[/] {message}")


def print_info(message: str) -> None:
    console.print(f"[info]{message}[/]")


def print_error(message: str, title: str = "Error") -> None:
    """Print an error panel."""
    panel = Panel(
        f"[error]{escape(message)}[/]",
        title=f"[bold red]{title}[/]",
        border_style="red",
        expand=False,
    )
    console.print(panel)


def create_table(title: str | None = None, *, show_header: bool = True) -> Table:
    """Create a Rich Table with consistent styling."""
    return Table(
        title=title,
        show_header=show_header,
        border_style="blue",
        header_style="bold cyan",
        row_styles=["", "dim"],
    )


def create_key_value_table(data: dict[str, Any], title: str | None = None) -> Table:
    """Create a two-column table for key-value data."""
    table = create_table(title, show_header=False)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(key, "" if value is None else str(value))
    return table


def payload_preview(payload: bytes, limit: int = PREVIEW_BYTES) -> str:
    """Render a payload as text when it decodes as UTF-8, else as hex.

    A text preview is cut back to the last whole character within ``limit``.
    """
    head = payload[:limit]
    suffix = "…" if len(payload) > limit else ""
    try:
        payload.decode("utf-8")
    except UnicodeDecodeError:
        return head.hex() + suffix
    return head.decode("utf-8", errors="ignore") + suffix


def create_records_table(records: list[EventRecord], title: str | None = None) -> Table:
    """Create a table listing replayed records."""
    table = create_table(title)
    table.add_column("Seq", justify="right", style="highlight")
    table.add_column("Deleted")
    table.add_column("Bytes", justify="right")
    table.add_column("Payload", overflow="fold")
    for record in records:
        table.add_row(
            str(record.sequence_nr),
            "[warning]yes[/]" if record.deleted else "no",
            str(len(record.payload)),
            escape(payload_preview(record.payload)),
        )
    return table


__all__ = [
    "console",
    "JOURNAL_THEME",
    "create_key_value_table",
    "create_records_table",
    "create_table",
    "payload_preview",
    "print_error",
    "print_info",
    "print_success",
]
