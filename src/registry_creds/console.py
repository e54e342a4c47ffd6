"""Rich console utilities for styled controller output.

This module provides a consistent interface for all controller output
using the Rich library. Tokens must never be passed to these helpers.
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from registry_creds.models import CycleReport

# Custom theme with consistent colors
_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "cyan bold",
        "muted": "dim",
    }
)

# Shared console instance; stderr keeps stdout free for --version
console = Console(theme=_THEME, stderr=True)


def info(message: str) -> None:
    """Print an informational message.

    Args:
        message: The message to display.

    """
    console.print(f"[info]ℹ[/info] {message}")


def success(message: str) -> None:
    """Print a success message.

    Args:
        message: The message to display.

    """
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Print a warning message.

    Args:
        message: The message to display.

    """
    console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Print an error message.

    Args:
        message: The message to display.

    """
    console.print(f"[error]✗[/error] {message}")


def action(message: str) -> None:
    """Print an action/progress message."""
    console.print(f"[info]→[/info] {message}")


def step(message: str) -> None:
    """Print a sub-step message."""
    console.print(f"[muted]•[/muted] {message}")


def highlight(text: str) -> str:
    """Return text wrapped in highlight markup.

    Args:
        text: The text to highlight.

    Returns:
        Text wrapped in Rich markup for highlighting.

    """
    return f"[highlight]{text}[/highlight]"


def cycle_summary(report: CycleReport) -> None:
    """Print the outcome of a reconciliation cycle.

    The panel turns red when any unit failed, and each collected error is
    listed below it.

    Args:
        report: The report of the finished cycle.

    """
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(style="cyan")

    table.add_row("Providers:", ", ".join(report.providers) or "none")
    table.add_row("Namespaces:", str(len(report.namespaces)))
    table.add_row("Secrets synced:", str(report.secrets_synced))
    table.add_row("References added:", str(report.references_added))
    table.add_row("Errors:", str(len(report.errors)))

    border = "green" if report.ok else "red"
    console.print(Panel(table, title="[bold]Reconciliation cycle[/bold]", border_style=border))

    for err in report.errors:
        console.print(f"  [error]•[/error] {type(err).__name__}: {escape(str(err))}")
