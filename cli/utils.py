"""Utility functions for the command-line client."""
import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from agenda.grid import WEEKDAY_HEADERS, build_month_grid, month_title, weeks
from agenda.models import CalendarEvent

console = Console()
err_console = Console(stderr=True)


def setup_logging(level: str) -> None:
    """Route stdlib logging through rich on stderr.

    Args:
        level: Level name such as "INFO"; unknown names fall back to WARNING.
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
        force=True,
    )


def truncate(text: str, max_length: int = 18) -> str:
    """Truncate text to max_length characters, adding ellipsis if needed."""
    if len(text) <= max_length:
        return text
    return text[:max_length - 1] + "…"


def create_month_table(year: int, month: int, events: list[CalendarEvent]) -> Table:
    """Create a Sunday-first month grid with each day's activities."""
    table = Table(
        title=f"📅 {month_title(year, month)}",
        show_header=True,
        header_style="bold magenta",
        show_lines=True,
    )
    for header in WEEKDAY_HEADERS:
        table.add_column(header, style="white", width=14, vertical="top")

    for row in weeks(build_month_grid(year, month, events)):
        rendered = []
        for cell in row:
            if cell.empty:
                rendered.append("")
                continue
            lines = [f"[bold]{cell.day}[/bold]"]
            lines.extend(
                f"[violet]{event.time}[/violet] {truncate(event.activity, 8)}"
                for event in cell.events
            )
            rendered.append("\n".join(lines))
        table.add_row(*rendered)
    return table


def create_events_table(events: list[CalendarEvent], title: str) -> Table:
    """Create a table listing events with their ids."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Fecha", style="yellow")
    table.add_column("Hora", style="cyan")
    table.add_column("Actividad", style="white")
    for event in events:
        table.add_row(event.id, event.date, f"{event.time} hs", event.activity)
    return table
