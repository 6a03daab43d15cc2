# -*- coding: utf-8 -*-
import typing as t
from datetime import date, datetime

from fastmcp import FastMCP

from agenda.config import DATA_PATH
from agenda.editor import EventEditor
from agenda.grid import WEEKDAY_HEADERS, build_month_grid, month_title, upcoming_events as _upcoming, weeks
from agenda.models import DEFAULT_TIME, CalendarEvent, is_valid_date
from agenda.storage import JsonFileStorage
from agenda.store import EventStore


def _format_when(event: CalendarEvent) -> str:
    """Formats an event's date and time concisely, e.g. 'Lun 10/3 09:00 hs'."""
    short_days = ("Lun", "Mar", "Mié", "Jue", "Vie", "Sáb", "Dom")
    starts = event.starts_at
    return f"{short_days[starts.weekday()]} {starts.day}/{starts.month} {event.time} hs"


def format_events(events: list[CalendarEvent]) -> str:
    """Formats events as a clean table.

    :param events: Events to list, already ordered.
    :return: Formatted table string.
    """
    if not events:
        return "📅 No tienes actividades agendadas."

    lines = []
    lines.append("📅 ACTIVIDADES")
    lines.append("=" * 80)
    lines.append(f"{'#':<4} {'ID':<15} {'Cuándo':<20} {'Actividad':<40}")
    lines.append("-" * 80)
    for idx, event in enumerate(events, 1):
        activity = event.activity[:39] if len(event.activity) > 39 else event.activity
        lines.append(f"{idx:<4} {event.id:<15} {_format_when(event):<20} {activity:<40}")
    lines.append("=" * 80)
    lines.append(f"Total: {len(events)} actividad(es)")
    return "\n".join(lines)


def format_month(year: int, month: int, events: list[CalendarEvent]) -> str:
    """Renders a month as a plain-text grid with the day's event count per cell.

    :return: Multi-line string; days with events are marked like '10*2'.
    """
    width = 6
    lines = [month_title(year, month).center(width * 7).rstrip()]
    lines.append("".join(f"{header:<{width}}" for header in WEEKDAY_HEADERS).rstrip())
    for row in weeks(build_month_grid(year, month, events)):
        cells = []
        for cell in row:
            if cell.empty:
                cells.append(" " * width)
            elif cell.events:
                cells.append(f"{cell.day}*{len(cell.events)}".ljust(width))
            else:
                cells.append(str(cell.day).ljust(width))
        lines.append("".join(cells).rstrip())

    in_month = [e for e in events if e.date.startswith(f"{year:04d}-{month:02d}-")]
    if in_month:
        lines.append("")
        for event in in_month:
            lines.append(f"  {event.date} {event.time}  {event.activity}")
    return "\n".join(lines)


def create_agenda_server(
        store: EventStore,
        clock: t.Callable[[], datetime] = datetime.now,
) -> FastMCP:
    """Creates an MCP server exposing calendar tools over ``store``.

    :param store: The event store the tools read and mutate.
    :param clock: Source of the current time for ids and upcoming events.
    :return: A FastMCP server instance.
    """
    mcp = FastMCP("AgendaServer")
    # Calling a tool is the user's confirmation, so deletes are always approved
    editor = EventEditor(store, confirm=lambda event: True, clock=clock)

    @mcp.tool()
    def create_event(
            date: str,
            activity: str,
            time: str = DEFAULT_TIME
    ) -> CalendarEvent:
        """Schedules a new activity.

        :param date: Local date as YYYY-MM-DD.
        :param activity: What to do; must not be blank.
        :param time: Local time as HH:MM (24h), defaults to 09:00.
        :return: The created CalendarEvent.
        """
        editor.open_for_day(_parse_day(date))
        editor.time = time
        editor.activity = activity
        event = editor.save()
        editor.close()
        if event is None:
            raise ValueError("Activity must not be blank and time must be HH:MM.")
        return event

    @mcp.tool()
    def update_event(
            event_id: str,
            date: t.Optional[str] = None,
            time: t.Optional[str] = None,
            activity: t.Optional[str] = None
    ) -> CalendarEvent:
        """Changes the date, time or activity of an existing event.

        :param event_id: Id of the event to change.
        :param date: New local date as YYYY-MM-DD (optional).
        :param time: New local time as HH:MM (optional).
        :param activity: New activity text (optional).
        :return: The updated CalendarEvent.
        """
        if not editor.request_edit(event_id):
            raise ValueError(f"No event with id {event_id!r}.")
        if date is not None:
            editor.selected_date = _parse_day(date)
        if time is not None:
            editor.time = time
        if activity is not None:
            editor.activity = activity
        event = editor.save()
        editor.close()
        if event is None:
            raise ValueError("Activity must not be blank and time must be HH:MM.")
        return event

    @mcp.tool()
    def delete_event(event_id: str) -> bool:
        """Deletes an event.

        :param event_id: Id of the event to delete.
        :return: True if an event was deleted, False if the id was unknown.
        """
        return editor.request_delete(event_id)

    @mcp.tool()
    def list_events() -> list[CalendarEvent]:
        """Lists all events ordered by date and time.

        :return: A list of CalendarEvent objects.
        """
        return store.list()

    @mcp.tool()
    def upcoming_events() -> str:
        """Displays the events that have not happened yet.

        :return: Formatted table of upcoming events.
        """
        return format_events(_upcoming(store.list(), clock()))

    @mcp.tool()
    def show_month(
            year: t.Optional[int] = None,
            month: t.Optional[int] = None
    ) -> str:
        """Displays one month of the calendar as a text grid.

        :param year: Four-digit year, defaults to the current year.
        :param month: Month number 1-12, defaults to the current month.
        :return: Text grid followed by the month's events.
        """
        today = clock()
        year = today.year if year is None else year
        month = today.month if month is None else month
        return format_month(year, month, store.list())

    return mcp


def _parse_day(value: str) -> date:
    if not is_valid_date(value):
        raise ValueError(f"Date must be YYYY-MM-DD, got {value!r}")
    return date.fromisoformat(value)


if __name__ == "__main__":
    create_agenda_server(EventStore.open(JsonFileStorage(DATA_PATH))).run()
