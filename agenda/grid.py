# -*- coding: utf-8 -*-
"""Month grid construction for the calendar view.

Everything here is a pure function of its arguments.
"""
import calendar
import typing as t
from datetime import date, datetime

from agenda.models import CalendarEvent, DayCell

# Sunday-first week, as shown in the grid header
WEEKDAY_HEADERS = ("Do", "Lu", "Ma", "Mi", "Ju", "Vi", "Sa")

MONTH_NAMES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)


def leading_blanks(year: int, month: int) -> int:
    """Number of empty cells before day 1 in a Sunday-first layout."""
    # date.weekday() is Monday=0; shift so Sunday=0
    return (date(year, month, 1).weekday() + 1) % 7


def build_month_grid(year: int, month: int, events: t.Iterable[CalendarEvent]) -> list[DayCell]:
    """Builds the day-cells for one calendar month.

    :param year: Four-digit year.
    :param month: Month number, 1-12.
    :param events: Events to place; only those dated inside the month are used.
    :return: Leading empty cells followed by one cell per day, each carrying
        that day's events ordered by time.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be in 1..12, got {month}")

    by_date: dict[str, list[CalendarEvent]] = {}
    for event in events:
        by_date.setdefault(event.date, []).append(event)

    cells = [DayCell() for _ in range(leading_blanks(year, month))]
    _, days_in_month = calendar.monthrange(year, month)
    for day in range(1, days_in_month + 1):
        current = date(year, month, day)
        day_events = sorted(by_date.get(current.isoformat(), []), key=lambda e: e.time)
        cells.append(DayCell(date=current, events=day_events))
    return cells


def weeks(cells: list[DayCell]) -> list[list[DayCell]]:
    """Splits grid cells into rows of seven, padding the last row."""
    rows = [cells[i:i + 7] for i in range(0, len(cells), 7)]
    if rows and len(rows[-1]) < 7:
        rows[-1] = rows[-1] + [DayCell() for _ in range(7 - len(rows[-1]))]
    return rows


def month_title(year: int, month: int) -> str:
    """Spanish month heading, e.g. 'Febrero de 2024'."""
    return f"{MONTH_NAMES[month - 1].capitalize()} de {year}"


def previous_month(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def next_month(year: int, month: int) -> tuple[int, int]:
    return (year + 1, 1) if month == 12 else (year, month + 1)


def upcoming_events(events: t.Iterable[CalendarEvent], now: datetime) -> list[CalendarEvent]:
    """Events scheduled at or after ``now``, in the order given."""
    cutoff = now.replace(second=0, microsecond=0)
    return [event for event in events if event.starts_at >= cutoff]
