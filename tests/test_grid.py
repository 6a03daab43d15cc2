"""Tests for month grid construction."""
from datetime import date, datetime

import pytest

from agenda.grid import (
    build_month_grid,
    leading_blanks,
    month_title,
    next_month,
    previous_month,
    upcoming_events,
    weeks,
)
from agenda.models import CalendarEvent


def test_leap_february_2024() -> None:
    """Test February 2024: Thursday start, 29 days."""
    cells = build_month_grid(2024, 2, [])

    blanks = [c for c in cells if c.empty]
    days = [c for c in cells if not c.empty]
    assert len(blanks) == 4
    assert cells[:4] == blanks
    assert len(days) == 29
    assert days[0].date == date(2024, 2, 1)
    assert days[-1].date == date(2024, 2, 29)


@pytest.mark.parametrize("year, month, expected_days", [
    (2023, 2, 28),
    (2025, 4, 30),
    (2025, 12, 31),
    (2100, 2, 28),
    (2000, 2, 29),
])
def test_days_in_month(year: int, month: int, expected_days: int) -> None:
    """Test that day counts follow the calendar, including century leap rules."""
    cells = build_month_grid(year, month, [])

    assert sum(1 for c in cells if not c.empty) == expected_days


def test_sunday_start_has_no_padding() -> None:
    """Test that a month starting on Sunday gets no leading blanks."""
    # 1 June 2025 is a Sunday
    assert leading_blanks(2025, 6) == 0
    assert not build_month_grid(2025, 6, [])[0].empty


def test_events_attached_to_their_day_sorted_by_time() -> None:
    """Test that each day carries only its events, ordered by time."""
    events = [
        CalendarEvent(id="1", date="2025-03-10", time="14:00", activity="Tarde"),
        CalendarEvent(id="2", date="2025-03-10", time="08:30", activity="Mañana"),
        CalendarEvent(id="3", date="2025-03-11", time="09:00", activity="Otro día"),
        CalendarEvent(id="4", date="2025-04-10", time="09:00", activity="Otro mes"),
    ]

    cells = build_month_grid(2025, 3, events)
    by_day = {c.day: c for c in cells if not c.empty}

    assert [e.id for e in by_day[10].events] == ["2", "1"]
    assert [e.id for e in by_day[11].events] == ["3"]
    assert by_day[12].events == []
    assert all("4" not in [e.id for e in c.events] for c in cells)


def test_grid_is_deterministic() -> None:
    """Test that the same inputs always build the same grid."""
    events = [CalendarEvent(id="1", date="2025-03-10", time="14:00", activity="Tarde")]

    assert build_month_grid(2025, 3, events) == build_month_grid(2025, 3, events)


def test_invalid_month_rejected() -> None:
    with pytest.raises(ValueError):
        build_month_grid(2025, 13, [])


def test_weeks_pads_last_row() -> None:
    """Test that rows always have seven cells."""
    rows = weeks(build_month_grid(2024, 2, []))

    assert len(rows) == 5
    assert all(len(row) == 7 for row in rows)
    assert rows[-1][-1].empty


def test_month_navigation_rolls_over_year() -> None:
    assert previous_month(2025, 1) == (2024, 12)
    assert next_month(2025, 12) == (2026, 1)
    assert next_month(2025, 5) == (2025, 6)


def test_month_title_in_spanish() -> None:
    assert month_title(2024, 2) == "Febrero de 2024"


def test_upcoming_events_excludes_past() -> None:
    """Test that only events at or after now are upcoming."""
    events = [
        CalendarEvent(id="1", date="2025-03-10", time="08:59", activity="Pasado"),
        CalendarEvent(id="2", date="2025-03-10", time="09:00", activity="Ahora"),
        CalendarEvent(id="3", date="2025-03-11", time="07:00", activity="Mañana"),
    ]

    upcoming = upcoming_events(events, datetime(2025, 3, 10, 9, 0, 30))

    assert [e.id for e in upcoming] == ["2", "3"]
