"""Tests for the agenda MCP server tools."""
import typing as t
from datetime import datetime

import pytest

from agenda.models import CalendarEvent
from agenda.server import create_agenda_server, format_events, format_month
from agenda.storage import MemoryStorage
from agenda.store import EventStore

FIXED_NOW = datetime(2025, 3, 10, 8, 0)


@pytest.fixture
def store() -> EventStore:
    return EventStore.open(MemoryStorage())


async def get_tool(store: EventStore, name: str) -> t.Callable:
    """Return the underlying function of a registered tool."""
    mcp = create_agenda_server(store, clock=lambda: FIXED_NOW)
    tools = await mcp.get_tools()
    return tools[name].fn


@pytest.mark.asyncio
async def test_tools_are_registered(store: EventStore) -> None:
    mcp = create_agenda_server(store)
    tools = await mcp.get_tools()

    assert set(tools) == {
        "create_event", "update_event", "delete_event",
        "list_events", "upcoming_events", "show_month",
    }


@pytest.mark.asyncio
async def test_create_and_list(store: EventStore) -> None:
    create_event = await get_tool(store, "create_event")
    list_events = await get_tool(store, "list_events")

    created = create_event(date="2025-03-10", activity="Corregir exámenes", time="14:00")

    assert isinstance(created, CalendarEvent)
    assert list_events() == [created]


@pytest.mark.asyncio
async def test_create_blank_activity_raises(store: EventStore) -> None:
    create_event = await get_tool(store, "create_event")

    with pytest.raises(ValueError):
        create_event(date="2025-03-10", activity="  ")
    assert len(store) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("day", ["mañana", "2025-W11-1", "20250310"])
async def test_create_bad_date_raises(store: EventStore, day: str) -> None:
    create_event = await get_tool(store, "create_event")

    with pytest.raises(ValueError):
        create_event(date=day, activity="Clase")
    assert len(store) == 0


@pytest.mark.asyncio
async def test_update_and_delete(store: EventStore) -> None:
    store.add(CalendarEvent(id="1", date="2025-03-10", time="09:00", activity="Clase"))
    update_event = await get_tool(store, "update_event")
    delete_event = await get_tool(store, "delete_event")

    updated = update_event(event_id="1", date="2025-03-12", activity="Clase especial")

    assert updated == CalendarEvent(id="1", date="2025-03-12", time="09:00", activity="Clase especial")
    assert delete_event(event_id="1") is True
    assert delete_event(event_id="1") is False
    assert len(store) == 0


@pytest.mark.asyncio
async def test_update_unknown_raises(store: EventStore) -> None:
    update_event = await get_tool(store, "update_event")

    with pytest.raises(ValueError):
        update_event(event_id="missing", activity="x")


@pytest.mark.asyncio
async def test_show_month_defaults_to_clock_month(store: EventStore) -> None:
    store.add(CalendarEvent(id="1", date="2025-03-10", time="09:00", activity="Clase"))
    show_month = await get_tool(store, "show_month")

    text = show_month()

    assert text.splitlines()[0].strip() == "Marzo de 2025"
    assert "10*1" in text
    assert "2025-03-10 09:00  Clase" in text


@pytest.mark.asyncio
async def test_upcoming_events_tool(store: EventStore) -> None:
    store.add(CalendarEvent(id="old", date="2025-03-09", time="09:00", activity="Ayer"))
    store.add(CalendarEvent(id="new", date="2025-03-11", time="09:00", activity="Mañana"))
    upcoming_events = await get_tool(store, "upcoming_events")

    text = upcoming_events()

    assert "Mañana" in text
    assert "Ayer" not in text
    assert "Total: 1 actividad(es)" in text


def test_format_events_empty() -> None:
    assert "No tienes actividades" in format_events([])


def test_format_month_leap_february() -> None:
    """Test that Feb 2024 starts under Thursday and ends on the 29th."""
    lines = format_month(2024, 2, []).splitlines()

    assert lines[1].split() == ["Do", "Lu", "Ma", "Mi", "Ju", "Vi", "Sa"]
    assert lines[2].split() == ["1", "2", "3"]
    assert lines[2].startswith(" " * 24 + "1")
    assert lines[-1].split()[-1] == "29"
