"""
FastAPI service for agenda operations.

Exposes the calendar core as REST endpoints and owns the voice reminder
scheduler: it starts with the application lifespan and is cancelled on
shutdown, so no timer outlives the service.
"""
from __future__ import annotations

import logging
import typing as t
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date, datetime

from fastapi import FastAPI, HTTPException, Request, Response

from agenda.config import AGENDA_SERVICE_PORT, DATA_PATH, LOCALE, REMINDER_INTERVAL
from agenda.editor import EventEditor
from agenda.grid import WEEKDAY_HEADERS, build_month_grid, month_title, upcoming_events
from agenda.models import CalendarEvent as EventRecord
from agenda.reminders import Clock, ReminderScheduler
from agenda.speech import ConsoleSpeaker, Speaker
from agenda.storage import JsonFileStorage
from agenda.store import EventStore
from services.shared.models import (
    CalendarEvent as PydanticCalendarEvent,
    CreateEventRequest,
    DayCell,
    FiredRemindersResponse,
    MonthGridResponse,
    UpdateEventRequest,
)

logger = logging.getLogger(__name__)


def _to_pydantic(event: EventRecord) -> PydanticCalendarEvent:
    return PydanticCalendarEvent(**asdict(event))


def create_app(
        store: t.Optional[EventStore] = None,
        speaker: t.Optional[Speaker] = None,
        clock: Clock = datetime.now,
        interval: float = REMINDER_INTERVAL,
        locale: str = LOCALE,
) -> FastAPI:
    """Builds the agenda service.

    :param store: Event store to serve; loaded from ``DATA_PATH`` on startup if omitted.
    :param speaker: Reminder sink; defaults to the console speaker.
    :param clock: Source of local time for reminders, ids and upcoming events.
    :param interval: Seconds between reminder checks.
    :param locale: Locale for spoken reminders.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load the store and run the reminder scheduler for the app's lifetime."""
        event_store = store if store is not None else EventStore.open(JsonFileStorage(DATA_PATH))
        scheduler = ReminderScheduler(
            event_store,
            speaker or ConsoleSpeaker(),
            clock=clock,
            interval=interval,
            locale=locale,
        )
        app.state.store = event_store
        # Deletes arriving over HTTP are already confirmed by the caller
        app.state.editor = EventEditor(event_store, confirm=lambda event: True, clock=clock)
        app.state.scheduler = scheduler
        scheduler.start()
        logger.info("Agenda service started with %d event(s)", len(event_store))
        try:
            yield
        finally:
            await scheduler.stop()

    app = FastAPI(
        title="Agenda Service",
        description="REST API for calendar events and voice reminders",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint for container orchestration."""
        return {
            "status": "healthy",
            "service": "agenda-service",
            "reminders_running": request.app.state.scheduler.is_running,
        }

    @app.get("/events", response_model=list[PydanticCalendarEvent])
    async def list_events(request: Request) -> list[PydanticCalendarEvent]:
        """List all events, ordered by date and time."""
        return [_to_pydantic(e) for e in request.app.state.store.list()]

    @app.get("/events/upcoming", response_model=list[PydanticCalendarEvent])
    async def list_upcoming_events(request: Request) -> list[PydanticCalendarEvent]:
        """List the events that have not happened yet."""
        events = upcoming_events(request.app.state.store.list(), clock())
        return [_to_pydantic(e) for e in events]

    @app.post("/events", response_model=PydanticCalendarEvent, status_code=201)
    async def create_event(body: CreateEventRequest, request: Request) -> PydanticCalendarEvent:
        """
        Schedule a new event.

        A blank activity is rejected with 422 and nothing is stored.
        """
        editor: EventEditor = request.app.state.editor
        editor.open_for_day(date.fromisoformat(body.date))
        editor.time = body.time
        editor.activity = body.activity
        event = editor.save()
        editor.close()
        if event is None:
            raise HTTPException(status_code=422, detail="Activity must not be blank")
        return _to_pydantic(event)

    @app.put("/events/{event_id}", response_model=PydanticCalendarEvent)
    async def update_event(event_id: str, body: UpdateEventRequest, request: Request) -> PydanticCalendarEvent:
        """
        Change an existing event; omitted fields keep their value.

        The event moves to its new position in the date/time ordering.
        """
        editor: EventEditor = request.app.state.editor
        if not editor.request_edit(event_id):
            raise HTTPException(status_code=404, detail=f"Event not found: {event_id}")
        if body.date is not None:
            editor.selected_date = date.fromisoformat(body.date)
        if body.time is not None:
            editor.time = body.time
        if body.activity is not None:
            editor.activity = body.activity
        event = editor.save()
        editor.close()
        if event is None:
            raise HTTPException(status_code=422, detail="Activity must not be blank")
        return _to_pydantic(event)

    @app.delete("/events/{event_id}", status_code=204)
    async def delete_event(event_id: str, request: Request) -> Response:
        """Delete an event. Deleting an unknown id succeeds and changes nothing."""
        request.app.state.editor.request_delete(event_id)
        return Response(status_code=204)

    @app.get("/calendar/{year}/{month}", response_model=MonthGridResponse)
    async def month_grid(year: int, month: int, request: Request) -> MonthGridResponse:
        """Day-cells for one month, Sunday-first, with each day's events."""
        if not 1 <= month <= 12 or not 1 <= year <= 9999:
            raise HTTPException(status_code=422, detail=f"Invalid month: {year}-{month}")
        cells = build_month_grid(year, month, request.app.state.store.list())
        return MonthGridResponse(
            year=year,
            month=month,
            title=month_title(year, month),
            weekdays=list(WEEKDAY_HEADERS),
            cells=[
                DayCell(
                    date=cell.date.isoformat() if cell.date else None,
                    day=cell.day,
                    events=[_to_pydantic(e) for e in cell.events],
                )
                for cell in cells
            ],
        )

    @app.get("/reminders/fired", response_model=FiredRemindersResponse)
    async def fired_reminders(request: Request) -> FiredRemindersResponse:
        """Ids whose reminder has already been spoken by this process."""
        return FiredRemindersResponse(fired=sorted(request.app.state.scheduler.fired))

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=AGENDA_SERVICE_PORT)
