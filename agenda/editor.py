# -*- coding: utf-8 -*-
"""Create/edit/delete workflow for a single calendar event.

The presentation layer drives ``EventEditor`` with discrete commands:
``open_for_day`` when an empty part of a day is selected, ``request_edit``
when an event is selected, and ``request_delete`` when its delete affordance
is used. Edit and delete are separate commands, so a delete never opens the
form.
"""
from __future__ import annotations

import logging
import typing as t
from datetime import date, datetime

from agenda.models import DEFAULT_TIME, CalendarEvent, is_valid_time
from agenda.store import EventStore

logger = logging.getLogger(__name__)

ConfirmCallback = t.Callable[[CalendarEvent], bool]


def confirmation_message(event: CalendarEvent) -> str:
    """The question asked before an event is deleted."""
    return f'¿Estás seguro que quieres eliminar la actividad "{event.activity}"?'


def _deny(event: CalendarEvent) -> bool:
    return False


class EventEditor:
    """Modal form state plus the save/delete actions that mutate the store.

    :param store: The event store to mutate.
    :param confirm: Called with the event before any delete; the delete only
        happens if it returns True. Defaults to refusing every delete.
    :param clock: Source of the current time, used to mint new ids.
    """

    def __init__(
            self,
            store: EventStore,
            confirm: ConfirmCallback = _deny,
            clock: t.Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.confirm = confirm
        self.clock = clock
        self.is_open = False
        self.selected_date: t.Optional[date] = None
        self.editing: t.Optional[CalendarEvent] = None
        self.time = DEFAULT_TIME
        self.activity = ""

    @property
    def title(self) -> str:
        return "Editar Actividad" if self.editing else "Agendar Actividad"

    def open_for_day(self, day: date) -> None:
        """Opens an empty form for a new event on ``day``."""
        self._reset()
        self.selected_date = day
        self.is_open = True

    def request_edit(self, event_id: str) -> bool:
        """Opens the form pre-filled with an existing event.

        :return: False if no event has that id; the form is left untouched.
        """
        event = self.store.get(event_id)
        if event is None:
            return False
        self.editing = event
        self.selected_date = date.fromisoformat(event.date)
        self.time = event.time
        self.activity = event.activity
        self.is_open = True
        return True

    def save(self) -> t.Optional[CalendarEvent]:
        """Creates or updates the event described by the form.

        Without a selected date, with a blank activity, or with a malformed time
        nothing changes and the form stays open.

        :return: The saved event, or None if the save was a no-op.
        """
        activity = self.activity.strip()
        if not self.is_open or self.selected_date is None or not activity:
            return None
        if not is_valid_time(self.time):
            logger.debug("Ignoring save with malformed time %r", self.time)
            return None

        day = self.selected_date.isoformat()
        if self.editing is not None:
            saved = self.store.update(self.editing.id, date=day, time=self.time, activity=activity)
            if saved is None:
                # Deleted elsewhere while the form was open
                logger.info("Event %s vanished before save; nothing updated", self.editing.id)
                self.close()
                return None
        else:
            now_ms = int(self.clock().timestamp() * 1000)
            saved = self.store.add(
                CalendarEvent(id=self.store.mint_id(now_ms), date=day, time=self.time, activity=activity)
            )
        self.close()
        return saved

    def request_delete(self, event_id: str) -> bool:
        """Deletes an event after the user confirms.

        If the form is currently editing that event, it is closed too.

        :return: True if the event was deleted.
        """
        event = self.store.get(event_id)
        if event is None or not self.confirm(event):
            return False
        self.store.delete(event_id)
        if self.editing is not None and self.editing.id == event_id:
            self.close()
        return True

    def delete_current(self) -> bool:
        """Deletes the event being edited, after confirmation, and closes the form."""
        if self.editing is None:
            return False
        if not self.confirm(self.editing):
            return False
        self.store.delete(self.editing.id)
        self.close()
        return True

    def close(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self.is_open = False
        self.selected_date = None
        self.editing = None
        self.time = DEFAULT_TIME
        self.activity = ""
