# -*- coding: utf-8 -*-
import json
import logging
import time as _time
import typing as t

from agenda.config import EVENTS_KEY
from agenda.models import CalendarEvent
from agenda.storage import KeyValueStorage

logger = logging.getLogger(__name__)


def sort_events(events: t.Iterable[CalendarEvent]) -> list[CalendarEvent]:
    """Orders events ascending by date, then time. The sort is stable."""
    return sorted(events, key=lambda event: event.sort_key)


class EventStore:
    """Ordered in-memory collection of calendar events.

    Every mutation goes through ``replace_all``, which re-sorts and writes the
    whole collection back to storage, so the durable copy always matches
    memory, including after the last event is deleted.
    """

    def __init__(
            self,
            storage: KeyValueStorage,
            events: t.Iterable[CalendarEvent] = (),
            key: str = EVENTS_KEY,
    ) -> None:
        self.storage = storage
        self.key = key
        self._events: list[CalendarEvent] = sort_events(events)

    @classmethod
    def open(cls, storage: KeyValueStorage, key: str = EVENTS_KEY) -> "EventStore":
        """Loads the store from storage. Never raises.

        A missing record yields an empty store. A record that is not valid JSON,
        or holds malformed events, also yields an empty store and is overwritten
        with an empty list.

        :param storage: Durable key-value storage.
        :param key: Storage key for the serialized events.
        :return: The loaded EventStore.
        """
        store = cls(storage, key=key)
        raw = storage.get(key)
        if raw is None:
            return store
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a list of events, got {type(data).__name__}")
            events = [CalendarEvent.from_dict(item) for item in data]
        except (ValueError, TypeError, RecursionError) as e:
            logger.warning("Discarding corrupt events record %r: %s", key, e)
            store._persist()
            return store
        store._events = sort_events(_dedupe(events))
        return store

    def list(self) -> list[CalendarEvent]:
        """Returns the events ordered by date then time."""
        return list(self._events)

    def get(self, event_id: str) -> t.Optional[CalendarEvent]:
        for event in self._events:
            if event.id == event_id:
                return event
        return None

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return any(event.id == event_id for event in self._events)

    def replace_all(self, events: t.Iterable[CalendarEvent]) -> None:
        """Replaces the whole collection and persists it.

        :param events: The new collection; it is sorted before being stored.
        """
        self._events = sort_events(events)
        self._persist()

    def add(self, event: CalendarEvent) -> CalendarEvent:
        """Adds an event, keeping the collection ordered.

        :param event: The event to add.
        :return: The added event.
        :raises ValueError: If an event with the same id already exists.
        """
        if event.id in self:
            raise ValueError(f"Duplicate event id: {event.id}")
        self.replace_all([*self._events, event])
        return event

    def update(
            self,
            event_id: str,
            *,
            date: t.Optional[str] = None,
            time: t.Optional[str] = None,
            activity: t.Optional[str] = None,
    ) -> t.Optional[CalendarEvent]:
        """Replaces fields of the event with the given id and re-sorts.

        :return: The updated event, or None if no event has that id.
        :raises ValueError: If a new field value is malformed.
        """
        current = self.get(event_id)
        if current is None:
            return None
        updated = CalendarEvent(
            id=current.id,
            date=current.date if date is None else date,
            time=current.time if time is None else time,
            activity=current.activity if activity is None else activity,
        )
        self.replace_all(updated if event.id == event_id else event for event in self._events)
        return updated

    def delete(self, event_id: str) -> bool:
        """Removes the event with the given id.

        Deleting an unknown id leaves the collection unchanged.

        :return: True if an event was removed.
        """
        remaining = [event for event in self._events if event.id != event_id]
        removed = len(remaining) != len(self._events)
        self.replace_all(remaining)
        return removed

    def mint_id(self, now_ms: t.Optional[int] = None) -> str:
        """Returns a new id from the current millisecond timestamp.

        The timestamp is bumped until it does not collide with an existing id.
        """
        candidate = now_ms if now_ms is not None else int(_time.time() * 1000)
        while str(candidate) in self:
            candidate += 1
        return str(candidate)

    def _persist(self) -> None:
        payload = json.dumps([event.to_dict() for event in self._events], ensure_ascii=False)
        try:
            self.storage.set(self.key, payload)
        except OSError:
            # In-memory state stays authoritative; the next mutation retries the write
            logger.exception("Failed to persist %d event(s) under %r", len(self._events), self.key)


def _dedupe(events: list[CalendarEvent]) -> list[CalendarEvent]:
    """Drops events whose id was already seen, keeping the first."""
    seen: set[str] = set()
    unique = []
    for event in events:
        if event.id in seen:
            logger.warning("Dropping duplicate event id %s", event.id)
            continue
        seen.add(event.id)
        unique.append(event)
    return unique
