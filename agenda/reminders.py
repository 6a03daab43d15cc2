# -*- coding: utf-8 -*-
"""Voice reminder scheduler.

A ``ReminderScheduler`` wakes up on a fixed period, compares the wall clock
against every event in the store and speaks each matching event's activity
once. Matching is at minute granularity: an event is due only while the clock
reads its exact date and ``HH:MM``. A minute the process does not observe is
missed for good.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import typing as t
from datetime import datetime

from agenda.config import LOCALE, REMINDER_INTERVAL
from agenda.models import CalendarEvent
from agenda.speech import Speaker
from agenda.store import EventStore

logger = logging.getLogger(__name__)

Clock = t.Callable[[], datetime]


def reminder_utterance(event: CalendarEvent) -> str:
    return f"Recordatorio: {event.activity}"


class ReminderScheduler:
    """Periodic task that fires one spoken reminder per due event.

    The set of fired ids lives as long as the scheduler object; a new scheduler
    starts with an empty set.

    :param store: Store read on every tick; never mutated.
    :param speaker: Sink for the spoken notification.
    :param clock: Returns the current local time.
    :param interval: Seconds between ticks.
    :param locale: Locale passed to the speaker.
    """

    def __init__(
            self,
            store: EventStore,
            speaker: Speaker,
            clock: Clock = datetime.now,
            interval: float = REMINDER_INTERVAL,
            locale: str = LOCALE,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"Reminder interval must be positive, got {interval}")
        self.store = store
        self.speaker = speaker
        self.clock = clock
        self.interval = interval
        self.locale = locale
        self._fired: set[str] = set()
        self._task: t.Optional[asyncio.Task] = None

    @property
    def fired(self) -> frozenset[str]:
        return frozenset(self._fired)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def check(self) -> list[CalendarEvent]:
        """Runs one tick.

        :return: The events whose reminder was fired on this tick.
        """
        now = self.clock()
        today = now.date().isoformat()
        minute = now.strftime("%H:%M")

        fired = []
        for event in self.store.list():
            if event.date != today or event.time != minute or event.id in self._fired:
                continue
            logger.info("Triggering reminder for event %s: %s", event.id, event.activity)
            try:
                self.speaker.speak(reminder_utterance(event), self.locale)
            except Exception:
                logger.exception("Speaker failed for event %s", event.id)
            self._fired.add(event.id)
            fired.append(event)
        return fired

    def start(self) -> None:
        """Starts ticking on the running event loop. Calling it twice is a no-op."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="reminder-scheduler")

    async def stop(self) -> None:
        """Cancels the periodic task and waits for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.check()
            except Exception:
                # Keep ticking; the next minute gets a fresh chance
                logger.exception("Reminder check failed")

    async def __aenter__(self) -> ReminderScheduler:
        self.start()
        return self

    async def __aexit__(self, *exc_info: t.Any) -> None:
        await self.stop()
