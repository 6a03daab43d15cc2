"""Tests for the voice reminder scheduler.

This module tests minute matching, once-per-event firing and the
start/stop lifecycle of the periodic task.
"""
import asyncio
from datetime import datetime

import pytest

from agenda.models import CalendarEvent
from agenda.reminders import ReminderScheduler
from agenda.speech import RecordingSpeaker
from agenda.storage import MemoryStorage
from agenda.store import EventStore


class FakeClock:
    """Clock that returns whatever time the test sets."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class BrokenSpeaker:
    """Speaker that always fails."""

    def __init__(self) -> None:
        self.calls = 0

    def speak(self, utterance: str, locale: str) -> None:
        self.calls += 1
        raise RuntimeError("no audio device")


@pytest.fixture
def store() -> EventStore:
    store = EventStore.open(MemoryStorage())
    store.add(CalendarEvent(id="1", date="2025-03-10", time="09:00", activity="Corregir exámenes"))
    return store


def test_fires_once_at_matching_minute(store: EventStore) -> None:
    """Test the scenario: one reminder at 09:00, nothing more at 09:01."""
    clock = FakeClock(datetime(2025, 3, 10, 9, 0, 12))
    speaker = RecordingSpeaker()
    scheduler = ReminderScheduler(store, speaker, clock=clock)

    fired = scheduler.check()

    assert [e.id for e in fired] == ["1"]
    assert speaker.spoken == [("Recordatorio: Corregir exámenes", "es-AR")]
    assert scheduler.fired == {"1"}

    clock.now = datetime(2025, 3, 10, 9, 1, 12)
    assert scheduler.check() == []
    assert len(speaker.spoken) == 1


def test_second_check_in_same_minute_does_not_refire(store: EventStore) -> None:
    """Test that the fired set dedupes repeated ticks within a minute."""
    clock = FakeClock(datetime(2025, 3, 10, 9, 0, 1))
    speaker = RecordingSpeaker()
    scheduler = ReminderScheduler(store, speaker, clock=clock)

    scheduler.check()
    clock.now = datetime(2025, 3, 10, 9, 0, 59)
    scheduler.check()

    assert len(speaker.spoken) == 1


def test_no_fire_on_other_day_or_minute(store: EventStore) -> None:
    speaker = RecordingSpeaker()
    for now in (datetime(2025, 3, 11, 9, 0), datetime(2025, 3, 10, 8, 59), datetime(2025, 3, 10, 9, 1)):
        ReminderScheduler(store, speaker, clock=FakeClock(now)).check()

    assert speaker.spoken == []


def test_missed_minute_is_not_retried(store: EventStore) -> None:
    """Test that a reminder whose minute was skipped never fires."""
    speaker = RecordingSpeaker()
    clock = FakeClock(datetime(2025, 3, 10, 8, 59))
    scheduler = ReminderScheduler(store, speaker, clock=clock)

    scheduler.check()
    clock.now = datetime(2025, 3, 10, 9, 2)
    scheduler.check()

    assert speaker.spoken == []
    assert scheduler.fired == frozenset()


def test_all_events_in_the_same_minute_fire(store: EventStore) -> None:
    store.add(CalendarEvent(id="2", date="2025-03-10", time="09:00", activity="Tomar lista"))
    speaker = RecordingSpeaker()
    scheduler = ReminderScheduler(store, speaker, clock=FakeClock(datetime(2025, 3, 10, 9, 0)), locale="es-ES")

    scheduler.check()

    assert sorted(speaker.spoken) == [
        ("Recordatorio: Corregir exámenes", "es-ES"),
        ("Recordatorio: Tomar lista", "es-ES"),
    ]


def test_broken_speaker_does_not_raise_or_retry(store: EventStore) -> None:
    """Test that a failing sink is logged and the event counts as fired."""
    speaker = BrokenSpeaker()
    scheduler = ReminderScheduler(store, speaker, clock=FakeClock(datetime(2025, 3, 10, 9, 0)))

    scheduler.check()
    scheduler.check()

    assert speaker.calls == 1
    assert scheduler.fired == {"1"}


def test_event_added_after_start_is_seen_next_tick(store: EventStore) -> None:
    """Test that each tick reads the store's current contents."""
    speaker = RecordingSpeaker()
    clock = FakeClock(datetime(2025, 3, 10, 10, 0))
    scheduler = ReminderScheduler(store, speaker, clock=clock)
    scheduler.check()

    store.add(CalendarEvent(id="2", date="2025-03-10", time="10:00", activity="Nuevo"))
    scheduler.check()

    assert speaker.spoken == [("Recordatorio: Nuevo", "es-AR")]


def test_independent_schedulers_have_separate_fired_sets(store: EventStore) -> None:
    clock = FakeClock(datetime(2025, 3, 10, 9, 0))
    first = ReminderScheduler(store, RecordingSpeaker(), clock=clock)
    second_speaker = RecordingSpeaker()
    second = ReminderScheduler(store, second_speaker, clock=clock)

    first.check()
    second.check()

    assert len(second_speaker.spoken) == 1


def test_rejects_non_positive_interval(store: EventStore) -> None:
    with pytest.raises(ValueError):
        ReminderScheduler(store, RecordingSpeaker(), interval=0)


@pytest.mark.asyncio
async def test_periodic_task_fires_and_stops(store: EventStore) -> None:
    """Test that the running task ticks on its interval and is cancelled by stop()."""
    speaker = RecordingSpeaker()
    scheduler = ReminderScheduler(
        store, speaker, clock=FakeClock(datetime(2025, 3, 10, 9, 0)), interval=0.01
    )

    scheduler.start()
    scheduler.start()  # second call is a no-op
    assert scheduler.is_running
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert not scheduler.is_running
    assert speaker.spoken == [("Recordatorio: Corregir exámenes", "es-AR")]


@pytest.mark.asyncio
async def test_context_manager_leaves_no_task(store: EventStore) -> None:
    """Test that leaving the async context cancels the task."""
    scheduler = ReminderScheduler(store, RecordingSpeaker(), interval=60)

    async with scheduler:
        task = scheduler._task
        assert scheduler.is_running

    assert task.cancelled()
    assert not scheduler.is_running


@pytest.mark.asyncio
async def test_stop_without_start_is_harmless(store: EventStore) -> None:
    scheduler = ReminderScheduler(store, RecordingSpeaker())

    await scheduler.stop()

    assert not scheduler.is_running
