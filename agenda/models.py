"""
Data models for the agenda calendar events and month grid.

This module contains the dataclasses used to represent calendar events
and the derived day-cells of a month grid.
"""
from __future__ import annotations

import re
import typing as t
from dataclasses import asdict, dataclass, field
from datetime import date, datetime

TIME_PATTERN = re.compile(r"([01][0-9]|2[0-3]):[0-5][0-9]")
DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
DEFAULT_TIME = "09:00"


def is_valid_time(value: str) -> bool:
    """Checks that a value is a fixed-width 24h ``HH:MM`` time."""
    return isinstance(value, str) and bool(TIME_PATTERN.fullmatch(value))


def is_valid_date(value: str) -> bool:
    """Checks that a value is an ISO ``YYYY-MM-DD`` calendar date."""
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


@dataclass
class CalendarEvent:
    """Represents a scheduled activity on a local date and time."""
    id: str
    date: str  # "YYYY-MM-DD"
    time: str  # "HH:MM" 24h
    activity: str

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValueError(f"Invalid event id: {self.id!r}")
        if not is_valid_date(self.date):
            raise ValueError(f"Invalid event date: {self.date!r}")
        if not is_valid_time(self.time):
            raise ValueError(f"Invalid event time: {self.time!r}")
        if not isinstance(self.activity, str):
            raise ValueError(f"Invalid event activity: {self.activity!r}")

    @property
    def sort_key(self) -> tuple[str, str]:
        return self.date, self.time

    @property
    def starts_at(self) -> datetime:
        """The local wall-clock instant the event is scheduled for."""
        return datetime.fromisoformat(f"{self.date}T{self.time}")

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: t.Mapping[str, t.Any]) -> CalendarEvent:
        """Builds an event from its persisted form.

        :param data: Mapping with ``id``, ``date``, ``time`` and ``activity`` keys.
        :return: A CalendarEvent object.
        :raises ValueError: If a key is missing or a field is malformed.
        """
        if not isinstance(data, t.Mapping):
            raise ValueError(f"Event record must be an object, got {type(data).__name__}")
        try:
            return cls(
                id=str(data["id"]),
                date=data["date"],
                time=data["time"],
                activity=data["activity"],
            )
        except KeyError as e:
            raise ValueError(f"Event record is missing field {e}") from e


@dataclass
class DayCell:
    """One cell of a month grid; ``date`` is None for leading padding."""
    date: t.Optional[date] = None
    events: list[CalendarEvent] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return self.date is None

    @property
    def day(self) -> t.Optional[int]:
        return self.date.day if self.date else None
