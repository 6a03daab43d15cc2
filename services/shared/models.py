"""
Shared Pydantic models for REST API serialization.

This module contains Pydantic equivalents of the dataclass models used by the
agenda core, ensuring consistent JSON serialization across services.
"""
from __future__ import annotations

import typing as t
from pydantic import BaseModel, Field, field_validator

from agenda.models import DEFAULT_TIME, is_valid_date, is_valid_time


class CalendarEvent(BaseModel):
    """A scheduled activity on a local date and time."""
    id: str
    date: str       # "YYYY-MM-DD"
    time: str       # "HH:MM" 24h
    activity: str


class DayCell(BaseModel):
    """
    One cell of a month grid.
    Empty padding cells have no date and no events.
    """
    date: t.Optional[str] = None
    day: t.Optional[int] = None
    events: list[CalendarEvent] = Field(default_factory=list)


class MonthGridResponse(BaseModel):
    """Response model for one month of the calendar."""
    year: int
    month: int
    title: str
    weekdays: list[str]
    cells: list[DayCell]


class FiredRemindersResponse(BaseModel):
    """Ids of the events whose reminder already fired in this process."""
    fired: list[str]


# Request models for API endpoints
class CreateEventRequest(BaseModel):
    """Request model for scheduling a new event."""
    date: str
    time: str = DEFAULT_TIME
    activity: str

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        if not is_valid_date(value):
            raise ValueError("date must be YYYY-MM-DD")
        return value

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        if not is_valid_time(value):
            raise ValueError("time must be HH:MM (24h)")
        return value


class UpdateEventRequest(BaseModel):
    """Request model for changing an existing event; omitted fields are kept."""
    date: t.Optional[str] = None
    time: t.Optional[str] = None
    activity: t.Optional[str] = None

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: t.Optional[str]) -> t.Optional[str]:
        if value is not None and not is_valid_date(value):
            raise ValueError("date must be YYYY-MM-DD")
        return value

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: t.Optional[str]) -> t.Optional[str]:
        if value is not None and not is_valid_time(value):
            raise ValueError("time must be HH:MM (24h)")
        return value
