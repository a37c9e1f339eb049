"""Domain events emitted while events are booked and boats reassigned."""

from __future__ import annotations

from pydantic import BaseModel


class EventCreated(BaseModel):
    """Fired when a trainer registers a new regatta or training camp."""

    event_id: str


class EventUpdated(BaseModel):
    """Fired after an event's fields were edited."""

    event_id: str
    changed_fields: list[str]


class ConflictDetected(BaseModel):
    """Fired when an event's motorboat is double-booked."""

    event_id: str
    motorboat_id: str
    conflicting_event_ids: list[str]


class MotorboatReassigned(BaseModel):
    """Fired when an event is moved to another motorboat."""

    event_id: str
    previous_motorboat_id: str | None
    new_motorboat_id: str
